"""
Data Source Exceptions - Failures of the upstream market data API.

Every error here is a ScannerException so the job manager can treat
any handled failure uniformly.
"""

from typing import Any, Optional

from core.exceptions import ScannerException, Severity


class DataSourceError(ScannerException):
    """Base exception for all data source errors."""

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        context: Optional[dict[str, Any]] = None,
        severity: Optional[Severity] = None,
    ) -> None:
        context = dict(context or {})
        if source_name:
            context["source_name"] = source_name
        super().__init__(message, severity=severity, context=context, cause=original_error)
        self.source_name = source_name
        self.original_error = original_error

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.source_name:
            parts.append(f"[source={self.source_name}]")
        if self.original_error:
            parts.append(f"(caused by: {self.original_error})")
        return " ".join(parts)


class UpstreamError(DataSourceError):
    """
    Upstream request failed.

    status_code is None for network failures and timeouts.
    """

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        response_body: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        context = dict(context or {})
        if status_code is not None:
            context["status_code"] = status_code
        if url:
            context["url"] = url
        super().__init__(message, source_name, original_error, context)
        self.status_code = status_code
        self.url = url
        self.response_body = response_body

    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    def is_server_error(self) -> bool:
        return self.status_code is not None and 500 <= self.status_code < 600

    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500

    @property
    def is_retryable(self) -> bool:
        """Network errors, timeouts, 429 and 5xx are worth another attempt."""
        return self.status_code is None or self.is_rate_limited() or self.is_server_error()


class RateLimitError(UpstreamError):
    """HTTP 429 from upstream."""

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        retry_after: Optional[float] = None,
        url: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            source_name,
            status_code=429,
            url=url,
            context=context,
        )
        self.retry_after = retry_after
        if retry_after is not None:
            self.context["retry_after"] = retry_after


class CircuitOpenError(DataSourceError):
    """The circuit breaker is open; the call was not attempted."""

    default_severity = Severity.HIGH

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        retry_in: Optional[float] = None,
    ) -> None:
        super().__init__(
            message,
            source_name,
            context={"retry_in": round(retry_in, 2)} if retry_in is not None else None,
        )
        self.retry_in = retry_in


__all__ = [
    "DataSourceError",
    "UpstreamError",
    "RateLimitError",
    "CircuitOpenError",
]
