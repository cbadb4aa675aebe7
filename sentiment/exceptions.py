"""
Sentiment Exceptions - Social metrics error hierarchy.

A platform failure fails the whole aggregation call; the job
manager absorbs it at the per-token boundary.
"""

from typing import Any, Optional

from core.exceptions import ScannerException


class SocialMetricsError(ScannerException):
    """Social metrics for a token could not be assembled."""

    def __init__(
        self,
        message: str,
        token_id: Optional[str] = None,
        platform: Optional[str] = None,
        cause: Optional[BaseException] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        context = dict(details or {})
        if token_id:
            context["token_id"] = token_id
        if platform:
            context["platform"] = platform
        super().__init__(message, context=context, cause=cause)
        self.token_id = token_id
        self.platform = platform


class SentimentAnalysisError(ScannerException):
    """The sentiment analyzer could not score a text."""

    def __init__(
        self,
        message: str,
        analyzer: str = "",
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        context: dict[str, Any] = {"analyzer": analyzer}
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, context=context, cause=cause)
        self.analyzer = analyzer
        self.status_code = status_code


__all__ = [
    "SocialMetricsError",
    "SentimentAnalysisError",
]
