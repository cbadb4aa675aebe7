"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines the exception hierarchy shared by every scanner package.

- Provides clear exception hierarchy
- Enables specific error handling at the per-token boundary
- Includes context for debugging

============================================================
EXCEPTION HIERARCHY
============================================================
ScannerException (base)
├── ConfigurationError
├── DiscoveryFatalError
├── TokenPipelineError
└── StateTransitionError

Package-specific errors (data_sources, sentiment) derive from
ScannerException as well so a single ``except ScannerException``
covers every handled failure.

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# SEVERITY LEVELS
# ============================================================

class Severity(Enum):
    """Exception severity levels for logging."""

    LOW = "low"
    """Minor issue, informational."""

    MEDIUM = "medium"
    """Moderate issue, a single token or source is affected."""

    HIGH = "high"
    """Serious issue, a whole job is affected."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class ScannerException(Exception):
    """
    Base exception for all scanner errors.

    All exceptions carry:
    - severity: for log routing
    - context: for debugging
    - cause: the wrapped lower-level exception, if any
    - timestamp: when the error occurred
    """

    default_severity: Severity = Severity.MEDIUM

    def __init__(
        self,
        message: str,
        severity: Optional[Severity] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)

        self.message = message
        self.severity = severity or self.default_severity
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(ScannerException):
    """Error in configuration."""

    default_severity = Severity.HIGH

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if config_key:
            context["config_key"] = config_key
        if actual_value is not None:
            context["actual_value"] = str(actual_value)[:100]

        super().__init__(message, context=context, **kwargs)


# ============================================================
# PIPELINE ERRORS
# ============================================================

class DiscoveryFatalError(ScannerException):
    """The general market listing could not be fetched; the run cannot continue."""

    default_severity = Severity.HIGH


class TokenPipelineError(ScannerException):
    """A single token's enrichment failed. Absorbed by the job manager."""

    def __init__(self, token_id: str, stage: str, cause: Optional[BaseException] = None):
        super().__init__(
            message=f"Token {token_id} failed at stage '{stage}'",
            context={"token_id": token_id, "stage": stage},
            cause=cause,
        )
        self.token_id = token_id
        self.stage = stage


class StateTransitionError(ScannerException):
    """Invalid job state transition."""

    default_severity = Severity.HIGH

    def __init__(
        self,
        message: str,
        from_state: Optional[str] = None,
        to_state: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if from_state:
            context["from_state"] = from_state
        if to_state:
            context["to_state"] = to_state

        super().__init__(message, context=context, **kwargs)
