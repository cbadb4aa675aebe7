"""
Core Module Package.

This package contains the infrastructure components
that all other scanner packages depend on.

Components:
- clock: Unified time abstraction
- cache: TTL result cache
- exceptions: Custom exception hierarchy
"""

from .cache import CacheEntry, ResultCache
from .clock import ClockProtocol, MockClock, SystemClock, parse_iso8601
from .exceptions import (
    ConfigurationError,
    DiscoveryFatalError,
    ScannerException,
    Severity,
    StateTransitionError,
    TokenPipelineError,
)


__all__ = [
    "CacheEntry",
    "ResultCache",
    "ClockProtocol",
    "MockClock",
    "SystemClock",
    "parse_iso8601",
    "ConfigurationError",
    "DiscoveryFatalError",
    "ScannerException",
    "Severity",
    "StateTransitionError",
    "TokenPipelineError",
]
