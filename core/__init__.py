"""
OpenBibles - Core Module

Foundational components with no dependencies on the rest of the system:
- Unified error handling
- Retry policy for network transport

Usage:
    from core import OpenBiblesConfigError, RetryPolicy, RetryConfig
"""
from core.errors import (
    ErrorSeverity,
    ErrorContext,
    OpenBiblesError,
    OpenBiblesConfigError,
    CorpusFileError,
    ReferenceResolutionError,
    MalformedReferenceError,
    UnknownBookError,
    ImportTransportError,
)
from core.resilience import RetryConfig, RetryPolicy

__all__ = [
    "ErrorSeverity",
    "ErrorContext",
    "OpenBiblesError",
    "OpenBiblesConfigError",
    "CorpusFileError",
    "ReferenceResolutionError",
    "MalformedReferenceError",
    "UnknownBookError",
    "ImportTransportError",
    "RetryConfig",
    "RetryPolicy",
]
