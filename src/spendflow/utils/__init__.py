"""Utility modules."""
from .logger import get_logger, set_run_context, set_log_level
from .exceptions import (
    SpendFlowError,
    ConfigError,
    NetworkError,
    MessageSourceError,
    SheetsError,
    ReportError,
    ValidationError,
    RetryableError,
    RetryableNetworkError
)
from .retry import retry_with_backoff

__all__ = [
    "get_logger",
    "set_run_context",
    "set_log_level",
    "SpendFlowError",
    "ConfigError",
    "NetworkError",
    "MessageSourceError",
    "SheetsError",
    "ReportError",
    "ValidationError",
    "RetryableError",
    "RetryableNetworkError",
    "retry_with_backoff"
]
