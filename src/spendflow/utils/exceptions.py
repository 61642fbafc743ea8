"""Custom exception classes for SpendFlow."""


class SpendFlowError(Exception):
    """Base exception for SpendFlow."""
    pass


class ConfigError(SpendFlowError):
    """Configuration-related errors."""
    pass


class NetworkError(SpendFlowError):
    """Network and API-related errors."""
    pass


class MessageSourceError(SpendFlowError):
    """Inbox search and message retrieval errors."""
    pass


class SheetsError(SpendFlowError):
    """Google Sheets errors."""
    pass


class ReportError(SpendFlowError):
    """PDF export and mail delivery errors."""
    pass


class ValidationError(SpendFlowError):
    """Data validation errors."""
    pass


# Retryable errors
class RetryableError(SpendFlowError):
    """Base class for errors that should trigger retry."""
    pass


class RetryableNetworkError(RetryableError, NetworkError):
    """Network errors that can be retried."""
    pass
