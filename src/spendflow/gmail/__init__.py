"""Gmail integration module."""
from .models import RawMessage
from .source import GmailMessageSource

__all__ = ["RawMessage", "GmailMessageSource"]
