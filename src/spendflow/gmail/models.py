"""Data models for inbox operations."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class RawMessage:
    """A notification e-mail as fetched from the inbox."""
    message_id: str
    body: str
    received_at: datetime
    subject: Optional[str] = None
