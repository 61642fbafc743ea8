"""Gmail message source for bank notification e-mails."""
import base64
import html
import re
from datetime import datetime, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo

from googleapiclient.discovery import build

from .models import RawMessage
from spendflow.transactions.window import search_query
from spendflow.utils.auth import get_credentials
from spendflow.utils.logger import get_logger
from spendflow.utils.retry import retry_with_backoff

logger = get_logger()

_TAG_RE = re.compile(r"<[^>]+>")
_BLOCK_TAG_RE = re.compile(r"<\s*(br|/p|/div|/tr|/li)[^>]*>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<(style|script)[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)


class GmailMessageSource:
    """Searches the inbox and returns message bodies with their timestamps."""

    def __init__(
        self,
        timezone_name: str = "UTC",
        service_account_path: Optional[str] = None,
        delegated_user: Optional[str] = None,
        oauth_client_secrets: Optional[str] = None,
        oauth_token_path: Optional[str] = None,
        page_size: int = 100
    ):
        credentials = get_credentials(
            service_account_path=service_account_path,
            delegated_user=delegated_user,
            oauth_client_secrets=oauth_client_secrets,
            oauth_token_path=oauth_token_path
        )
        self.service = build("gmail", "v1", credentials=credentials)
        self.tz = ZoneInfo(timezone_name)
        self.page_size = page_size

    def search(self, query_text: str, after_epoch: int, before_epoch: int) -> List[RawMessage]:
        """Return all messages matching ``query_text`` inside the epoch window."""
        query = search_query(query_text, after_epoch, before_epoch)
        message_ids = self._list_message_ids(query)
        logger.info(f"Found {len(message_ids)} messages for query: {query}")

        messages = []
        for message_id in message_ids:
            messages.append(self._fetch_message(message_id))
        return messages

    def _list_message_ids(self, query: str) -> List[str]:
        ids = []
        page_token = None
        while True:
            response = self._list_page(query, page_token)
            ids.extend(item["id"] for item in response.get("messages", []))
            page_token = response.get("nextPageToken")
            if not page_token:
                break
        return ids

    @retry_with_backoff()
    def _list_page(self, query: str, page_token: Optional[str]) -> dict:
        return self.service.users().messages().list(
            userId="me",
            q=query,
            maxResults=self.page_size,
            pageToken=page_token
        ).execute()

    @retry_with_backoff()
    def _fetch_message(self, message_id: str) -> RawMessage:
        message = self.service.users().messages().get(
            userId="me",
            id=message_id,
            format="full"
        ).execute()
        return self.to_raw_message(message, self.tz)

    @classmethod
    def to_raw_message(cls, message: dict, tz=timezone.utc) -> RawMessage:
        """Convert a Gmail API ``format=full`` message resource."""
        payload = message.get("payload", {})
        received_at = datetime.fromtimestamp(int(message["internalDate"]) / 1000, tz=timezone.utc).astimezone(tz)
        subject = next(
            (h["value"] for h in payload.get("headers", []) if h.get("name", "").lower() == "subject"),
            None
        )
        return RawMessage(
            message_id=message["id"],
            body=cls.extract_body(payload),
            received_at=received_at,
            subject=subject
        )

    @classmethod
    def extract_body(cls, payload: dict) -> str:
        """Plain-text body of a message payload, falling back to stripped HTML."""
        plain = cls._find_part(payload, "text/plain")
        if plain is not None:
            return plain

        markup = cls._find_part(payload, "text/html")
        if markup is not None:
            return cls._html_to_text(markup)

        return ""

    @classmethod
    def _find_part(cls, part: dict, mime_type: str) -> Optional[str]:
        if part.get("mimeType") == mime_type:
            data = part.get("body", {}).get("data")
            if data:
                return cls._decode(data)

        for child in part.get("parts", []) or []:
            found = cls._find_part(child, mime_type)
            if found is not None:
                return found
        return None

    @staticmethod
    def _decode(data: str) -> str:
        padded = data + "=" * (-len(data) % 4)
        return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")

    @staticmethod
    def _html_to_text(markup: str) -> str:
        text = _STYLE_RE.sub(" ", markup)
        text = _BLOCK_TAG_RE.sub("\n", text)
        text = _TAG_RE.sub(" ", text)
        text = html.unescape(text)
        lines = [re.sub(r"[ \t\xa0]+", " ", line).strip() for line in text.splitlines()]
        return "\n".join(line for line in lines if line)
