"""PDF export of the report sheet and delivery by e-mail."""
import base64
import io
from datetime import datetime
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional, Sequence

from googleapiclient.discovery import build
from googleapiclient.http import MediaIoBaseDownload

from spendflow.transactions.models import ReportSnapshot
from spendflow.utils.auth import get_credentials
from spendflow.utils.exceptions import ReportError
from spendflow.utils.formatting import format_amount, format_timestamp
from spendflow.utils.logger import get_logger
from spendflow.utils.retry import retry_with_backoff

logger = get_logger()

PDF_MIME_TYPE = "application/pdf"


class ReportDistributor:
    """Renders the spreadsheet to PDF and mails it to the recipients."""

    def __init__(
        self,
        service_account_path: Optional[str] = None,
        delegated_user: Optional[str] = None,
        oauth_client_secrets: Optional[str] = None,
        oauth_token_path: Optional[str] = None
    ):
        credentials = get_credentials(
            service_account_path=service_account_path,
            delegated_user=delegated_user,
            oauth_client_secrets=oauth_client_secrets,
            oauth_token_path=oauth_token_path
        )
        self.drive_service = build("drive", "v3", credentials=credentials)
        self.gmail_service = build("gmail", "v1", credentials=credentials)

    def distribute(
        self,
        spreadsheet_id: str,
        snapshot: ReportSnapshot,
        recipients: Sequence[str],
        cc: Sequence[str] = (),
        sender_name: Optional[str] = None,
        locale: str = "es",
        run_at: Optional[datetime] = None
    ) -> str:
        """Export, compose and send the report. Returns the sent message id."""
        pdf_bytes = self.export_pdf(spreadsheet_id)
        message = self.compose_message(
            snapshot,
            pdf_bytes,
            recipients=recipients,
            cc=cc,
            sender=formataddr((sender_name, self.sender_address())) if sender_name else None,
            locale=locale,
            run_at=run_at or datetime.now()
        )
        return self.send(message)

    @retry_with_backoff()
    def export_pdf(self, spreadsheet_id: str) -> bytes:
        """Render the current state of the spreadsheet as PDF."""
        request = self.drive_service.files().export_media(
            fileId=spreadsheet_id,
            mimeType=PDF_MIME_TYPE
        )
        buffer = io.BytesIO()
        downloader = MediaIoBaseDownload(buffer, request)
        done = False
        while not done:
            _, done = downloader.next_chunk()

        content = buffer.getvalue()
        if not content:
            raise ReportError(f"Empty PDF export for spreadsheet {spreadsheet_id}")
        logger.debug(f"Exported PDF ({len(content)} bytes)")
        return content

    @retry_with_backoff()
    def sender_address(self) -> str:
        profile = self.gmail_service.users().getProfile(userId="me").execute()
        return profile["emailAddress"]

    @staticmethod
    def compose_body(snapshot: ReportSnapshot, run_at: datetime, locale: str = "es") -> str:
        summary = snapshot.summary
        lines = [
            "Financial report",
            "",
            f"Generated: {format_timestamp(run_at)}",
            f"Period: {summary.period_label} {summary.year}",
            f"Total spent: {format_amount(summary.total, locale)}",
            f"Merchants: {snapshot.merchant_count}",
            f"Transactions: {snapshot.transaction_count}",
            "",
            f"The full report is attached as {snapshot.pdf_filename}.",
        ]
        return "\n".join(lines)

    @classmethod
    def compose_message(
        cls,
        snapshot: ReportSnapshot,
        pdf_bytes: bytes,
        recipients: Sequence[str],
        cc: Sequence[str] = (),
        sender: Optional[str] = None,
        locale: str = "es",
        run_at: Optional[datetime] = None
    ) -> EmailMessage:
        if not recipients:
            raise ReportError("No recipients configured for the report")

        message = EmailMessage()
        message["To"] = ", ".join(recipients)
        if cc:
            message["Cc"] = ", ".join(cc)
        if sender:
            message["From"] = sender
        message["Subject"] = f"Financial Report - {snapshot.summary.period_label} {snapshot.summary.year}"
        message.set_content(cls.compose_body(snapshot, run_at or datetime.now(), locale))
        message.add_attachment(
            pdf_bytes,
            maintype="application",
            subtype="pdf",
            filename=snapshot.pdf_filename
        )
        return message

    def send(self, message: EmailMessage) -> str:
        """Send through Gmail. Not retried: a retry could deliver twice."""
        raw = base64.urlsafe_b64encode(message.as_bytes()).decode("ascii")
        sent = self.gmail_service.users().messages().send(
            userId="me",
            body={"raw": raw}
        ).execute()
        logger.info(f"Report sent to {message['To']} (message id {sent.get('id')})")
        return sent.get("id")
