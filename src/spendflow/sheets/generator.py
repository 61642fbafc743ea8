"""Google Sheets writer for the monthly transaction snapshot."""
from typing import List, Optional

from googleapiclient.discovery import build

from spendflow.transactions.categorizer import Categorizer, StaticCategorizer
from spendflow.transactions.models import ReportSnapshot
from spendflow.utils.auth import get_credentials
from spendflow.utils.formatting import format_timestamp, SHEET_CURRENCY_PATTERN
from spendflow.utils.logger import get_logger
from spendflow.utils.retry import retry_with_backoff

logger = get_logger()

HEADERS = ["DATE", "MERCHANT", "AMOUNT", "CATEGORY"]
KPI_COLUMN = "F"


class SheetsGenerator:
    """Overwrites one sheet tab with the current snapshot."""

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

        self.sheets_service = build("sheets", "v4", credentials=credentials)
        logger.info("Sheets Generator initialized")

    def overwrite_snapshot(
        self,
        spreadsheet_id: str,
        sheet_name: str,
        snapshot: ReportSnapshot,
        categorizer: Optional[Categorizer] = None
    ) -> None:
        """Replace the tab contents with the snapshot (clear, then write)."""
        categorizer = categorizer or StaticCategorizer()
        sheet_id = self._ensure_sheet(spreadsheet_id, sheet_name)

        self._clear_sheet(spreadsheet_id, sheet_name)

        data = [
            {"range": self._a1(sheet_name, "A1"), "values": self.build_rows(snapshot, categorizer)},
            {"range": self._a1(sheet_name, f"{KPI_COLUMN}1"), "values": self.build_kpi_block(snapshot)},
        ]
        self._write_values(spreadsheet_id, data)
        self._format_amounts(spreadsheet_id, sheet_id, snapshot.transaction_count)

        logger.info(
            f"Wrote {snapshot.transaction_count} transactions to '{sheet_name}' "
            f"for {snapshot.summary.period_label} {snapshot.summary.year}"
        )

    @staticmethod
    def build_rows(snapshot: ReportSnapshot, categorizer: Categorizer) -> List[list]:
        rows = [list(HEADERS)]
        for txn in snapshot.transactions:
            rows.append([
                format_timestamp(txn.date),
                txn.merchant,
                float(txn.amount),
                categorizer.categorize(txn.merchant)
            ])
        return rows

    @staticmethod
    def build_kpi_block(snapshot: ReportSnapshot) -> List[list]:
        return [
            ["TOTAL", float(snapshot.summary.total)],
            ["TRANSACTIONS", snapshot.transaction_count],
            ["MERCHANTS", snapshot.merchant_count],
        ]

    @retry_with_backoff()
    def _get_sheet_info(self, spreadsheet_id: str) -> list:
        result = self.sheets_service.spreadsheets().get(
            spreadsheetId=spreadsheet_id,
            fields="sheets.properties"
        ).execute()
        return result.get("sheets", [])

    def _ensure_sheet(self, spreadsheet_id: str, sheet_name: str) -> int:
        """Return the sheetId of the tab, creating it when missing.

        Not retried as a whole: the lookup retries itself, and addSheet is not
        idempotent.
        """
        for sheet in self._get_sheet_info(spreadsheet_id):
            if sheet["properties"]["title"] == sheet_name:
                return sheet["properties"]["sheetId"]

        response = self.sheets_service.spreadsheets().batchUpdate(
            spreadsheetId=spreadsheet_id,
            body={"requests": [{"addSheet": {"properties": {"title": sheet_name}}}]}
        ).execute()
        logger.info(f"Created sheet '{sheet_name}'")
        return response["replies"][0]["addSheet"]["properties"]["sheetId"]

    @retry_with_backoff()
    def _clear_sheet(self, spreadsheet_id: str, sheet_name: str) -> None:
        self.sheets_service.spreadsheets().values().clear(
            spreadsheetId=spreadsheet_id,
            range=self._a1(sheet_name),
            body={}
        ).execute()

    @retry_with_backoff()
    def _write_values(self, spreadsheet_id: str, data: list) -> None:
        self.sheets_service.spreadsheets().values().batchUpdate(
            spreadsheetId=spreadsheet_id,
            body={"valueInputOption": "RAW", "data": data}
        ).execute()

    @retry_with_backoff()
    def _format_amounts(self, spreadsheet_id: str, sheet_id: int, row_count: int) -> None:
        """Apply the currency format to the AMOUNT column and the TOTAL cell."""
        number_format = {"type": "CURRENCY", "pattern": SHEET_CURRENCY_PATTERN}
        requests = [
            {
                "repeatCell": {
                    "range": {
                        "sheetId": sheet_id,
                        "startRowIndex": 1,
                        "endRowIndex": row_count + 1,
                        "startColumnIndex": 2,
                        "endColumnIndex": 3
                    },
                    "cell": {"userEnteredFormat": {"numberFormat": number_format}},
                    "fields": "userEnteredFormat.numberFormat"
                }
            },
            {
                "repeatCell": {
                    "range": {
                        "sheetId": sheet_id,
                        "startRowIndex": 0,
                        "endRowIndex": 1,
                        "startColumnIndex": 6,
                        "endColumnIndex": 7
                    },
                    "cell": {"userEnteredFormat": {"numberFormat": number_format}},
                    "fields": "userEnteredFormat.numberFormat"
                }
            },
        ]
        self.sheets_service.spreadsheets().batchUpdate(
            spreadsheetId=spreadsheet_id,
            body={"requests": requests}
        ).execute()

    @staticmethod
    def _a1(sheet_name: str, cell: Optional[str] = None) -> str:
        """Quoted A1 reference; sheet names may contain spaces or quotes."""
        quoted = "'" + sheet_name.replace("'", "''") + "'"
        return f"{quoted}!{cell}" if cell else quoted
