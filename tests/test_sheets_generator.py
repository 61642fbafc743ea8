"""Tests for the Sheets snapshot writer."""
import unittest
from datetime import datetime, timezone
from decimal import Decimal
from unittest import mock

import httplib2
from googleapiclient.errors import HttpError

from spendflow.config import get_settings
from spendflow.sheets.generator import SheetsGenerator, HEADERS
from spendflow.transactions.aggregator import Aggregator
from spendflow.transactions.categorizer import StaticCategorizer
from spendflow.transactions.models import Transaction
from spendflow.transactions.snapshot import SnapshotBuilder


class FakeRequest:
    def __init__(self, result):
        self.result = result

    def execute(self):
        return self.result


class FakeValues:
    def __init__(self, calls):
        self.calls = calls

    def clear(self, spreadsheetId, range, body):
        self.calls.append(("values.clear", {"spreadsheetId": spreadsheetId, "range": range}))
        return FakeRequest({})

    def batchUpdate(self, spreadsheetId, body):
        self.calls.append(("values.batchUpdate", body))
        return FakeRequest({})


class FakeSpreadsheets:
    def __init__(self, calls, sheets):
        self.calls = calls
        self.sheets = sheets
        self.values_resource = FakeValues(calls)

    def get(self, spreadsheetId, fields=None):
        self.calls.append(("get", {"spreadsheetId": spreadsheetId}))
        return FakeRequest({"sheets": self.sheets})

    def batchUpdate(self, spreadsheetId, body):
        self.calls.append(("batchUpdate", body))
        replies = []
        for request in body["requests"]:
            if "addSheet" in request:
                replies.append({"addSheet": {"properties": {"sheetId": 99, "title": request["addSheet"]["properties"]["title"]}}})
            else:
                replies.append({})
        return FakeRequest({"replies": replies})

    def values(self):
        return self.values_resource


class UnavailableSpreadsheets(FakeSpreadsheets):
    def get(self, spreadsheetId, fields=None):
        self.calls.append(("get", {"spreadsheetId": spreadsheetId}))
        raise HttpError(httplib2.Response({"status": 503}), b'{"error": {"message": "unavailable"}}')


class FakeSheetsService:
    def __init__(self, sheets=None):
        self.calls = []
        self.spreadsheets_resource = FakeSpreadsheets(self.calls, sheets or [])

    def spreadsheets(self):
        return self.spreadsheets_resource


def make_snapshot():
    transactions = [
        Transaction(datetime(2026, 10, 9, 18, 30), "CAFE", Decimal("120500.50")),
        Transaction(datetime(2026, 10, 3, 9, 15), "SUPERMARKET", Decimal("50000.00")),
    ]
    return SnapshotBuilder("es").build(Aggregator().aggregate(transactions), 2026, 10)


class TestSheetsGenerator(unittest.TestCase):
    """Test SheetsGenerator functionality."""

    def setUp(self):
        # Create a SheetsGenerator without running __init__ (avoid network/auth)
        self.generator = object.__new__(SheetsGenerator)
        self.service = FakeSheetsService(
            sheets=[{"properties": {"title": "Transactions", "sheetId": 7}}]
        )
        self.generator.sheets_service = self.service
        self.snapshot = make_snapshot()

    def test_clear_happens_before_write(self):
        self.generator.overwrite_snapshot("sheet123", "Transactions", self.snapshot)

        names = [name for name, _ in self.service.calls]
        self.assertEqual(names, ["get", "values.clear", "values.batchUpdate", "batchUpdate"])
        self.assertEqual(self.service.calls[1][1]["range"], "'Transactions'")

    def test_rows_and_kpi_block(self):
        self.generator.overwrite_snapshot(
            "sheet123", "Transactions", self.snapshot, StaticCategorizer("GENERAL")
        )

        body = next(payload for name, payload in self.service.calls if name == "values.batchUpdate")
        self.assertEqual(body["valueInputOption"], "RAW")
        rows, kpi = body["data"][0], body["data"][1]

        self.assertEqual(rows["range"], "'Transactions'!A1")
        self.assertEqual(rows["values"][0], HEADERS)
        self.assertEqual(rows["values"][1], ["2026-10-03 09:15:00", "SUPERMARKET", 50000.0, "GENERAL"])
        self.assertEqual(rows["values"][2], ["2026-10-09 18:30:00", "CAFE", 120500.5, "GENERAL"])

        self.assertEqual(kpi["range"], "'Transactions'!F1")
        self.assertEqual(kpi["values"][0], ["TOTAL", 170500.5])
        self.assertEqual(kpi["values"][1], ["TRANSACTIONS", 2])
        self.assertEqual(kpi["values"][2], ["MERCHANTS", 2])

    def test_amount_format_targets_existing_sheet(self):
        self.generator.overwrite_snapshot("sheet123", "Transactions", self.snapshot)

        body = self.service.calls[-1][1]
        amount_range = body["requests"][0]["repeatCell"]["range"]
        self.assertEqual(amount_range["sheetId"], 7)
        self.assertEqual(amount_range["endRowIndex"], 3)
        self.assertEqual(amount_range["startColumnIndex"], 2)

    def test_missing_sheet_is_created(self):
        self.service.spreadsheets_resource.sheets = [{"properties": {"title": "Sheet1", "sheetId": 0}}]

        self.generator.overwrite_snapshot("sheet123", "Transactions", self.snapshot)

        add_request = self.service.calls[1][1]["requests"][0]
        self.assertEqual(add_request["addSheet"]["properties"]["title"], "Transactions")
        format_body = self.service.calls[-1][1]
        self.assertEqual(format_body["requests"][0]["repeatCell"]["range"]["sheetId"], 99)

    def test_repeated_overwrite_writes_same_values(self):
        self.generator.overwrite_snapshot("sheet123", "Transactions", self.snapshot)
        first = [payload for name, payload in self.service.calls if name == "values.batchUpdate"]
        self.service.calls.clear()
        self.generator.overwrite_snapshot("sheet123", "Transactions", self.snapshot)
        second = [payload for name, payload in self.service.calls if name == "values.batchUpdate"]

        self.assertEqual(first, second)

    @mock.patch("spendflow.utils.retry.time.sleep")
    def test_sheet_lookup_retries_once_per_attempt(self, _sleep):
        self.service.spreadsheets_resource = UnavailableSpreadsheets(self.service.calls, [])

        with self.assertRaises(HttpError):
            self.generator._ensure_sheet("sheet123", "Transactions")

        gets = [name for name, _ in self.service.calls if name == "get"]
        self.assertEqual(len(gets), get_settings().retry_max_retries + 1)
        self.assertNotIn("batchUpdate", [name for name, _ in self.service.calls])

    def test_a1_quotes_sheet_names(self):
        self.assertEqual(SheetsGenerator._a1("Bob's Report", "A1"), "'Bob''s Report'!A1")


if __name__ == "__main__":
    unittest.main()
