"""Tests for snapshot assembly."""
import dataclasses
import unittest
from datetime import datetime, timezone
from decimal import Decimal

from spendflow.transactions.aggregator import Aggregator
from spendflow.transactions.models import Transaction
from spendflow.transactions.snapshot import SnapshotBuilder
from spendflow.utils.exceptions import ConfigError


class TestSnapshotBuilder(unittest.TestCase):
    """Test SnapshotBuilder functionality."""

    def setUp(self):
        transactions = [
            Transaction(datetime(2026, 10, 9, tzinfo=timezone.utc), "CAFE", Decimal("120500.50")),
            Transaction(datetime(2026, 10, 5, tzinfo=timezone.utc), "SUPERMARKET", Decimal("50000.00")),
        ]
        self.aggregation = Aggregator().aggregate(transactions)

    def test_build_spanish_label(self):
        snapshot = SnapshotBuilder("es").build(self.aggregation, 2026, 10)

        self.assertEqual(snapshot.summary.period_label, "OCTUBRE")
        self.assertEqual(snapshot.summary.year, 2026)
        self.assertEqual(snapshot.summary.month, 10)
        self.assertEqual(snapshot.summary.total, Decimal("170500.50"))
        self.assertEqual([t.merchant for t in snapshot.transactions], ["SUPERMARKET", "CAFE"])

    def test_build_english_label(self):
        snapshot = SnapshotBuilder("en").build(self.aggregation, 2026, 10)
        self.assertEqual(snapshot.summary.period_label, "OCTOBER")

    def test_pdf_filename_and_counts(self):
        snapshot = SnapshotBuilder("es").build(self.aggregation, 2026, 10)

        self.assertEqual(snapshot.pdf_filename, "Financial_Report_OCTUBRE_2026.pdf")
        self.assertEqual(snapshot.merchant_count, 2)
        self.assertEqual(snapshot.transaction_count, 2)

    def test_snapshot_is_immutable(self):
        snapshot = SnapshotBuilder("es").build(self.aggregation, 2026, 10)

        with self.assertRaises(dataclasses.FrozenInstanceError):
            snapshot.summary = None
        with self.assertRaises(TypeError):
            snapshot.summary.categories["CAFE"] = Decimal("0")
        self.assertIsInstance(snapshot.transactions, tuple)

    def test_unknown_locale(self):
        with self.assertRaises(ConfigError):
            SnapshotBuilder("fr").build(self.aggregation, 2026, 10)


if __name__ == "__main__":
    unittest.main()
