"""Tests for the extraction window."""
import unittest
from datetime import datetime, timezone, timedelta

from spendflow.transactions.window import build_search_query, reporting_window, parse_month


class TestReportingWindow(unittest.TestCase):

    def test_current_month_in_timezone(self):
        now = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

        window = reporting_window("America/Bogota", now=now)

        self.assertEqual((window.year, window.month), (2026, 10))
        self.assertEqual(window.start.strftime("%Y-%m-%d %H:%M:%S"), "2026-10-01 00:00:00")
        self.assertEqual(window.end.strftime("%Y-%m-%d %H:%M:%S"), "2026-10-31 23:59:59")
        self.assertEqual(window.start.utcoffset(), timedelta(hours=-5))

    def test_epoch_bounds(self):
        window = reporting_window("America/Bogota", year=2026, month=10)

        expected_after = int(datetime(2026, 10, 1, 5, 0, tzinfo=timezone.utc).timestamp())
        expected_before = int(datetime(2026, 11, 1, 5, 0, tzinfo=timezone.utc).timestamp())
        self.assertEqual(window.after_epoch, expected_after)
        self.assertEqual(window.before_epoch, expected_before)

    def test_month_boundary_uses_local_time(self):
        # 03:00 UTC on Nov 1st is still October 31st in Bogota
        now = datetime(2026, 11, 1, 3, 0, tzinfo=timezone.utc)

        window = reporting_window("America/Bogota", now=now)

        self.assertEqual(window.month, 10)
        self.assertEqual(window.run_id, "2026-10")

    def test_december_and_leap_february(self):
        december = reporting_window("UTC", year=2026, month=12)
        february = reporting_window("UTC", year=2028, month=2)

        self.assertEqual(december.end.day, 31)
        self.assertEqual(december.end.year, 2026)
        self.assertEqual(february.end.day, 29)

    def test_before_bound_is_next_month_start(self):
        december = reporting_window("UTC", year=2026, month=12)

        expected = int(datetime(2027, 1, 1, tzinfo=timezone.utc).timestamp())
        self.assertEqual(december.before_epoch, expected)
        # the last second of the month is still inside the exclusive bound
        self.assertLess(int(december.end.timestamp()), december.before_epoch)


class TestBuildSearchQuery(unittest.TestCase):

    def test_appends_epoch_bounds(self):
        window = reporting_window("America/Bogota", year=2026, month=10)

        query = build_search_query("label:bank", window)

        self.assertEqual(query, f"label:bank after:{window.after_epoch} before:{window.before_epoch}")
        self.assertEqual(query, "label:bank after:1790830800 before:1793509200")

    def test_blank_query_keeps_only_bounds(self):
        window = reporting_window("UTC", year=2026, month=10)

        self.assertTrue(build_search_query("", window).startswith("after:"))


class TestParseMonth(unittest.TestCase):

    def test_valid(self):
        self.assertEqual(parse_month("2026-03"), (2026, 3))

    def test_invalid(self):
        for value in ["2026-13", "March", "2026/03"]:
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    parse_month(value)


if __name__ == "__main__":
    unittest.main()
