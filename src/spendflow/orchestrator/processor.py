"""Run orchestration: Gmail -> parse -> aggregate -> Sheets -> report.

One invocation processes one calendar month end to end. The core steps are
pure; only the message source and the two sinks touch the network, and any
failure there propagates to the caller and aborts the run.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from spendflow.config.manager import Config
from spendflow.gmail.source import GmailMessageSource
from spendflow.report.distributor import ReportDistributor
from spendflow.sheets.generator import SheetsGenerator
from spendflow.transactions.aggregator import Aggregator
from spendflow.transactions.categorizer import Categorizer, build_categorizer
from spendflow.transactions.models import ReportSnapshot
from spendflow.transactions.normalizer import Normalizer
from spendflow.transactions.parser import extract_transactions, get_parser
from spendflow.transactions.snapshot import SnapshotBuilder
from spendflow.transactions.window import ExtractionWindow, build_search_query, reporting_window
from spendflow.utils.logger import get_logger, set_run_context

logger = get_logger()


class RunOutcome(Enum):
    HAS_DATA = "has_data"
    NO_DATA = "no_data"


@dataclass
class RunResult:
    outcome: RunOutcome
    window: ExtractionWindow
    snapshot: Optional[ReportSnapshot] = None
    messages_scanned: int = 0
    messages_skipped: int = 0
    report_message_id: Optional[str] = None


class ReportOrchestrator:
    """Orchestrates the flow: Gmail -> Parser -> Aggregator -> Sheets -> Mail."""

    def __init__(
        self,
        config: Config,
        source: Optional[GmailMessageSource] = None,
        sheets: Optional[SheetsGenerator] = None,
        distributor: Optional[ReportDistributor] = None,
        categorizer: Optional[Categorizer] = None
    ):
        self.config = config
        self.parser = get_parser(config.parser, config.custom_pattern)
        self.normalizer = Normalizer(allow_whole_amounts=config.allow_whole_amounts)
        self.aggregator = Aggregator()
        self.snapshot_builder = SnapshotBuilder(config.locale)
        self.categorizer = categorizer or build_categorizer(
            config.category_label,
            config.merchant_categories_path
        )
        self._source = source
        self._sheets = sheets
        self._distributor = distributor

    @property
    def source(self) -> GmailMessageSource:
        if self._source is None:
            self._source = GmailMessageSource(timezone_name=self.config.timezone, **self._auth_kwargs())
        return self._source

    @property
    def sheets(self) -> SheetsGenerator:
        if self._sheets is None:
            self._sheets = SheetsGenerator(**self._auth_kwargs())
        return self._sheets

    @property
    def distributor(self) -> ReportDistributor:
        if self._distributor is None:
            self._distributor = ReportDistributor(**self._auth_kwargs())
        return self._distributor

    def _auth_kwargs(self) -> dict:
        return {
            "service_account_path": self.config.service_account_path,
            "delegated_user": self.config.delegated_user,
            "oauth_client_secrets": self.config.oauth_client_secrets,
            "oauth_token_path": self.config.oauth_token_path,
        }

    def build_snapshot(self, window: ExtractionWindow) -> RunResult:
        """Fetch and transform one window without touching any sink."""
        logger.info(f"Searching inbox: {build_search_query(self.config.search_query, window)}")
        messages = self.source.search(
            self.config.search_query,
            window.after_epoch,
            window.before_epoch
        )
        extraction = extract_transactions(messages, self.parser, self.normalizer)

        result = RunResult(
            outcome=RunOutcome.NO_DATA,
            window=window,
            messages_scanned=extraction.messages_scanned,
            messages_skipped=extraction.skipped
        )
        if not extraction.transactions:
            return result

        aggregation = self.aggregator.aggregate(extraction.transactions)
        result.snapshot = self.snapshot_builder.build(aggregation, window.year, window.month)
        result.outcome = RunOutcome.HAS_DATA
        return result

    def run(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        dry_run: bool = False,
        now: Optional[datetime] = None
    ) -> RunResult:
        """Run the pipeline for one month; defaults to the current month."""
        window = reporting_window(self.config.timezone, now=now, year=year, month=month)
        set_run_context(window.run_id)
        try:
            logger.info(f"Starting run for {window.start:%Y-%m-%d} .. {window.end:%Y-%m-%d} ({self.config.timezone})")
            result = self.build_snapshot(window)

            if result.outcome is RunOutcome.NO_DATA:
                logger.info("No transactions found for this period; nothing to report")
                return result

            snapshot = result.snapshot
            logger.info(
                f"{snapshot.summary.period_label} {snapshot.summary.year}: "
                f"{snapshot.transaction_count} transactions, "
                f"{snapshot.merchant_count} merchants, total {snapshot.summary.total}"
            )
            if dry_run:
                logger.info("Dry run: skipping sheet update and report delivery")
                return result

            self.sheets.overwrite_snapshot(
                self.config.spreadsheet_id,
                self.config.sheet_name,
                snapshot,
                self.categorizer
            )
            result.report_message_id = self.distributor.distribute(
                self.config.spreadsheet_id,
                snapshot,
                recipients=self.config.recipients,
                cc=self.config.cc,
                sender_name=self.config.sender_name,
                locale=self.config.locale,
                run_at=datetime.now(window.start.tzinfo)
            )
            return result
        finally:
            set_run_context(None)
