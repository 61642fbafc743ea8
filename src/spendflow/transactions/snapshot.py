"""Assembly of the immutable report snapshot."""
from types import MappingProxyType

from .models import AggregationResult, ReportSnapshot, Summary
from spendflow.utils.formatting import month_name


class SnapshotBuilder:
    """Builds the ReportSnapshot for one reporting month."""

    def __init__(self, locale: str = "es"):
        self.locale = locale

    def period_label(self, month: int) -> str:
        return month_name(month, self.locale).upper()

    def build(self, aggregation: AggregationResult, year: int, month: int) -> ReportSnapshot:
        summary = Summary(
            total=aggregation.total,
            categories=MappingProxyType(dict(aggregation.categories)),
            period_label=self.period_label(month),
            year=year,
            month=month
        )
        return ReportSnapshot(
            transactions=tuple(aggregation.transactions),
            summary=summary
        )
