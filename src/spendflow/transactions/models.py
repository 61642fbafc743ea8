"""Data models for parsed transactions and report snapshots."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Mapping, Optional, Tuple

from spendflow.utils.exceptions import ValidationError


@dataclass(frozen=True)
class RawTransaction:
    """Fields captured by a parser, before normalization."""
    raw_amount: str
    raw_merchant: str


@dataclass(frozen=True)
class Transaction:
    """Transaction data."""
    date: datetime
    merchant: str
    amount: Decimal
    source_id: Optional[str] = None

    def __post_init__(self):
        if not self.merchant or self.merchant != self.merchant.strip():
            raise ValidationError(f"Merchant must be trimmed and non-empty: {self.merchant!r}")
        if not isinstance(self.amount, Decimal):
            raise ValidationError(f"Amount must be a Decimal, got {type(self.amount).__name__}")
        if self.amount <= 0:
            raise ValidationError(f"Amount must be positive: {self.amount}")


@dataclass(frozen=True)
class AggregationResult:
    """Sorted transactions with grand total and per-merchant totals."""
    transactions: Tuple[Transaction, ...]
    total: Decimal
    categories: Mapping[str, Decimal]  # merchant -> amount


@dataclass(frozen=True)
class Summary:
    total: Decimal
    categories: Mapping[str, Decimal]
    period_label: str
    year: int
    month: int


@dataclass(frozen=True)
class ReportSnapshot:
    """Everything one run hands to the sheet and report sinks."""
    transactions: Tuple[Transaction, ...]
    summary: Summary

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def merchant_count(self) -> int:
        return len(self.summary.categories)

    @property
    def pdf_filename(self) -> str:
        return f"Financial_Report_{self.summary.period_label}_{self.summary.year}.pdf"
