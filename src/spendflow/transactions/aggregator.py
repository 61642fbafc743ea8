"""Transaction aggregation module."""
from decimal import Decimal
from typing import Dict, Iterable

from .models import Transaction, AggregationResult
from spendflow.utils.logger import get_logger
from spendflow.utils.exceptions import ValidationError

logger = get_logger()


class Aggregator:
    """Aggregates transactions into a grand total and per-merchant totals."""

    def aggregate(self, transactions: Iterable[Transaction]) -> AggregationResult:
        """
        Aggregate transactions by merchant.

        Args:
            transactions: Transactions in discovery order

        Returns:
            AggregationResult with transactions sorted by date; equal dates
            keep their discovery order

        Raises:
            ValidationError: If there is nothing to aggregate
        """
        ordered = tuple(sorted(transactions, key=lambda txn: txn.date))
        if not ordered:
            raise ValidationError("Cannot aggregate empty transaction list")

        total = Decimal(0)
        categories: Dict[str, Decimal] = {}
        for txn in ordered:
            total += txn.amount
            # Merchant keys are exact: "Cafe" and "CAFE" stay separate
            categories[txn.merchant] = categories.get(txn.merchant, Decimal(0)) + txn.amount

        logger.info(
            f"Aggregated {len(ordered)} transactions into {len(categories)} merchants, total {total}"
        )

        return AggregationResult(
            transactions=ordered,
            total=total,
            categories=categories
        )
