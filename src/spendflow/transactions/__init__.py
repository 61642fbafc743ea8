"""Transaction extraction and aggregation."""
from .models import RawTransaction, Transaction, AggregationResult, Summary, ReportSnapshot
from .normalizer import Normalizer, normalize_amount, normalize_merchant
from .parser import (
    TransactionParser,
    RegexTransactionParser,
    ExtractionResult,
    get_parser,
    extract_transactions
)
from .aggregator import Aggregator
from .categorizer import Categorizer, StaticCategorizer, MerchantMapCategorizer, build_categorizer
from .snapshot import SnapshotBuilder
from .window import ExtractionWindow, reporting_window, build_search_query

__all__ = [
    "RawTransaction",
    "Transaction",
    "AggregationResult",
    "Summary",
    "ReportSnapshot",
    "Normalizer",
    "normalize_amount",
    "normalize_merchant",
    "TransactionParser",
    "RegexTransactionParser",
    "ExtractionResult",
    "get_parser",
    "extract_transactions",
    "Aggregator",
    "Categorizer",
    "StaticCategorizer",
    "MerchantMapCategorizer",
    "build_categorizer",
    "SnapshotBuilder",
    "ExtractionWindow",
    "reporting_window",
    "build_search_query",
]
