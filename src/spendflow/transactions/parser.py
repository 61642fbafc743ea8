"""Pattern-based extraction of transactions from notification bodies."""
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol

from .models import RawTransaction, Transaction
from .normalizer import Normalizer
from spendflow.gmail.models import RawMessage
from spendflow.utils.exceptions import ConfigError
from spendflow.utils.logger import get_logger

logger = get_logger()

# Named phrase templates. Each must capture ``amount`` and ``merchant``.
PARSER_PATTERNS = {
    "debit_purchase": (
        r"purchased\s+\$\s*(?P<amount>[\d.,]+)\s+at\s+(?P<merchant>.+?)\s+with\s+debit"
    ),
    "compra_debito": (
        r"compra\s+por\s+\$\s*(?P<amount>[\d.,]+)\s+en\s+(?P<merchant>.+?)\s+"
        r"con\s+(?:tu\s+)?tarjeta\s+d[eé]bito"
    ),
}

REQUIRED_GROUPS = ("amount", "merchant")


class TransactionParser(Protocol):
    def parse(self, body: str) -> Optional[RawTransaction]:
        ...


class RegexTransactionParser:
    """Finds the first phrase-template match in a message body."""

    def __init__(self, pattern: str, name: str = "custom"):
        try:
            self.pattern = re.compile(pattern, re.IGNORECASE)
        except re.error as e:
            raise ConfigError(f"Invalid pattern for parser '{name}': {e}") from e

        missing = [g for g in REQUIRED_GROUPS if g not in self.pattern.groupindex]
        if missing:
            raise ConfigError(
                f"Pattern for parser '{name}' must define named groups: {', '.join(missing)}"
            )
        self.name = name

    def parse(self, body: str) -> Optional[RawTransaction]:
        if not body:
            return None
        match = self.pattern.search(body)
        if not match:
            return None
        return RawTransaction(
            raw_amount=match.group("amount"),
            raw_merchant=match.group("merchant")
        )

    def __repr__(self):
        return f"RegexTransactionParser(name={self.name!r})"


def get_parser(name: str = "debit_purchase", custom_pattern: Optional[str] = None) -> RegexTransactionParser:
    """Resolve the configured parser; a custom pattern wins over the name."""
    if custom_pattern:
        return RegexTransactionParser(custom_pattern, name="custom")
    if name not in PARSER_PATTERNS:
        raise ConfigError(
            f"Unknown parser '{name}', expected one of {', '.join(sorted(PARSER_PATTERNS))}"
        )
    return RegexTransactionParser(PARSER_PATTERNS[name], name=name)


@dataclass
class ExtractionResult:
    transactions: List[Transaction] = field(default_factory=list)
    messages_scanned: int = 0
    unmatched: int = 0
    rejected: int = 0

    @property
    def skipped(self) -> int:
        return self.unmatched + self.rejected


def extract_transactions(
    messages: Iterable[RawMessage],
    parser: TransactionParser,
    normalizer: Optional[Normalizer] = None
) -> ExtractionResult:
    """Parse every message, keeping discovery order and skipping bad matches."""
    normalizer = normalizer or Normalizer()
    result = ExtractionResult()

    for message in messages:
        result.messages_scanned += 1
        raw = parser.parse(message.body)
        if raw is None:
            result.unmatched += 1
            logger.debug(f"No transaction in message {message.message_id}")
            continue

        amount = normalizer.normalize_amount(raw.raw_amount)
        if amount is None or amount <= 0:
            result.rejected += 1
            logger.warning(f"Skipping message {message.message_id}: invalid amount {raw.raw_amount!r}")
            continue

        merchant = normalizer.normalize_merchant(raw.raw_merchant)
        if merchant is None:
            result.rejected += 1
            logger.warning(f"Skipping message {message.message_id}: empty merchant")
            continue

        result.transactions.append(Transaction(
            date=message.received_at,
            merchant=merchant,
            amount=amount,
            source_id=message.message_id
        ))

    logger.info(
        f"Extracted {len(result.transactions)} transactions from {result.messages_scanned} messages "
        f"({result.unmatched} unmatched, {result.rejected} rejected)"
    )
    return result
