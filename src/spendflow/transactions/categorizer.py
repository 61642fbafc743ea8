"""Merchant-to-category labelling for the report sheet."""
import json
from pathlib import Path
from typing import Dict, Optional, Protocol

import Levenshtein

from spendflow.config.settings import get_settings
from spendflow.utils.exceptions import ConfigError
from spendflow.utils.logger import get_logger

logger = get_logger()

DEFAULT_CATEGORY = "UNCATEGORIZED"


class Categorizer(Protocol):
    def categorize(self, merchant: str) -> str:
        ...


class StaticCategorizer:
    """Labels every merchant with the same category."""

    def __init__(self, label: str = DEFAULT_CATEGORY):
        self.label = label

    def categorize(self, merchant: str) -> str:
        return self.label


class MerchantMapCategorizer:
    """Rule-based lookup of merchant names with fuzzy matching."""

    def __init__(
        self,
        mappings: Dict[str, str],
        fallback: str = DEFAULT_CATEGORY,
        fuzzy_threshold: Optional[int] = None
    ):
        """
        Initialize categorizer.

        Args:
            mappings: Merchant name -> category name
            fallback: Category for merchants with no match
            fuzzy_threshold: Maximum Levenshtein distance for fuzzy match
        """
        self.mappings = {self._normalize_merchant(k): v for k, v in mappings.items()}
        self.fallback = fallback
        if fuzzy_threshold is None:
            fuzzy_threshold = get_settings().fuzzy_match_threshold
        self.fuzzy_threshold = fuzzy_threshold

    @classmethod
    def from_file(cls, path: Path, fallback: str = DEFAULT_CATEGORY) -> "MerchantMapCategorizer":
        """Load a JSON object of merchant -> category."""
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                mappings = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to load merchant categories from {path}: {e}") from e

        if not isinstance(mappings, dict):
            raise ConfigError(f"Merchant categories must be a JSON object: {path}")

        logger.info(f"Loaded {len(mappings)} merchant category rules")
        return cls(mappings, fallback=fallback)

    def categorize(self, merchant: str) -> str:
        normalized = self._normalize_merchant(merchant)

        if normalized in self.mappings:
            return self.mappings[normalized]

        best = None
        for known, category in self.mappings.items():
            distance = Levenshtein.distance(normalized, known)
            if distance <= self.fuzzy_threshold and (best is None or distance < best[0]):
                best = (distance, known, category)

        if best:
            logger.debug(f"Fuzzy merchant match: {merchant} -> {best[1]} (distance: {best[0]}) -> {best[2]}")
            return best[2]

        return self.fallback

    @staticmethod
    def _normalize_merchant(merchant: str) -> str:
        return merchant.strip().lower()


def build_categorizer(label: str = DEFAULT_CATEGORY, merchant_categories_path: Optional[str] = None) -> Categorizer:
    if merchant_categories_path:
        return MerchantMapCategorizer.from_file(Path(merchant_categories_path), fallback=label)
    return StaticCategorizer(label)
