"""Normalization of locale-formatted amounts and merchant names."""
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

THOUSANDS_SEPARATOR = "."
DECIMAL_SEPARATOR = ","

_CURRENCY_PREFIX = re.compile(r"^[$\s]+")


class Normalizer:
    """Converts raw captured strings into canonical values.

    Amounts use ``.`` for thousands and ``,`` for decimals ("1.234,56").
    A value without a decimal separator is rejected unless
    ``allow_whole_amounts`` is set.
    """

    def __init__(self, allow_whole_amounts: bool = False):
        self.allow_whole_amounts = allow_whole_amounts

    def normalize_amount(self, raw: Optional[str]) -> Optional[Decimal]:
        """Return the amount as Decimal, or None if it is not a valid number."""
        if raw is None:
            return None

        text = _CURRENCY_PREFIX.sub("", raw.strip())
        if not text:
            return None

        digits = text.replace(THOUSANDS_SEPARATOR, "")
        separators = digits.count(DECIMAL_SEPARATOR)

        if separators == 0:
            if not self.allow_whole_amounts or not _is_digits(digits):
                return None
            return Decimal(digits)

        if separators > 1:
            return None

        whole, fraction = digits.split(DECIMAL_SEPARATOR)
        if not _is_digits(whole) or not _is_digits(fraction):
            return None

        try:
            return Decimal(f"{whole}.{fraction}")
        except InvalidOperation:
            return None

    @staticmethod
    def normalize_merchant(raw: Optional[str]) -> Optional[str]:
        """Trim surrounding whitespace; None if nothing is left."""
        if raw is None:
            return None
        merchant = raw.strip()
        return merchant or None


def _is_digits(value: str) -> bool:
    return bool(value) and value.isascii() and value.isdigit()


_default = Normalizer()


def normalize_amount(raw: Optional[str]) -> Optional[Decimal]:
    return _default.normalize_amount(raw)


def normalize_merchant(raw: Optional[str]) -> Optional[str]:
    return Normalizer.normalize_merchant(raw)
