"""Locale-dependent display helpers for report output."""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from spendflow.utils.exceptions import ConfigError

MONTH_NAMES = {
    "es": [
        "enero", "febrero", "marzo", "abril", "mayo", "junio",
        "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
    ],
    "en": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
}

# (thousands separator, decimal separator)
SEPARATORS = {
    "es": (".", ","),
    "en": (",", "."),
}

SUPPORTED_LOCALES = tuple(MONTH_NAMES)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _check_locale(locale: str) -> None:
    if locale not in MONTH_NAMES:
        raise ConfigError(f"Unsupported locale '{locale}', expected one of {', '.join(SUPPORTED_LOCALES)}")


def month_name(month: int, locale: str = "es") -> str:
    """Full month name for 1-based ``month``."""
    _check_locale(locale)
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {month}")
    return MONTH_NAMES[locale][month - 1]


def format_amount(amount: Decimal, locale: str = "es", symbol: str = "$") -> str:
    """Format a Decimal as currency, e.g. ``$170.500,50`` for ``es``."""
    _check_locale(locale)
    thousands, decimal_sep = SEPARATORS[locale]
    quantized = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    grouped = f"{abs(quantized):,.2f}"
    # Swap through a placeholder so "," and "." can trade places
    localized = grouped.replace(",", "\0").replace(".", decimal_sep).replace("\0", thousands)
    return f"{sign}{symbol}{localized}"


# Sheets applies the spreadsheet locale separators to this pattern
SHEET_CURRENCY_PATTERN = '"$"#,##0.00'


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)
