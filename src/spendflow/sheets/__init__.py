"""Google Sheets integration module."""
from .generator import SheetsGenerator, HEADERS

__all__ = ["SheetsGenerator", "HEADERS"]
