"""Calendar-month extraction window."""
import calendar
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class ExtractionWindow:
    start: datetime
    end: datetime
    year: int
    month: int

    @property
    def after_epoch(self) -> int:
        return int(self.start.timestamp())

    @property
    def before_epoch(self) -> int:
        """First second of the next month; Gmail's ``before:`` is exclusive."""
        year, month = (self.year + 1, 1) if self.month == 12 else (self.year, self.month + 1)
        return int(datetime(year, month, 1, tzinfo=self.start.tzinfo).timestamp())

    @property
    def run_id(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def reporting_window(
    timezone: str,
    now: Optional[datetime] = None,
    year: Optional[int] = None,
    month: Optional[int] = None
) -> ExtractionWindow:
    """Window from the first to the last second of a month in ``timezone``.

    Defaults to the month containing ``now``.
    """
    tz = ZoneInfo(timezone)
    if year is None or month is None:
        now = now.astimezone(tz) if now else datetime.now(tz)
        year, month = now.year, now.month

    last_day = calendar.monthrange(year, month)[1]
    return ExtractionWindow(
        start=datetime(year, month, 1, 0, 0, 0, tzinfo=tz),
        end=datetime(year, month, last_day, 23, 59, 59, tzinfo=tz),
        year=year,
        month=month
    )


def search_query(query_text: str, after_epoch: int, before_epoch: int) -> str:
    """Gmail search string restricted to ``[after_epoch, before_epoch)``."""
    return f"{query_text} after:{after_epoch} before:{before_epoch}".strip()


def build_search_query(query_text: str, window: ExtractionWindow) -> str:
    return search_query(query_text, window.after_epoch, window.before_epoch)


def parse_month(value: str) -> tuple:
    """Parse ``YYYY-MM`` into ``(year, month)``."""
    try:
        parsed = datetime.strptime(value, "%Y-%m")
    except ValueError as e:
        raise ValueError(f"Expected YYYY-MM, got {value!r}") from e
    return parsed.year, parsed.month
