"""Date parsing for spreadsheet cells and inclusive date windows.

Every parser returns a datetime or None; None means the text was not in that
format, and each caller decides what an unparseable date means for it.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from pydantic import BaseModel

ISO_DATE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})(?:[T ](\d{1,2}):(\d{2})(?::(\d{2}))?)?"
)
SLASH_DATE = re.compile(
    r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:\s+(\d{1,2}):(\d{2})(?::(\d{2}))?)?"
)
SERIAL_DATE = re.compile(r"^\d+(?:\.\d+)?$")

SPREADSHEET_EPOCH = datetime(1899, 12, 30)


def _build(
    year: str,
    month: str,
    day: str,
    hour: Optional[str],
    minute: Optional[str],
    second: Optional[str],
) -> Optional[datetime]:
    try:
        return datetime(
            int(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
        )
    except ValueError:
        return None


def parse_iso_date(text: Optional[str]) -> Optional[datetime]:
    """Parse 'YYYY-MM-DD' with an optional time part."""
    match = ISO_DATE.match((text or "").strip())
    if not match:
        return None
    year, month, day, hour, minute, second = match.groups()
    return _build(year, month, day, hour, minute, second)


def parse_slash_date(text: Optional[str]) -> Optional[datetime]:
    """Parse 'M/D/YYYY' with an optional time part; trailing text is ignored."""
    match = SLASH_DATE.match((text or "").strip())
    if not match:
        return None
    month, day, year, hour, minute, second = match.groups()
    return _build(year, month, day, hour, minute, second)


def parse_serial_date(text: Optional[str]) -> Optional[datetime]:
    """Parse a spreadsheet date serial (days since 1899-12-30)."""
    raw = (text or "").strip()
    if not SERIAL_DATE.match(raw):
        return None
    try:
        return SPREADSHEET_EPOCH + timedelta(days=float(raw))
    except OverflowError:
        return None


def parse_sheet_date(text: Optional[str]) -> Optional[datetime]:
    """Parse any of the date formats found in the sheets."""
    for parser in (parse_iso_date, parse_slash_date, parse_serial_date):
        parsed = parser(text)
        if parsed is not None:
            return parsed
    return None


def format_us_date(value: datetime) -> str:
    """Format as M/D/YYYY without zero padding."""
    return f"{value.month}/{value.day}/{value.year}"


class DateWindow(BaseModel):
    """An inclusive [start, end] window of timezone-aware datetimes."""

    start: datetime
    end: datetime

    @classmethod
    def from_query(
        cls,
        start: Optional[str],
        end: Optional[str],
        utc_offset_hours: float = 8.0,
    ) -> Optional["DateWindow"]:
        """Build the window covering whole days start..end at a fixed UTC offset.

        Returns None unless both bounds are given. Raises ValueError on
        malformed dates.
        """
        if not start or not end:
            return None

        tz = timezone(timedelta(hours=utc_offset_hours))
        start_day = date.fromisoformat(start.strip())
        end_day = date.fromisoformat(end.strip())
        return cls(
            start=datetime.combine(start_day, time.min, tzinfo=tz),
            end=datetime.combine(end_day, time(23, 59, 59, 999000), tzinfo=tz),
        )

    def contains(self, value: datetime) -> bool:
        """Check membership; naive datetimes are read in the window's offset."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=self.start.tzinfo)
        return self.start <= value <= self.end
