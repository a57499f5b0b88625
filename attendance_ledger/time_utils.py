"""
Time handling: 12-hour clock parsing, shift start resolution, notice arithmetic.
"""
import re
from datetime import date, datetime
from typing import Optional, Tuple

# Notice used when a shift start can't be parsed: treated as ample notice
AMPLE_NOTICE_HOURS = 999.0

# H[:MM][am|pm], also tolerates "5:15p" and "5 PM"
CLOCK_RE = re.compile(r"(\d{1,2})(?::(\d{2}))?\s*([ap])?\.?m?\b", re.IGNORECASE)

MONTH_ABBRS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")


def to_24_hour(hour: int, meridiem: Optional[str]) -> int:
    """pm adds 12 unless already 12; am maps 12 to 0; no meridiem leaves hour as-is."""
    m = (meridiem or "").lower()[:1]
    if m == "p" and hour != 12:
        return hour + 12
    if m == "a" and hour == 12:
        return 0
    return hour


def parse_clock(s: str) -> Optional[Tuple[int, int]]:
    """Parse 'H[:MM][am|pm]' to (hour, minute) 24-hour. Returns None if invalid."""
    if not s or not isinstance(s, str):
        return None
    m = CLOCK_RE.search(s.strip())
    if not m:
        return None
    hour = to_24_hour(int(m.group(1)), m.group(3))
    minute = int(m.group(2) or 0)
    if hour < 0 or hour > 23 or minute > 59:
        return None
    return hour, minute


def range_start(time_range: str) -> Optional[Tuple[int, int]]:
    """Start of 'Start - End'. Only the start matters for notice."""
    if not time_range:
        return None
    start = time_range.split("-", 1)[0]
    return parse_clock(start)


def start_hour(time_range: str) -> Optional[int]:
    start = range_start(time_range)
    return start[0] if start else None


def shift_start_datetime(shift_date: date, time_range: str) -> Optional[datetime]:
    """Combine shift date with the range's start time. None if the start can't be parsed."""
    start = range_start(time_range)
    if start is None:
        return None
    return datetime(shift_date.year, shift_date.month, shift_date.day, start[0], start[1])


def hours_notice(shift_date: date, time_range: str, requested_at: datetime) -> float:
    """Hours between the request and the shift start. Unparseable start -> AMPLE_NOTICE_HOURS."""
    start = shift_start_datetime(shift_date, time_range)
    if start is None:
        return AMPLE_NOTICE_HOURS
    return (start - requested_at).total_seconds() / 3600.0


def whole_days_between(earlier: date, later: date) -> int:
    """Calendar-day difference, ignoring the time of day."""
    return (later - earlier).days


def within_days(a: date, b: date, window_days: int) -> bool:
    """True if a and b are at most window_days apart, in either direction."""
    return abs((a - b).days) <= window_days


def month_number(name: str) -> Optional[int]:
    """'Jan' / 'January' / 'jan' -> 1."""
    key = (name or "").strip().lower()[:3]
    if key in MONTH_ABBRS:
        return MONTH_ABBRS.index(key) + 1
    return None


def safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_date(d: date) -> str:
    """MM/DD/YYYY, the format the ledger and notices print."""
    return f"{d.month:02d}/{d.day:02d}/{d.year}"


def days_elapsed(since: date, now: datetime) -> int:
    return (now.date() - since).days
