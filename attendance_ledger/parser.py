"""
Scheduling page parser. Pulls ShiftEvents out of text copy-pasted from the
pickup (trades awaiting approval) and call-off (pending time off) pages.

Pasted pages arrive with UI chrome, table cells and line breaks in arbitrary
places, so both parsers work on a single-spaced copy of the text and anchor
on the "Name Weekday, Month Day, Year" shape. Nothing here raises on bad
input: anchors whose date doesn't resolve are dropped.
"""
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterator, List, Optional, Set, Tuple

from . import time_utils
from .config import PolicyConfig
from .names import to_display_form, to_match_key

logger = logging.getLogger(__name__)

PICKUP = "pickup"
CALLOFF = "calloff"

PICKUP_COMMENT = "Shift pickup"

# UI words that look like capitalized name tokens
CHROME_WORDS: Set[str] = {
    "approve", "reject", "deny", "pickup", "unassigned", "comment", "request",
    "requested", "from", "through", "days", "choose", "want", "published",
    "date", "time", "trade", "trades", "pending", "awaiting", "approval",
}
# Position/role tags that sit right before the next employee's name
ROLE_WORDS: Set[str] = {"student", "host", "door", "din", "br", "supe", "fsw"}

_MONTHS = r"Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"
_NAME = r"(?P<name>\b[A-Z][A-Za-z'-]+(?:\s+[A-Z][A-Za-z'-]+){1,2})"
_DATE = (
    r"(?P<date>(?i:(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun)[a-z]*,?\s+"
    r"(?P<month>" + _MONTHS + r")[a-z]*\s+(?P<day>\d{1,2}),?\s+(?P<year>\d{4})))"
)
_MERIDIEM = r"(?i:[ap]\.?m?\b)?"
# Lookbehind keeps "Jan-2-10:15a" (requested timestamp) from reading as a range
_RANGE = (
    r"(?P<range>(?<![\w:-])\d{1,2}(?::\d{2})?\s*" + _MERIDIEM
    + r"\s*-\s*\d{1,2}(?::\d{2})?\s*" + _MERIDIEM + r")"
)

PICKUP_RE = re.compile(_NAME + r"\s+" + _DATE + r"\s+" + _RANGE)
CALLOFF_ANCHOR_RE = re.compile(r"(?:(?i:Approve\s+Deny|Deny)\s+)?" + _NAME + r"\s+" + _DATE)
TIME_RANGE_RE = re.compile(_RANGE)

# Requested timestamp on the call-off page, e.g. "Jan-12-3:45p"
REQUESTED_RE = re.compile(
    r"\b(" + _MONTHS + r")-(\d{1,2})\s*-\s*(\d{1,2}):(\d{2})\s*([ap])",
    re.IGNORECASE,
)
REQUESTED_MARKER_RE = re.compile(r"\b(?:" + _MONTHS + r")-\d{1,2}", re.IGNORECASE)

_BOILERPLATE_RES = [
    re.compile(r"Comment to include.*", re.IGNORECASE),
    re.compile(r"Choose if want.*", re.IGNORECASE),
    re.compile(r"\bPublished\b", re.IGNORECASE),
    re.compile(r"\b(?:Approve|Deny)\b", re.IGNORECASE),
]
# Hours count column that precedes the comment
_LEADING_COUNT_RE = re.compile(r"^[\d.]+\s*(?:hrs?|hours?)?\s+", re.IGNORECASE)
_SPACE_RE = re.compile(r"\s+")

_TAG_MAX_WORDS = 4


@dataclass(frozen=True)
class ShiftEvent:
    """One pickup or call-off pulled from a pasted page."""
    employee_name: str   # display form "Last, First"
    shift_date: date
    shift_time_range: str  # "5:15pm - 9:05pm"; only the start matters
    requested_at: Optional[datetime]
    comment: str
    kind: str  # PICKUP or CALLOFF
    position_tag: str = ""
    source_text: str = ""  # trimmed page text the event came from, for review

    @property
    def is_pickup(self) -> bool:
        return self.kind == PICKUP

    @property
    def is_host_shift(self) -> bool:
        tag = (self.position_tag or "").lower()
        return "host" in tag or "door" in tag


def collapse_whitespace(text: str) -> str:
    """All whitespace/line-break runs -> single spaces."""
    return _SPACE_RE.sub(" ", text or "").strip()


def _scan_anchors(pattern: re.Pattern, text: str, reserved: Set[str]) -> Iterator[re.Match]:
    """
    Yield pattern matches whose name has no reserved token. A rejected candidate
    restarts the scan right after its first token, so a real name following stray
    UI text in the same window is still found.
    """
    pos = 0
    while pos <= len(text):
        m = pattern.search(text, pos)
        if m is None:
            return
        tokens = m.group("name").split()
        if any(t.lower() in reserved for t in tokens):
            logger.debug("Skipping name candidate %r (reserved word)", m.group("name"))
            pos = m.start("name") + len(tokens[0])
            continue
        yield m
        pos = m.end()


def _anchor_date(m: re.Match) -> Optional[date]:
    month = time_utils.month_number(m.group("month"))
    if month is None:
        return None
    return time_utils.safe_date(int(m.group("year")), month, int(m.group("day")))


def _position_tag(span: str) -> str:
    """Leading words after the time range, up to the first chrome word."""
    words = []
    for w in span.split():
        if w.lower() in CHROME_WORDS or len(words) >= _TAG_MAX_WORDS:
            break
        words.append(w)
    return " ".join(words)


def parse_pickup_page(text: str, config: PolicyConfig) -> List[ShiftEvent]:
    """Pickup page: 'Name Weekday, Month Day, Year Start - End [PositionTag]' per request."""
    full_text = collapse_whitespace(text)
    reserved = CHROME_WORDS | ROLE_WORDS
    matches = list(_scan_anchors(PICKUP_RE, full_text, reserved))
    now = config.now()

    events = []
    for i, m in enumerate(matches):
        shift_date = _anchor_date(m)
        if shift_date is None:
            logger.debug("Dropping pickup %r: bad date %r", m.group("name"), m.group("date"))
            continue
        next_start = matches[i + 1].start() if i + 1 < len(matches) else len(full_text)
        tag = _position_tag(full_text[m.end():next_start])
        events.append(ShiftEvent(
            employee_name=to_display_form(m.group("name")),
            shift_date=shift_date,
            shift_time_range=m.group("range").strip(),
            requested_at=now,
            comment=PICKUP_COMMENT,
            kind=PICKUP,
            position_tag=tag,
            source_text=full_text[m.start():next_start][:200].strip(),
        ))
    return events


def parse_requested_at(span: str, reference_year: int) -> Optional[datetime]:
    """'Mon-DD-HH:MMa/p' -> datetime in reference_year. None if absent or invalid."""
    m = REQUESTED_RE.search(span or "")
    if not m:
        return None
    month = time_utils.month_number(m.group(1))
    hour = time_utils.to_24_hour(int(m.group(3)), m.group(5))
    try:
        return datetime(reference_year, month, int(m.group(2)), hour, int(m.group(4)))
    except (TypeError, ValueError):
        return None


def extract_comment(span: str) -> str:
    """Free text before the requested-timestamp marker, minus the time range and page boilerplate."""
    marker = REQUESTED_MARKER_RE.search(span)
    region = span[:marker.start()] if marker else span
    region = TIME_RANGE_RE.sub(" ", region, count=1)
    for rx in _BOILERPLATE_RES:
        region = rx.sub(" ", region)
    region = collapse_whitespace(region)
    region = _LEADING_COUNT_RE.sub("", region)
    return region.strip(" ,-")


def _calloff_anchors(full_text: str) -> List[Tuple[re.Match, Optional[date]]]:
    reserved = CHROME_WORDS | ROLE_WORDS
    return [(m, _anchor_date(m)) for m in _scan_anchors(CALLOFF_ANCHOR_RE, full_text, reserved)]


def parse_calloff_page(text: str, config: PolicyConfig) -> List[ShiftEvent]:
    """
    Call-off page: collect (name, date) anchors, then read each anchor's span up to
    the next anchor for time range, comment and requested timestamp.

    When no requested timestamp is found, requested_at is the processing time.
    This is an approximation that biases the event toward a no-notice outcome;
    it does not try to guess when the request was really made.
    """
    full_text = collapse_whitespace(text)
    anchors = _calloff_anchors(full_text)
    seen: Set[Tuple[str, date]] = set()

    events = []
    for i, (m, shift_date) in enumerate(anchors):
        name = m.group("name")
        if shift_date is None:
            logger.debug("Dropping call-off %r: bad date %r", name, m.group("date"))
            continue
        key = (to_match_key(name), shift_date)
        if key in seen:
            continue
        seen.add(key)

        end = anchors[i + 1][0].start() if i + 1 < len(anchors) else len(full_text)
        span = full_text[m.end():end]

        range_match = TIME_RANGE_RE.search(span)
        shift_time = range_match.group("range").strip() if range_match else config.standard_shift_time_default

        requested_at = parse_requested_at(span, config.reference_year)
        if requested_at is None:
            logger.debug("No requested timestamp for %s on %s; using processing time", name, shift_date)
            requested_at = config.now()

        events.append(ShiftEvent(
            employee_name=to_display_form(name),
            shift_date=shift_date,
            shift_time_range=shift_time,
            requested_at=requested_at,
            comment=extract_comment(span),
            kind=CALLOFF,
            source_text=span[:200].strip(),
        ))
    return events


def parse_pages(pickup_text: str, calloff_text: str, config: PolicyConfig) -> List[ShiftEvent]:
    """Pickups then call-offs, each in document order."""
    events = []
    if pickup_text and pickup_text.strip():
        events.extend(parse_pickup_page(pickup_text, config))
    if calloff_text and calloff_text.strip():
        events.extend(parse_calloff_page(calloff_text, config))
    logger.info("Parsed %d events from pasted pages", len(events))
    return events
