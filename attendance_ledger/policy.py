"""
Attendance point policy. classify() maps one ShiftEvent to exactly one code;
rules are checked in order and the first that applies wins.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from . import codes, time_utils
from .config import PolicyConfig
from .parser import ShiftEvent

logger = logging.getLogger(__name__)

SICK_KEYWORDS = (
    "sick", "ill", "fever", "cough", "cold", "flu", "nausea", "vomit",
    "headache", "migraine", "stomach", "broken", "injury", "injured",
    "doctor", "hospital", "clinic", "health", "medical", "unwell",
    "not feeling well", "don't feel well", "feeling unwell", "throat",
    "sore", "ache", "pain", "dizzy", "diarrhea", "covid", "virus",
)
ACADEMIC_KEYWORDS = ("prelim", "exam", "midterm", "test")
FINAL_KEYWORD = "final"

SICK_NOTICE_HOURS = 2
EVENING_START_HOUR = 16   # prelim exemption: shifts starting 4pm or later
MORNING_END_HOUR = 14     # weekend morning: shifts starting before 2pm
ANY_DAY_RULE_DAYS = 2

# date.weekday(): Monday == 0
TUESDAY, THURSDAY, SATURDAY, SUNDAY = 1, 3, 5, 6


@dataclass(frozen=True)
class InfractionClassification:
    """Code, reason text and point delta for one event."""
    code: str
    reason: str
    points: int


def _result(code: str, reason: str) -> InfractionClassification:
    return InfractionClassification(code=code, reason=reason, points=codes.points_for(code))


def _contains_any(text: str, keywords) -> bool:
    return any(kw in text for kw in keywords)


def is_prelim_slot(shift_date: date, time_range: str) -> bool:
    """Tuesday/Thursday shift starting at or after 4pm."""
    hour = time_utils.start_hour(time_range)
    return shift_date.weekday() in (TUESDAY, THURSDAY) and hour is not None and hour >= EVENING_START_HOUR


def is_weekend_morning(shift_date: date, time_range: str) -> bool:
    """Saturday/Sunday shift starting before 2pm."""
    hour = time_utils.start_hour(time_range)
    return shift_date.weekday() in (SATURDAY, SUNDAY) and hour is not None and hour < MORNING_END_HOUR


def notice_hours(event: ShiftEvent) -> Optional[float]:
    """Hours of notice, or None when the request time is unknown."""
    if event.requested_at is None:
        return None
    return time_utils.hours_notice(event.shift_date, event.shift_time_range, event.requested_at)


def classify(event: ShiftEvent, config: PolicyConfig) -> InfractionClassification:
    """Pure function of the event and config. Every event gets exactly one code."""
    if event.is_pickup:
        code = codes.WO_HOST if event.is_host_shift else codes.WO
        return _result(code, "Shift covered by another employee")

    comment = (event.comment or "").lower()
    if FINAL_KEYWORD in comment:
        return _result(codes.PRELIM, "Final exam - excused absence")
    if _contains_any(comment, ACADEMIC_KEYWORDS) and is_prelim_slot(event.shift_date, event.shift_time_range):
        return _result(codes.PRELIM, "Prelim exam - excused absence (Tue/Thu evening)")

    notice = notice_hours(event)

    if _contains_any(comment, SICK_KEYWORDS):
        weekend_morning = is_weekend_morning(event.shift_date, event.shift_time_range)
        if weekend_morning or (notice is not None and notice >= SICK_NOTICE_HOURS):
            if notice is None:
                return _result(codes.NS_S, "Sick callout for a weekend morning shift")
            return _result(codes.NS_S, f"Sick callout with {notice:.1f} hours notice")
        if notice is None:
            return _result(codes.NS_LS, "Late sick callout - request time unknown (requires 2+ hours)")
        return _result(
            codes.NS_LS,
            f"Late sick callout - only {notice:.1f} hours notice (requires {SICK_NOTICE_HOURS}+ hours)",
        )

    if notice is None or notice < 0:
        return _result(codes.NS_NC, "No show / No call - no prior notice given")

    if config.allow_any_day_2days_rule:
        days = time_utils.whole_days_between(event.requested_at.date(), event.shift_date)
        if days >= ANY_DAY_RULE_DAYS:
            return _result(codes.NS_C, f"Called out {days} days before the shift (2-day rule)")

    window = config.notice_window_hours
    if notice >= window:
        return _result(codes.NS_C, f"Called out with {notice:.1f} hours notice (>={window:g} hours)")
    return _result(codes.NS_LC, f"Late callout - only {notice:.1f} hours notice (<{window:g} hours)")

