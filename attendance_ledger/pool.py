"""
Work-off pool: the make-up shifts still available to offset infractions.

A pool is an immutable value. The take_* methods return the matched record with
a new pool that no longer contains it, so a run owns its pool outright and
nothing is shared between runs.
"""
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Tuple

from . import time_utils

SOURCE_FULL = "full"        # full-shift work-off (expiration list)
SOURCE_PARTIAL = "partial"  # partial/door-shift work-off (expiration list)
SOURCE_GRID = "grid"        # WO token in the grid log
SOURCE_LEDGER = "ledger"    # pickup in the current ledger


@dataclass(frozen=True)
class WorkOffRecord:
    """One make-up shift."""
    employee_key: str   # names.to_match_key form
    workoff_date: date
    source: str = ""
    ledger_index: Optional[int] = None  # position in the ledger, for SOURCE_LEDGER


class WorkOffPool:
    """Ordered, immutable collection of available work-offs."""

    def __init__(self, records: Iterable[WorkOffRecord] = ()):
        self._records: Tuple[WorkOffRecord, ...] = tuple(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def __repr__(self) -> str:
        return f"WorkOffPool({len(self._records)} records)"

    def chronological(self) -> "WorkOffPool":
        """Same records, oldest first (stable for equal dates)."""
        return WorkOffPool(sorted(self._records, key=lambda r: r.workoff_date))

    def _without(self, index: int) -> "WorkOffPool":
        return WorkOffPool(self._records[:index] + self._records[index + 1:])

    def take_within(
        self, employee_key: str, anchor: date, window_days: int,
    ) -> Tuple[Optional[WorkOffRecord], "WorkOffPool"]:
        """First record for the employee within window_days of anchor (either direction)."""
        for i, r in enumerate(self._records):
            if r.employee_key == employee_key and time_utils.within_days(r.workoff_date, anchor, window_days):
                return r, self._without(i)
        return None, self

    def take_first(self, employee_key: str) -> Tuple[Optional[WorkOffRecord], "WorkOffPool"]:
        """First record for the employee regardless of date."""
        for i, r in enumerate(self._records):
            if r.employee_key == employee_key:
                return r, self._without(i)
        return None, self


def dedupe_records(records: Iterable[WorkOffRecord]) -> Tuple[WorkOffRecord, ...]:
    """Drop later records with the same employee and date; first one wins."""
    seen = set()
    out = []
    for r in records:
        key = (r.employee_key, r.workoff_date)
        if key in seen:
            continue
        seen.add(key)
        out.append(r)
    return tuple(out)
