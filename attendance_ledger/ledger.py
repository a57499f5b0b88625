"""
Ledger entries and reconciliation of infractions against work-off pickups.
"""
import logging
from dataclasses import dataclass, replace
from typing import Dict, List

from . import codes
from .config import PolicyConfig
from .names import to_match_key
from .parser import ShiftEvent
from .policy import InfractionClassification, classify
from .pool import SOURCE_LEDGER, WorkOffPool, WorkOffRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerEntry:
    """A classified event. cancelled flips false -> true at most once, via cancel()."""
    event: ShiftEvent
    classification: InfractionClassification
    cancelled: bool = False

    @property
    def code(self) -> str:
        return self.classification.code

    @property
    def points(self) -> int:
        return self.classification.points

    @property
    def employee_key(self) -> str:
        return to_match_key(self.event.employee_name)

    def cancel(self) -> "LedgerEntry":
        if self.cancelled:
            raise ValueError(f"Entry already cancelled: {self.event.employee_name} {self.event.shift_date}")
        return replace(self, cancelled=True)


def classify_events(events: List[ShiftEvent], config: PolicyConfig) -> List[LedgerEntry]:
    """Classify each event into a LedgerEntry, in input order."""
    entries = [LedgerEntry(event=e, classification=classify(e, config)) for e in events]
    logger.info("Classified %d events", len(entries))
    return entries


def reconcile(entries: List[LedgerEntry], config: PolicyConfig) -> List[LedgerEntry]:
    """
    Pair point-bearing call-offs (NS/C, NS/LC, NS/NC) with work-off pickups
    (WO, WO Host) for the same employee within reconciliation_window_days of
    each other, and cancel both sides of each pair. Entries already cancelled
    are left as they are and never matched again.

    Matching is greedy: infractions are taken in ledger order and each grabs
    the first unused work-off in ledger order. This is not a maximum matching;
    an earlier infraction can take a work-off a later one needed.

    Returns a new list; the input entries are not modified.
    """
    result = list(entries)
    pool = WorkOffPool(
        WorkOffRecord(employee_key=e.employee_key, workoff_date=e.event.shift_date,
                      source=SOURCE_LEDGER, ledger_index=i)
        for i, e in enumerate(result)
        if e.code in codes.WORK_OFF_CODES and not e.cancelled
    )

    pairs = 0
    for i, entry in enumerate(entries):
        if entry.cancelled or entry.code not in codes.MAKEUP_ELIGIBLE_CODES:
            continue
        match, pool = pool.take_within(entry.employee_key, entry.event.shift_date,
                                       config.reconciliation_window_days)
        if match is None:
            continue
        result[i] = result[i].cancel()
        result[match.ledger_index] = result[match.ledger_index].cancel()
        pairs += 1
        logger.debug("Cancelled %s %s against work-off on %s",
                     entry.event.employee_name, entry.code, match.workoff_date)

    logger.info("Reconciliation cancelled %d infraction/work-off pairs", pairs)
    return result


def sort_ledger(entries: List[LedgerEntry]) -> List[LedgerEntry]:
    """Chronological by shift date; ties keep ledger order."""
    return sorted(entries, key=lambda e: e.event.shift_date)


def ledger_totals(entries: List[LedgerEntry]) -> Dict[str, int]:
    """Per-code counts plus 'points' (net points of entries that aren't cancelled) and 'cancelled'."""
    totals: Dict[str, int] = {code: 0 for code in codes.CODE_POINTS}
    totals["points"] = 0
    totals["cancelled"] = 0
    for e in entries:
        totals[e.code] = totals.get(e.code, 0) + 1
        if e.cancelled:
            totals["cancelled"] += 1
        else:
            totals["points"] += e.points
    return totals
