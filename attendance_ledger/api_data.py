"""
Produce JSON-serializable structures for the web API.
Bucket classification for UI filtering.
"""
from typing import Any, Dict, List, Optional

from . import codes
from .cell_writes import CellWritePlan
from .config import PolicyConfig
from .ledger import LedgerEntry
from .notices import EmployeeEmailModel, InfractionLine, render_email

BUCKET_INFRACTION = "infraction"   # carries points unless cancelled
BUCKET_SICK = "sick"
BUCKET_EXCUSED = "excused"
BUCKET_WORK_OFF = "work_off"


def _bucket_for_entry(e: LedgerEntry) -> str:
    if e.code in codes.WORK_OFF_CODES:
        return BUCKET_WORK_OFF
    if e.code in (codes.NS_S, codes.NS_LS):
        return BUCKET_SICK
    if e.code == codes.PRELIM:
        return BUCKET_EXCUSED
    return BUCKET_INFRACTION


def _entry_to_dict(e: LedgerEntry) -> Dict[str, Any]:
    ev = e.event
    return {
        "employee_name": ev.employee_name,
        "shift_date": ev.shift_date.isoformat(),
        "shift_time": ev.shift_time_range,
        "requested_at": ev.requested_at.isoformat() if ev.requested_at else None,
        "comment": ev.comment,
        "kind": ev.kind,
        "position_tag": ev.position_tag,
        "code": e.code,
        "points": e.points,
        "reason": e.classification.reason,
        "cancelled": e.cancelled,
        "bucket": _bucket_for_entry(e),
    }


def _line_to_dict(line: InfractionLine) -> Dict[str, Any]:
    return {
        "date": line.infraction_date.isoformat() if line.infraction_date else None,
        "code": line.code,
        "label": codes.label_for(line.code),
        "points": line.points,
        "status": line.status,
    }


def build_ledger_response(
    entries: List[LedgerEntry],
    totals: Dict[str, int],
    cell_plan: Optional[CellWritePlan] = None,
) -> Dict[str, Any]:
    """Build JSON-serializable ledger response."""
    response = {
        "summary": totals,
        "rows": [_entry_to_dict(e) for e in entries],
    }
    if cell_plan is not None:
        response["cell_plan"] = cell_plan.to_dict()
    return response


def build_notices_response(models: List[EmployeeEmailModel], config: PolicyConfig) -> Dict[str, Any]:
    """Build JSON-serializable notices response; body is the rendered email text."""
    return {
        "count": len(models),
        "notices": [
            {
                "name": m.name,
                "first_name": m.first_name,
                "total_points": m.total_points,
                "lines": [_line_to_dict(line) for line in m.lines],
                "body": render_email(m, config),
            }
            for m in models
        ],
    }
