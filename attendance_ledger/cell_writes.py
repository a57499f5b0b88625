"""
Cell-write plan for recording ledger codes in the grid log.
Target cell = employee row x shift date column; a filled cell is never overwritten.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Set, Tuple

from . import time_utils
from .ledger import LedgerEntry
from .names import to_match_key
from .sheets import GridLog


@dataclass(frozen=True)
class CellWrite:
    employee_name: str  # as it appears in the grid
    row_index: int
    column_index: int
    shift_date: date
    code: str


@dataclass
class CellWritePlan:
    writes: List[CellWrite] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)
    missing_employees: List[str] = field(default_factory=list)
    missing_dates: List[date] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "writes": [
                {
                    "employee_name": w.employee_name,
                    "row": w.row_index,
                    "column": w.column_index,
                    "date": w.shift_date.isoformat(),
                    "code": w.code,
                }
                for w in self.writes
            ],
            "conflicts": list(self.conflicts),
            "missing_employees": list(self.missing_employees),
            "missing_dates": [d.isoformat() for d in self.missing_dates],
        }


def plan_cell_writes(entries: List[LedgerEntry], grid: GridLog) -> CellWritePlan:
    """One write per ledger entry whose employee row and date column exist and whose cell is empty."""
    plan = CellWritePlan()
    planned: Dict[Tuple[str, date], str] = {}
    seen_missing: Set[str] = set()

    for e in entries:
        name = e.event.employee_name
        shift_date = e.event.shift_date
        emp = grid.employee(name)
        col = grid.date_columns.get(shift_date)
        if emp is None and name not in seen_missing:
            seen_missing.add(name)
            plan.missing_employees.append(name)
        if col is None and shift_date not in plan.missing_dates:
            plan.missing_dates.append(shift_date)
        if emp is None or col is None:
            continue

        key = (to_match_key(name), shift_date)
        existing = grid.filled.get(key) or planned.get(key)
        if existing:
            plan.conflicts.append(
                f"{emp.name} on {time_utils.format_date(shift_date)}: cell already has {existing!r}"
            )
            continue
        planned[key] = e.code
        plan.writes.append(CellWrite(
            employee_name=emp.name,
            row_index=emp.row_index,
            column_index=col,
            shift_date=shift_date,
            code=e.code,
        ))
    return plan
