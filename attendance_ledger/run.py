"""
Orchestrate: parse pasted pages, classify, reconcile, format; or merge the sheet
exports into employee notices.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from . import codes, time_utils
from .cell_writes import CellWritePlan, plan_cell_writes
from .config import PolicyConfig
from .exceptions import InputFileException
from .ledger import LedgerEntry, classify_events, ledger_totals, reconcile, sort_ledger
from .notices import EmployeeEmailModel, build_email_models, render_notices
from .parser import parse_pages
from .sheets import Rows, parse_grid_log, parse_summary, parse_workoff_list, read_rows

logger = logging.getLogger(__name__)


@dataclass
class LedgerRunResult:
    entries: List[LedgerEntry]  # chronological
    totals: Dict[str, int]
    ledger_text: str
    summary_text: str
    cell_plan: Optional[CellWritePlan] = None


@dataclass
class NoticeRunResult:
    models: List[EmployeeEmailModel]
    notices_text: str


def read_text(path: Optional[Path]) -> str:
    """Read a pasted-page dump. None -> ''."""
    if path is None:
        return ""
    path = Path(path)
    if not path.exists():
        raise InputFileException(str(path), "file not found")
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def format_ledger(entries: List[LedgerEntry]) -> str:
    """One line per entry: date, name, code, points, cancellation, reason."""
    lines = []
    for e in entries:
        ev = e.event
        flag = " [cancelled]" if e.cancelled else ""
        pts = f"{e.points:+d}" if e.points else "0"
        lines.append(
            f"{time_utils.format_date(ev.shift_date)}  {ev.employee_name:<28} "
            f"{e.code:<8} {pts:>3}{flag}  {e.classification.reason}"
        )
    return "\n".join(lines)


def format_run_summary(totals: Dict[str, int], entry_count: int) -> str:
    """Counts per code and the net points impact."""
    code_counts = ", ".join(f"{code}: {totals.get(code, 0)}" for code in codes.CODE_POINTS if totals.get(code))
    return (
        f"Processed entries: {entry_count}\n"
        f"By code: {code_counts or 'none'}\n"
        f"Cancelled (infraction/work-off pairs): {totals.get('cancelled', 0) // 2}\n"
        f"Total points impact: {totals.get('points', 0)}"
    )


def run_ledger(
    pickup_text: str,
    calloff_text: str,
    config: PolicyConfig,
    grid_rows: Optional[Rows] = None,
) -> LedgerRunResult:
    """
    Parse both pages, classify every event, reconcile work-offs against infractions.
    With grid_rows, also plan where each code goes in the grid log.
    """
    events = parse_pages(pickup_text, calloff_text, config)
    entries = reconcile(classify_events(events, config), config)
    entries = sort_ledger(entries)
    totals = ledger_totals(entries)

    cell_plan = None
    if grid_rows is not None:
        cell_plan = plan_cell_writes(entries, parse_grid_log(grid_rows, config.reference_year))

    return LedgerRunResult(
        entries=entries,
        totals=totals,
        ledger_text=format_ledger(entries),
        summary_text=format_run_summary(totals, len(entries)),
        cell_plan=cell_plan,
    )


def run_ledger_files(
    pickup_path: Optional[Path],
    calloff_path: Optional[Path],
    config: PolicyConfig,
    grid_path: Optional[Path] = None,
) -> LedgerRunResult:
    grid_rows = read_rows(grid_path) if grid_path else None
    return run_ledger(read_text(pickup_path), read_text(calloff_path), config, grid_rows)


def run_notices(
    grid_rows: Rows,
    summary_rows: Rows,
    workoff_rows: Rows,
    config: PolicyConfig,
) -> NoticeRunResult:
    """Merge the three sheet exports into one notice per employee with points."""
    grid = parse_grid_log(grid_rows, config.reference_year)
    summary = parse_summary(summary_rows)
    workoffs = parse_workoff_list(workoff_rows, config.reference_year)
    models = build_email_models(summary, grid, workoffs, config)
    return NoticeRunResult(models=models, notices_text=render_notices(models, config))


def run_notices_files(
    grid_path: Path,
    summary_path: Path,
    workoff_path: Optional[Path],
    config: PolicyConfig,
) -> NoticeRunResult:
    workoff_rows = read_rows(workoff_path) if workoff_path else []
    return run_notices(read_rows(grid_path), read_rows(summary_path), workoff_rows, config)
