"""
Employee attendance notices. Merges the summary counters, the grid log and the
work-off expiration list per employee and renders a plain-text email body.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from . import codes, time_utils
from .config import PolicyConfig
from .names import first_name, to_match_key
from .pool import SOURCE_GRID, WorkOffPool, WorkOffRecord, dedupe_records
from .sheets import EmployeeAggregate, GridLog

logger = logging.getLogger(__name__)

STATUS_MADE_UP = "(already made up)"
STATUS_EXPIRED = "(can no longer make up at this time)"

UNDATED_LABEL = "date not recorded"

# Order undated (summary-only) infractions are listed in
UNDATED_CODE_ORDER = (codes.NS_C, codes.NS_LC, codes.NS_NC, codes.NS_S, codes.NS_LS)


@dataclass(frozen=True)
class InfractionLine:
    """One infraction as shown in a notice. points are after any make-up."""
    infraction_date: Optional[date]  # None: counted in the summary but not dated in the grid
    code: str
    points: int
    status: str = ""


@dataclass
class EmployeeEmailModel:
    name: str
    first_name: str
    total_points: int
    lines: List[InfractionLine] = field(default_factory=list)


def build_workoff_pool(grid: GridLog, workoffs: Iterable[WorkOffRecord]) -> WorkOffPool:
    """Expiration-list records plus WO tokens in the grid, one per employee/date, oldest first."""
    grid_records = [
        WorkOffRecord(employee_key=key, workoff_date=d, source=SOURCE_GRID)
        for key, emp in grid.employees.items()
        for d, _ in emp.work_offs
    ]
    return WorkOffPool(dedupe_records(list(workoffs) + grid_records)).chronological()


def _dated_line(
    key: str, infraction_date: date, code: str, pool: WorkOffPool, config: PolicyConfig,
) -> Tuple[InfractionLine, WorkOffPool]:
    points = codes.points_for(code)
    status = ""
    if code in codes.MAKEUP_ELIGIBLE_CODES:
        window = config.reconciliation_window_days
        match, pool = pool.take_within(key, infraction_date, window)
        if match is not None:
            points -= 1
            status = STATUS_MADE_UP
        elif time_utils.days_elapsed(infraction_date, config.now()) > window:
            status = STATUS_EXPIRED
    return InfractionLine(infraction_date, code, points, status), pool


def _undated_line(key: str, code: str, pool: WorkOffPool) -> Tuple[InfractionLine, WorkOffPool]:
    """No date to measure a window from: take the oldest remaining work-off, else it has lapsed."""
    points = codes.points_for(code)
    status = ""
    if code in codes.MAKEUP_ELIGIBLE_CODES:
        match, pool = pool.take_first(key)
        if match is not None:
            points -= 1
            status = STATUS_MADE_UP
        else:
            status = STATUS_EXPIRED
    return InfractionLine(None, code, points, status), pool


def build_employee_model(
    aggregate: EmployeeAggregate, grid: GridLog, pool: WorkOffPool, config: PolicyConfig,
) -> Tuple[EmployeeEmailModel, WorkOffPool]:
    """
    Dated grid infractions first (chronological), then one undated line per
    infraction the summary counts but the grid doesn't date.
    Returns the model and the pool left after this employee's make-ups.
    """
    key = to_match_key(aggregate.name)
    dated = grid.dated_infractions(aggregate.name)
    lines: List[InfractionLine] = []

    for infraction_date, code in dated:
        line, pool = _dated_line(key, infraction_date, code, pool, config)
        lines.append(line)

    dated_counts = Counter(code for _, code in dated)
    for code in UNDATED_CODE_ORDER:
        missing = max(0, aggregate.count(code) - dated_counts[code])
        for _ in range(missing):
            line, pool = _undated_line(key, code, pool)
            lines.append(line)

    model = EmployeeEmailModel(
        name=aggregate.name,
        first_name=first_name(aggregate.name),
        total_points=aggregate.total_points,
        lines=lines,
    )
    return model, pool


def build_email_models(
    summary: Dict[str, EmployeeAggregate],
    grid: GridLog,
    workoffs: Iterable[WorkOffRecord],
    config: PolicyConfig,
) -> List[EmployeeEmailModel]:
    """One model per summary employee with points, in summary order."""
    pool = build_workoff_pool(grid, workoffs)
    models = []
    for aggregate in summary.values():
        if aggregate.total_points <= 0:
            continue
        model, pool = build_employee_model(aggregate, grid, pool, config)
        models.append(model)
    logger.info("Built %d notices (%d work-offs left unused)", len(models), len(pool))
    return models


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def format_line(line: InfractionLine) -> str:
    """'2 points: 01/05/2026 Monday : No Show / Late Call Out ... (already made up)'"""
    if line.infraction_date is not None:
        when = f"{time_utils.format_date(line.infraction_date)} {line.infraction_date.strftime('%A')}"
    else:
        when = f"({UNDATED_LABEL})"
    text = f"{_plural(line.points, 'point')}: {when} : {codes.label_for(line.code)}"
    if line.status:
        text += f" {line.status}"
    return text


def render_email(model: EmployeeEmailModel, config: PolicyConfig) -> str:
    """Plain-text notice body. Lines that carry no points are left out."""
    shown = [format_line(line) for line in model.lines if line.points != 0]
    parts = [
        f"Hi {model.first_name or model.name},",
        "",
        f"This is a reminder about your attendance record. "
        f"You currently have {_plural(model.total_points, 'attendance point')}.",
        "",
    ]
    if shown:
        parts.append("Your infractions:")
        parts.extend(shown)
    else:
        parts.append("None of your infractions currently carry points.")
    parts += [
        "",
        f"Reminder: you can make up a no-show by picking up a shift (a work-off) within "
        f"{config.reconciliation_window_days} days of the missed shift. Each work-off "
        f"takes one point off that infraction. Infractions older than that can no longer be made up.",
        "",
        "Thank you,",
        config.manager_display_name or "Management",
    ]
    return "\n".join(parts)


def render_notices(models: List[EmployeeEmailModel], config: PolicyConfig) -> str:
    """All notice bodies, separated for manual sending."""
    separator = "\n\n" + "-" * 60 + "\n\n"
    return separator.join(f"To: {m.name}\n\n{render_email(m, config)}" for m in models)
