"""
Tabular exports from the attendance workbook: the dated grid log, the per-employee
summary counters, and the work-off expiration list.

Rows come from pasted tab-delimited text or from a file (.tsv/.txt, .csv, .xlsx).
Every parser tolerates ragged rows, blank cells and a stray BOM/zero-width marker
on the first header cell; rows it can't use are skipped, never raised on.
"""
import csv
import io
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import openpyxl

from . import codes, time_utils
from .config import DEFAULT_REFERENCE_YEAR
from .exceptions import InputFileException
from .names import to_match_key
from .pool import SOURCE_FULL, SOURCE_PARTIAL, WorkOffRecord

logger = logging.getLogger(__name__)

Rows = List[List[str]]

_INVISIBLE = "\ufeff\u200b\u200c\u200d\u2060"

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
_SLASH_DATE_RE = re.compile(r"\b(\d{1,2})/(\d{1,2})(?:/(\d{2,4}))?\b")
_WORDY_DATE_RE = re.compile(
    r"\b(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?\s+(\d{1,2})(?:,?\s+(\d{4}))?",
    re.IGNORECASE,
)

# Summary sheet base layout (Name, counters..., Total); header labels can move columns
SUMMARY_TOTAL_LABEL = "total"

WORKOFF_FULL_COLUMNS = (0, 1)
WORKOFF_PARTIAL_COLUMNS = (3, 4)
WORKOFF_LABEL_KEYWORDS = (
    "name", "work off", "workoff", "work-off", "full shift", "partial", "door",
    "expir", "date",
)
_HEADER_SCAN_ROWS = 3


def clean_cell(value) -> str:
    """Cell -> trimmed string without invisible markers. None -> ''."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip().strip(_INVISIBLE).strip()


def _cell(row: Sequence[str], index: int) -> str:
    return clean_cell(row[index]) if 0 <= index < len(row) else ""


def parse_sheet_date(cell: str, reference_year: int = DEFAULT_REFERENCE_YEAR) -> Optional[date]:
    """'2026-01-05', '1/5/2026', '1/5/26', '1/5', 'Mon Jan 5', 'January 5, 2026' -> date."""
    text = clean_cell(cell)
    if not text:
        return None
    m = _ISO_DATE_RE.match(text)
    if m:
        return time_utils.safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    m = _SLASH_DATE_RE.search(text)
    if m:
        year = m.group(3)
        if year is None:
            yr = reference_year
        elif len(year) == 2:
            yr = 2000 + int(year)
        else:
            yr = int(year)
        return time_utils.safe_date(yr, int(m.group(1)), int(m.group(2)))
    m = _WORDY_DATE_RE.search(text)
    if m:
        yr = int(m.group(3)) if m.group(3) else reference_year
        return time_utils.safe_date(yr, time_utils.month_number(m.group(1)), int(m.group(2)))
    return None


def rows_from_text(text: str, delimiter: str = "\t") -> Rows:
    """Split pasted sheet text into rows of cleaned cells. All-blank rows are dropped."""
    reader = csv.reader(io.StringIO(text or ""), delimiter=delimiter)
    rows = []
    for row in reader:
        cells = [clean_cell(c) for c in row]
        if any(cells):
            rows.append(cells)
    return rows


def read_rows_xlsx(path: Path) -> Rows:
    """Rows of the active sheet as cleaned strings."""
    wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    ws = wb.active
    raw = list(ws.iter_rows(values_only=True))
    wb.close()
    rows = []
    for row in raw:
        cells = [clean_cell(c) for c in (row or ())]
        if any(cells):
            rows.append(cells)
    return rows


def read_rows(path: Path) -> Rows:
    """Load rows from .tsv/.txt (tab-delimited), .csv, or .xlsx."""
    path = Path(path)
    if not path.exists():
        raise InputFileException(str(path), "file not found")
    suf = path.suffix.lower()
    if suf in (".xlsx", ".xlsm"):
        return read_rows_xlsx(path)
    if suf in (".tsv", ".txt", ".csv"):
        with open(path, "r", encoding="utf-8-sig", errors="replace", newline="") as f:
            text = f.read()
        return rows_from_text(text, delimiter="," if suf == ".csv" else "\t")
    raise InputFileException(str(path), f"unsupported file type {suf!r}")


# --- Grid log -------------------------------------------------------------

@dataclass
class GridEmployee:
    """One body row of the grid log."""
    name: str
    row_index: int  # row position in the sheet (header is 0)
    infractions: List[Tuple[date, str]] = field(default_factory=list)
    work_offs: List[Tuple[date, str]] = field(default_factory=list)


@dataclass
class GridLog:
    """Dated infraction log: employee rows x date columns."""
    date_columns: Dict[date, int] = field(default_factory=dict)  # date -> sheet column index
    employees: Dict[str, GridEmployee] = field(default_factory=dict)  # by match key
    filled: Dict[Tuple[str, date], str] = field(default_factory=dict)  # non-empty cells

    def employee(self, name: str) -> Optional[GridEmployee]:
        return self.employees.get(to_match_key(name))

    def dated_infractions(self, name: str) -> List[Tuple[date, str]]:
        emp = self.employee(name)
        return sorted(emp.infractions) if emp else []

    def dated_work_offs(self, name: str) -> List[Tuple[date, str]]:
        emp = self.employee(name)
        return sorted(emp.work_offs) if emp else []


def _grid_date_columns(header: Sequence[str], reference_year: int) -> Dict[date, int]:
    """
    Header is either 'Name, d1, d2, ...' or just 'd1, d2, ...' (the blank name
    header cell lost in the copy). In the second case header cell i labels body
    cell i + 1.
    """
    offset = 1 if parse_sheet_date(_cell(header, 0), reference_year) is not None else 0
    start = 0 if offset else 1
    columns: Dict[date, int] = {}
    for i in range(start, len(header)):
        d = parse_sheet_date(_cell(header, i), reference_year)
        if d is None or d in columns:
            continue
        columns[d] = i + offset
    return columns


def parse_grid_log(rows: Rows, reference_year: int = DEFAULT_REFERENCE_YEAR) -> GridLog:
    """Grid log rows -> dated infractions and work-offs per employee."""
    grid = GridLog()
    if not rows:
        return grid
    grid.date_columns = _grid_date_columns(rows[0], reference_year)
    if not grid.date_columns:
        logger.warning("Grid log header has no date columns")

    for row_index, row in enumerate(rows[1:], start=1):
        name = _cell(row, 0)
        if not name:
            continue
        key = to_match_key(name)
        emp = grid.employees.get(key)
        if emp is None:
            emp = GridEmployee(name=name, row_index=row_index)
            grid.employees[key] = emp
        for d, col in grid.date_columns.items():
            value = _cell(row, col)
            if not value:
                continue
            grid.filled[(key, d)] = value
            token = codes.match_token(value)
            if token in codes.INFRACTION_CODES:
                emp.infractions.append((d, token))
            elif token in codes.WORK_OFF_CODES:
                emp.work_offs.append((d, token))
    logger.info("Grid log: %d employees, %d date columns", len(grid.employees), len(grid.date_columns))
    return grid


# --- Summary counters -----------------------------------------------------

@dataclass
class EmployeeAggregate:
    """Summary sheet row: per-code counters and total points."""
    name: str
    counts: Dict[str, int] = field(default_factory=dict)
    total_points: int = 0

    def count(self, code: str) -> int:
        return self.counts.get(code, 0)


def _to_int(value: str) -> int:
    """Numeric cell -> int; anything else -> 0."""
    text = clean_cell(value).replace(",", "")
    if not text:
        return 0
    try:
        return int(float(text))
    except ValueError:
        return 0


def _summary_columns(header: Sequence[str]) -> Tuple[Dict[str, int], int]:
    """
    Code -> column index and the total column. Starts from the fixed layout;
    a header label (any case) moves its code or the total to the labelled
    column, and a fixed position taken over by a label is dropped.
    """
    lowered = [_cell(header, i).lower() for i in range(len(header))]
    by_label = {code.lower(): code for code in codes.SUMMARY_CODES}
    named: Dict[str, int] = {}
    total_idx: Optional[int] = None
    for i, label in enumerate(lowered[1:], start=1):
        if SUMMARY_TOTAL_LABEL in label:
            if total_idx is None:
                total_idx = i
        elif label in by_label and by_label[label] not in named:
            named[by_label[label]] = i

    claimed = set(named.values())
    if total_idx is not None:
        claimed.add(total_idx)
    columns: Dict[str, int] = {}
    for pos, code in enumerate(codes.SUMMARY_CODES, start=1):
        if code in named:
            columns[code] = named[code]
        elif pos not in claimed:
            columns[code] = pos
    if total_idx is None:
        fixed_total = len(codes.SUMMARY_CODES) + 1
        total_idx = fixed_total if fixed_total not in claimed else -1
    return columns, total_idx


def parse_summary(rows: Rows) -> Dict[str, EmployeeAggregate]:
    """Summary rows (header first) -> aggregates keyed by match key, in sheet order."""
    if not rows:
        return {}
    columns, total_idx = _summary_columns(rows[0])
    out: Dict[str, EmployeeAggregate] = {}
    for row in rows[1:]:
        name = _cell(row, 0)
        if not name or name.lower().startswith(SUMMARY_TOTAL_LABEL):
            continue
        counts = {code: _to_int(_cell(row, idx)) for code, idx in columns.items()}
        out[to_match_key(name)] = EmployeeAggregate(
            name=name,
            counts=counts,
            total_points=_to_int(_cell(row, total_idx)),
        )
    logger.info("Summary: %d employees", len(out))
    return out


# --- Work-off expiration list ---------------------------------------------

def _workoff_groups(rows: Rows) -> List[Tuple[int, int, str]]:
    """(name column, date column, source) per group, from 'Name' header cells when present."""
    for row in rows[:_HEADER_SCAN_ROWS]:
        name_cols = [i for i in range(len(row)) if "name" in _cell(row, i).lower()]
        if len(name_cols) >= 2:
            return [
                (name_cols[0], name_cols[0] + 1, SOURCE_FULL),
                (name_cols[1], name_cols[1] + 1, SOURCE_PARTIAL),
            ]
    return [
        (WORKOFF_FULL_COLUMNS[0], WORKOFF_FULL_COLUMNS[1], SOURCE_FULL),
        (WORKOFF_PARTIAL_COLUMNS[0], WORKOFF_PARTIAL_COLUMNS[1], SOURCE_PARTIAL),
    ]


def _is_label(text: str) -> bool:
    lowered = text.lower()
    return any(kw in lowered for kw in WORKOFF_LABEL_KEYWORDS)


def parse_workoff_list(rows: Rows, reference_year: int = DEFAULT_REFERENCE_YEAR) -> List[WorkOffRecord]:
    """Two side-by-side groups (full-shift, partial/door) of name + make-up date."""
    records: List[WorkOffRecord] = []
    for name_col, date_col, source in _workoff_groups(rows):
        for row in rows:
            name = _cell(row, name_col)
            date_text = _cell(row, date_col)
            if not name and not date_text:
                continue
            d = parse_sheet_date(date_text, reference_year)
            if d is None or not name:
                if not (_is_label(name) or _is_label(date_text)):
                    logger.debug("Skipping work-off row %r / %r (%s)", name, date_text, source)
                continue
            records.append(WorkOffRecord(employee_key=to_match_key(name), workoff_date=d, source=source))
    logger.info("Work-off list: %d records", len(records))
    return records
