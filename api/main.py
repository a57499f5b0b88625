"""
FastAPI backend for the attendance ledger web app.
"""
from __future__ import annotations

import tempfile
from datetime import datetime
from pathlib import Path

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from attendance_ledger.api_data import build_ledger_response, build_notices_response
from attendance_ledger.config import PolicyConfig, fixed_clock
from attendance_ledger.exceptions import AttendanceLedgerException
from attendance_ledger.run import run_ledger, run_notices
from attendance_ledger.sheets import read_rows, rows_from_text

app = FastAPI(title="Attendance Ledger", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

SHEET_SUFFIXES = (".tsv", ".txt", ".csv", ".xlsx")


def _config_from_form(
    notice_window_hours: float,
    allow_any_day_2days_rule: bool,
    reconciliation_window_days: int,
    manager_display_name: str = "",
    now: str = "",
) -> PolicyConfig:
    """Form fields -> validated PolicyConfig. Bad values -> 422 with the structured error."""
    try:
        config = PolicyConfig().with_overrides(
            notice_window_hours=notice_window_hours,
            allow_any_day_2days_rule=allow_any_day_2days_rule,
            reconciliation_window_days=reconciliation_window_days,
            manager_display_name=manager_display_name or None,
        )
        if now:
            config = config.with_overrides(clock=fixed_clock(datetime.fromisoformat(now)))
    except AttendanceLedgerException as e:
        raise HTTPException(e.http_status, e.to_dict())
    except ValueError:
        raise HTTPException(422, {"success": False, "error": f"Invalid 'now' timestamp: {now!r}"})
    return config


async def _upload_rows(upload: UploadFile | None, tmp: str, label: str):
    """Uploaded sheet export -> rows. None/empty upload -> []."""
    if upload is None or not upload.filename:
        return []
    suffix = Path(upload.filename).suffix.lower()
    if suffix not in SHEET_SUFFIXES:
        raise HTTPException(400, "Sheet exports must be TSV, TXT, CSV, or Excel")
    path = Path(tmp) / f"{label}{suffix}"
    with open(path, "wb") as f:
        f.write(await upload.read())
    try:
        return read_rows(path)
    except AttendanceLedgerException as e:
        raise HTTPException(e.http_status, e.to_dict())


@app.get("/api/health")
def health():
    return {"status": "ok"}


@app.post("/api/ledger")
def process_pages(
    pickup_text: str = Form(default=""),
    calloff_text: str = Form(default=""),
    grid_text: str = Form(default=""),
    notice_window_hours: float = Form(default=48),
    allow_any_day_2days_rule: bool = Form(default=False),
    reconciliation_window_days: int = Form(default=14),
    now: str = Form(default=""),
):
    """Pasted pickup + call-off pages -> classified, reconciled ledger (chronological)."""
    if not pickup_text.strip() and not calloff_text.strip():
        raise HTTPException(400, "Paste a pickup page and/or a call-off page")
    config = _config_from_form(
        notice_window_hours, allow_any_day_2days_rule, reconciliation_window_days, now=now,
    )
    grid_rows = rows_from_text(grid_text) if grid_text.strip() else None
    result = run_ledger(pickup_text, calloff_text, config, grid_rows)
    return build_ledger_response(result.entries, result.totals, result.cell_plan)


@app.post("/api/notices")
async def process_notices(
    grid_file: UploadFile = File(...),
    summary_file: UploadFile = File(...),
    workoff_file: UploadFile | None = File(default=None),
    manager_display_name: str = Form(default=""),
    reconciliation_window_days: int = Form(default=14),
    now: str = Form(default=""),
):
    """Upload grid log + summary (+ optional work-off list) -> notice bodies."""
    config = _config_from_form(
        48, False, reconciliation_window_days, manager_display_name=manager_display_name, now=now,
    )
    with tempfile.TemporaryDirectory() as tmp:
        grid_rows = await _upload_rows(grid_file, tmp, "grid")
        summary_rows = await _upload_rows(summary_file, tmp, "summary")
        workoff_rows = await _upload_rows(workoff_file, tmp, "workoffs")
    result = run_notices(grid_rows, summary_rows, workoff_rows, config)
    return build_notices_response(result.models, config)
