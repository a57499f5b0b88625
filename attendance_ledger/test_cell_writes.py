"""
Tests for planning where ledger codes go in the grid log.

Run with:
    python3 -m pytest attendance_ledger/test_cell_writes.py -v
"""

from datetime import date, datetime

from attendance_ledger import codes
from attendance_ledger.cell_writes import CellWrite, plan_cell_writes
from attendance_ledger.ledger import LedgerEntry
from attendance_ledger.parser import CALLOFF, ShiftEvent
from attendance_ledger.policy import InfractionClassification
from attendance_ledger.sheets import parse_grid_log, rows_from_text


GRID_TEXT = (
    "Name\t1/5/2026\t1/6/2026\t1/7/2026\n"
    "Smith, John\t\tNS/C\t\n"
    "Doe, Jane\t\t\t\n"
)


def entry(name, shift_date, code=codes.NS_LC):
    event = ShiftEvent(name, shift_date, "6pm - 9pm", datetime(2026, 1, 1), "", CALLOFF)
    return LedgerEntry(event, InfractionClassification(code, "test", codes.points_for(code)))


def grid():
    return parse_grid_log(rows_from_text(GRID_TEXT), 2026)


class TestPlanCellWrites:

    def test_write_targets_row_and_date_column(self):
        plan = plan_cell_writes([entry("Doe, Jane", date(2026, 1, 7))], grid())
        assert plan.writes == [CellWrite("Doe, Jane", 2, 3, date(2026, 1, 7), codes.NS_LC)]
        assert plan.conflicts == []

    def test_filled_cell_never_overwritten(self):
        plan = plan_cell_writes([entry("Smith, John", date(2026, 1, 6))], grid())
        assert plan.writes == []
        assert plan.conflicts == ["Smith, John on 01/06/2026: cell already has 'NS/C'"]

    def test_second_write_to_same_cell_is_conflict(self):
        plan = plan_cell_writes([
            entry("Smith, John", date(2026, 1, 5)),
            entry("John Smith", date(2026, 1, 5), codes.WO),
        ], grid())
        assert len(plan.writes) == 1
        assert plan.conflicts == ["Smith, John on 01/05/2026: cell already has 'NS/LC'"]

    def test_missing_employee_and_date(self):
        plan = plan_cell_writes([
            entry("Wu, Carl", date(2026, 1, 5)),
            entry("Wu, Carl", date(2026, 1, 6)),
            entry("Doe, Jane", date(2026, 2, 1)),
        ], grid())
        assert plan.writes == []
        assert plan.missing_employees == ["Wu, Carl"]
        assert plan.missing_dates == [date(2026, 2, 1)]

    def test_cancelled_entries_still_recorded(self):
        plan = plan_cell_writes([entry("Doe, Jane", date(2026, 1, 5)).cancel()], grid())
        assert [w.code for w in plan.writes] == [codes.NS_LC]

    def test_to_dict(self):
        plan = plan_cell_writes([
            entry("Doe, Jane", date(2026, 1, 5)),
            entry("Doe, Jane", date(2026, 3, 1)),
        ], grid())
        assert plan.to_dict() == {
            "writes": [{
                "employee_name": "Doe, Jane", "row": 2, "column": 1,
                "date": "2026-01-05", "code": codes.NS_LC,
            }],
            "conflicts": [],
            "missing_employees": [],
            "missing_dates": ["2026-03-01"],
        }
