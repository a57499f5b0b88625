"""
End-to-end tests: pasted pages through the ledger run, sheet exports through
the notices run, and the command line on top of both.

Run with:
    python3 -m pytest attendance_ledger/test_run.py -v
"""

import json
import sys
from datetime import date, datetime

import pytest

import cli
from attendance_ledger import codes
from attendance_ledger.config import PolicyConfig, fixed_clock
from attendance_ledger.exceptions import InputFileException
from attendance_ledger.run import read_text, run_ledger, run_ledger_files, run_notices_files
from attendance_ledger.sheets import rows_from_text


NOW = datetime(2026, 1, 4, 12, 0)

PICKUPS = "Approve Reject John Smith Monday, January 12, 2026 5:15pm - 9:05pm Door Host\n"

CALLOFFS = (
    "Approve Deny John Smith Monday, January 5, 2026 6:00pm - 9:00pm Published can't make it Jan-4-9:00a\n"
    "Approve Deny Jane Doe Wednesday, January 7, 2026 6:00pm - 9:00pm Published running a fever Jan-7-3:00p\n"
)

GRID_TEXT = (
    "Name\t1/5/2026\t1/7/2026\n"
    "Smith, John\t\t\n"
    "Doe, Jane\t\t\n"
)


@pytest.fixture
def config():
    return PolicyConfig(clock=fixed_clock(NOW))


# ============================================================================
# 1. Ledger run
# ============================================================================

class TestRunLedger:

    def test_classified_reconciled_and_sorted(self, config):
        result = run_ledger(PICKUPS, CALLOFFS, config)
        assert [(e.event.shift_date, e.code, e.cancelled) for e in result.entries] == [
            (date(2026, 1, 5), codes.NS_LC, True),
            (date(2026, 1, 7), codes.NS_S, False),
            (date(2026, 1, 12), codes.WO_HOST, True),
        ]
        assert result.cell_plan is None

    def test_summary_text(self, config):
        result = run_ledger(PICKUPS, CALLOFFS, config)
        assert result.summary_text == (
            "Processed entries: 3\n"
            "By code: NS/LC: 1, NS/S: 1, WO Host: 1\n"
            "Cancelled (infraction/work-off pairs): 1\n"
            "Total points impact: 0"
        )

    def test_ledger_text(self, config):
        lines = run_ledger(PICKUPS, CALLOFFS, config).ledger_text.splitlines()
        assert len(lines) == 3
        assert lines[0].startswith("01/05/2026  Smith, John")
        assert "[cancelled]" in lines[0]
        assert "[cancelled]" not in lines[1]

    def test_with_grid_plans_cell_writes(self, config):
        result = run_ledger(PICKUPS, CALLOFFS, config, rows_from_text(GRID_TEXT))
        plan = result.cell_plan
        assert [(w.employee_name, w.row_index, w.column_index, w.code) for w in plan.writes] == [
            ("Smith, John", 1, 1, codes.NS_LC),
            ("Doe, Jane", 2, 2, codes.NS_S),
        ]
        assert plan.missing_dates == [date(2026, 1, 12)]

    def test_empty_pages(self, config):
        result = run_ledger("", "", config)
        assert result.entries == []
        assert result.totals["points"] == 0
        assert result.summary_text.startswith("Processed entries: 0\nBy code: none")

    def test_files(self, tmp_path, config):
        pickups = tmp_path / "pickups.txt"
        pickups.write_text(PICKUPS)
        result = run_ledger_files(pickups, None, config)
        assert [e.code for e in result.entries] == [codes.WO_HOST]

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputFileException):
            read_text(tmp_path / "nope.txt")
        assert read_text(None) == ""


# ============================================================================
# 2. Notices run
# ============================================================================

class TestRunNotices:

    def test_files(self, tmp_path):
        grid = tmp_path / "grid.tsv"
        grid.write_text("Name\t1/5/2026\nSmith, John\tNS/NC\n")
        summary = tmp_path / "summary.tsv"
        summary.write_text("Name\tNS/NC\tTotal\nSmith, John\t1\t3\nDoe, Jane\t0\t0\n")
        config = PolicyConfig(clock=fixed_clock(datetime(2026, 2, 1)))

        result = run_notices_files(grid, summary, None, config)
        assert [m.name for m in result.models] == ["Smith, John"]
        assert result.notices_text.startswith("To: Smith, John")
        assert "(can no longer make up at this time)" in result.notices_text


# ============================================================================
# 3. Command line
# ============================================================================

class TestCli:

    def _run(self, monkeypatch, *argv):
        monkeypatch.setattr(sys, "argv", ["attendance-ledger", *argv])
        return cli.main()

    def test_ledger(self, tmp_path, monkeypatch, capsys):
        (tmp_path / "pickups.txt").write_text(PICKUPS)
        (tmp_path / "calloffs.txt").write_text(CALLOFFS)
        code = self._run(
            monkeypatch, "--now", NOW.isoformat(), "ledger",
            "--pickups", str(tmp_path / "pickups.txt"),
            "--calloffs", str(tmp_path / "calloffs.txt"),
        )
        out = capsys.readouterr().out
        assert code == 0
        assert "Processed entries: 3" in out
        assert "--- LEDGER ---" in out

    def test_ledger_json(self, tmp_path, monkeypatch, capsys):
        (tmp_path / "calloffs.txt").write_text(CALLOFFS)
        code = self._run(
            monkeypatch, "--now", NOW.isoformat(), "ledger",
            "--calloffs", str(tmp_path / "calloffs.txt"), "--notice-hours", "24", "--json",
        )
        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert [row["code"] for row in data["rows"]] == [codes.NS_C, codes.NS_S]

    def test_ledger_needs_a_page(self, monkeypatch, capsys):
        assert self._run(monkeypatch, "ledger") == 1
        assert "Error:" in capsys.readouterr().err

    def test_bad_notice_hours(self, tmp_path, monkeypatch, capsys):
        (tmp_path / "calloffs.txt").write_text(CALLOFFS)
        code = self._run(
            monkeypatch, "ledger", "--calloffs", str(tmp_path / "calloffs.txt"), "--notice-hours", "100",
        )
        assert code == 1
        assert "notice_window_hours" in capsys.readouterr().err

    def test_missing_input_file(self, tmp_path, monkeypatch, capsys):
        code = self._run(monkeypatch, "ledger", "--pickups", str(tmp_path / "nope.txt"))
        assert code == 1
        assert "file not found" in capsys.readouterr().err
