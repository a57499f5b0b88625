#!/usr/bin/env python3
"""
Attendance Ledger CLI.
ledger:  pasted pickup/call-off pages -> classified, reconciled attendance ledger.
notices: grid log + summary + work-off exports -> employee notice emails.
"""
import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from attendance_ledger.config import fixed_clock, load_config
from attendance_ledger.exceptions import AttendanceLedgerException
from attendance_ledger.run import run_ledger_files, run_notices_files


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
        stream=sys.stderr,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Attendance Ledger: turn scheduling page dumps into an attendance ledger and notices.",
    )
    parser.add_argument("--config", type=Path, default=None, help="INI file with a [policy] section")
    parser.add_argument("--verbose", action="store_true", help="Debug logging to stderr")
    parser.add_argument(
        "--now",
        type=datetime.fromisoformat,
        default=None,
        help="Processing time override (ISO, e.g. 2026-01-20T09:00)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    ledger = sub.add_parser("ledger", help="Classify pasted pickup and call-off pages")
    ledger.add_argument("--pickups", type=Path, default=None, help="Pickup page dump (text)")
    ledger.add_argument("--calloffs", type=Path, default=None, help="Call-off page dump (text)")
    ledger.add_argument("--grid", type=Path, default=None, help="Grid log export; plan cell writes against it")
    ledger.add_argument("--notice-hours", type=float, default=None, help="Notice window in hours (12-72)")
    ledger.add_argument("--two-day-rule", action="store_true", default=None,
                        help="Any call-off 2+ calendar days ahead counts as NS/C")
    ledger.add_argument("--window-days", type=int, default=None, help="Reconciliation window in days")
    ledger.add_argument("--json", action="store_true", help="Print the ledger as JSON")

    notices = sub.add_parser("notices", help="Build employee notice emails from sheet exports")
    notices.add_argument("--grid", type=Path, required=True, help="Grid log export (.tsv/.csv/.xlsx)")
    notices.add_argument("--summary", type=Path, required=True, help="Summary counters export")
    notices.add_argument("--workoffs", type=Path, default=None, help="Work-off expiration list export")
    notices.add_argument("--manager", type=str, default=None, help="Name used to sign the notices")
    notices.add_argument("--window-days", type=int, default=None, help="Reconciliation window in days")
    return parser


def _print_ledger(result, as_json: bool) -> None:
    if as_json:
        from attendance_ledger.api_data import build_ledger_response
        print(json.dumps(build_ledger_response(result.entries, result.totals, result.cell_plan), indent=2))
        return
    print(result.summary_text)
    print()
    if result.ledger_text:
        print("--- LEDGER ---")
        print(result.ledger_text)
    else:
        print("--- LEDGER: no entries found ---")
    plan = result.cell_plan
    if plan is not None:
        print()
        print(f"Cell writes planned: {len(plan.writes)}")
        for msg in plan.conflicts:
            print(f"  Skipped: {msg}")
        for name in plan.missing_employees:
            print(f"  Employee not found: {name}")
        for d in plan.missing_dates:
            print(f"  Date not found: {d.isoformat()}")


def main() -> int:
    args = _build_parser().parse_args()
    _setup_logging(args.verbose)

    try:
        config = load_config(args.config)
        if args.now is not None:
            config = config.with_overrides(clock=fixed_clock(args.now))
        if args.command == "ledger":
            if args.pickups is None and args.calloffs is None:
                print("Error: give --pickups and/or --calloffs", file=sys.stderr)
                return 1
            config = config.with_overrides(
                notice_window_hours=args.notice_hours,
                allow_any_day_2days_rule=args.two_day_rule,
                reconciliation_window_days=args.window_days,
            )
            result = run_ledger_files(args.pickups, args.calloffs, config, args.grid)
            _print_ledger(result, args.json)
        else:
            config = config.with_overrides(
                manager_display_name=args.manager,
                reconciliation_window_days=args.window_days,
            )
            result = run_notices_files(args.grid, args.summary, args.workoffs, config)
            if result.notices_text:
                print(result.notices_text)
            else:
                print("--- NOTICES: no employees with points ---")
    except AttendanceLedgerException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if e.recommendation:
            print(e.recommendation, file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
