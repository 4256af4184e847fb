# src/maintenance_cli.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date

from admin_ops import AdminOps
from class_repo import cancel_slot_week
from config import Settings, load_settings
from csv_loader import load_validated_frames, seed_from_frames
from reason_library import match_reason
from sample_output import format_preview, format_stats
from session_repo import deactivate_time_slot
from session_time import week_start


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="sessions", description="Rolling tutoring-session window maintenance"
    )
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("run", help="Fill the rolling window now")
    sub.add_parser("stats", help="Show maintenance stats")

    pv = sub.add_parser("preview", help="Dry-run tutor resolution for a slot")
    pv.add_argument("class_id")
    pv.add_argument("slot_id")
    pv.add_argument("--weeks", type=int, default=4)
    pv.add_argument("--today", type=date.fromisoformat, default=None)

    sub.add_parser("seed", help="Load tutors/classes/slots/rules from the assets CSVs")

    ds = sub.add_parser("deactivate-slot", help="Deactivate a slot, cancel its future sessions")
    ds.add_argument("slot_id")
    ds.add_argument("--reason", default=None)

    sw = sub.add_parser("skip-week", help="Skip one week of a slot")
    sw.add_argument("slot_id")
    sw.add_argument("day", type=date.fromisoformat, help="any date in the week")

    sub.add_parser("serve", help="Run the daily scheduler in the foreground")
    return p


def run_command(args: argparse.Namespace, settings: Settings, ops: AdminOps) -> int:
    if args.command == "run":
        run = ops.trigger_maintenance()
        print(json.dumps(run.to_dict(), indent=2))
        return 1 if run.errors else 0

    if args.command == "stats":
        print(format_stats(ops.get_maintenance_stats()))
        return 0

    if args.command == "preview":
        entries = ops.preview_assignments(
            args.class_id, args.slot_id, args.weeks, today=args.today
        )
        print(format_preview(args.class_id, args.slot_id, entries))
        return 0

    con = ops.connect()
    try:
        if args.command == "seed":
            counts = seed_from_frames(con, load_validated_frames(settings.assets_dir))
            con.commit()
            print("Seeded:", ", ".join(f"{k}={v}" for k, v in counts.items()))
        elif args.command == "deactivate-slot":
            n = deactivate_time_slot(con, args.slot_id, args.reason)
            con.commit()
            print(f"Deactivated {args.slot_id}; cancelled {n} future session(s)")
        elif args.command == "skip-week":
            ws = week_start(args.day)
            cancel_slot_week(con, args.slot_id, ws)
            con.commit()
            print(f"Skipping {args.slot_id} for week of {ws.isoformat()}")
    finally:
        con.close()

    if args.command == "serve":
        ops.scheduler.start()
        print("Scheduler running. Ctrl+C to stop.")
        try:
            while ops.scheduler.is_running:
                ops.scheduler.join(timeout=1.0)
        except KeyboardInterrupt:
            pass
        finally:
            ops.scheduler.stop()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ops = AdminOps.new(settings)

    try:
        return run_command(args, settings, ops)
    except ValueError as e:
        print(f"\nERROR: {match_reason(str(e))}\n", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
