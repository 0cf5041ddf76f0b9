#!/usr/bin/env python3
"""
Habitly maintenance tool
Usage: habitly [--data-dir DIR] [--json] {check,list,due,add,record,delete,stats,export,backup} ...
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from habitly.config import HabitlyConfig
from habitly.core.models import GoalType, Habit, HabitError, HabitStatus
from habitly.services.data_export import export_history_csv, export_json, write_export
from habitly.services.habit_engine import HabitEngine, create_habit_engine
from habitly.services.stats_service import (
    completion_percent,
    daily_summary,
    least_consistent,
    most_consistent,
    streak_summary,
)
from habitly.utils.logger import setup_logging

logger = logging.getLogger(__name__)

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def _repeat_days(value: str) -> List[int]:
    try:
        days = [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated weekday numbers, got {value!r}")
    return days


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="habitly", description="Habit snapshot maintenance")
    parser.add_argument("--data-dir", help="Directory holding the snapshot (overrides HABITLY_DATA_DIR)")
    parser.add_argument("--json", action="store_true", help="Machine-readable output")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("check", help="Load the snapshot and report its state")
    sub.add_parser("list", help="List all habits")

    due = sub.add_parser("due", help="Habits scheduled on a date")
    due.add_argument("--date", help="YYYY-MM-DD (default: today)")

    add = sub.add_parser("add", help="Create a habit")
    add.add_argument("name")
    add.add_argument("--emoji")
    add.add_argument("--goal-type", default=GoalType.SIMPLE.value, choices=[g.value for g in GoalType])
    add.add_argument("--goal-value", type=int)
    add.add_argument("--days", type=_repeat_days, default=list(range(7)),
                     help="Comma-separated weekdays, 0=Sunday (default: every day)")
    add.add_argument("--reminder", help="HH:MM")

    record = sub.add_parser("record", help="Record a day's outcome")
    record.add_argument("habit_id")
    record.add_argument("--date", help="YYYY-MM-DD (default: today)")
    record.add_argument("--status", default=HabitStatus.DONE.value, choices=[s.value for s in HabitStatus])
    record.add_argument("--value", type=float)

    delete = sub.add_parser("delete", help="Delete a habit")
    delete.add_argument("habit_id")

    sub.add_parser("stats", help="Completion and streak statistics")

    export = sub.add_parser("export", help="Export habits")
    export.add_argument("--format", default="json", choices=["json", "csv"])
    export.add_argument("--output", help="File name inside the export directory")

    backup = sub.add_parser("backup", help="Create, list or restore snapshot backups")
    backup.add_argument("--list", action="store_true", help="List existing backups")
    backup.add_argument("--restore", help="Restore the snapshot from this backup file")
    backup.add_argument("--plain", action="store_true", help="Do not gzip the backup")

    return parser


def _config_for(args: argparse.Namespace) -> HabitlyConfig:
    cfg = HabitlyConfig()
    if args.data_dir:
        cfg.data_dir = Path(args.data_dir)
        cfg.storage.data_dir = cfg.data_dir
    return cfg


def _habit_line(habit: Habit) -> str:
    days = ",".join(DAY_NAMES[d] for d in habit.repeat_days) or "never"
    goal = f" goal={habit.goal_value}" if habit.goal_value is not None else ""
    return (f"{habit.id}  {habit.emoji} {habit.name} [{habit.goal_type}{goal}] "
            f"{days}  streak {habit.streak.current}/{habit.streak.longest}")


def _emit(args: argparse.Namespace, payload: Any, lines: List[str]) -> None:
    if args.json:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print("\n".join(lines))


def _stats_payload(engine: HabitEngine) -> Dict[str, Any]:
    habits = engine.select_all()
    today = engine.clock()
    summary = streak_summary(habits)
    best = most_consistent(habits)
    worst = least_consistent(habits)
    return {
        "date": today.isoformat(),
        "today_percent": completion_percent(habits, today),
        "max_current_streak": summary.max_current,
        "max_longest_streak": summary.max_longest,
        "last_7_days": [
            {"date": d.date, "scheduled": d.scheduled, "done": d.done, "percent": d.percent}
            for d in daily_summary(habits, today)
        ],
        "most_consistent": best.name if best else None,
        "least_consistent": worst.name if worst else None,
    }


async def run_command(args: argparse.Namespace, cfg: HabitlyConfig) -> int:
    engine = create_habit_engine(cfg)
    try:
        await engine.reload()
        return await _dispatch(args, cfg, engine)
    finally:
        engine.store.close()


async def _dispatch(args: argparse.Namespace, cfg: HabitlyConfig, engine: HabitEngine) -> int:
    command = args.command

    if command == "check":
        habits = engine.select_all()
        payload = {
            "status": "healthy",
            "habits": len(habits),
            "records": sum(len(h.history) for h in habits),
            "backups": len(engine.store.list_backups()),
            "config": cfg.to_dict(),
        }
        _emit(args, payload, [
            f"Snapshot: {cfg.storage.snapshot_path}",
            f"Habits: {payload['habits']}  records: {payload['records']}  backups: {payload['backups']}",
        ])

    elif command in ("list", "due"):
        habits = engine.select_all() if command == "list" else engine.select_due(args.date)
        _emit(args, [h.to_dict() for h in habits],
              [_habit_line(h) for h in habits] or ["No habits"])

    elif command == "add":
        draft = Habit(
            name=args.name,
            goal_type=args.goal_type,
            goal_value=args.goal_value,
            repeat_days=args.days,
            reminder=args.reminder,
        )
        if args.emoji:
            draft.emoji = args.emoji
        habit = await engine.create(draft)
        _emit(args, habit.to_dict(), [f"Created {_habit_line(habit)}"])

    elif command == "record":
        on_date = args.date or engine.clock()
        habit = await engine.record_completion(args.habit_id, on_date, args.status, args.value)
        _emit(args, habit.to_dict(), [_habit_line(habit)])

    elif command == "delete":
        await engine.delete(args.habit_id)
        _emit(args, {"deleted": args.habit_id}, [f"Deleted {args.habit_id}"])

    elif command == "stats":
        payload = _stats_payload(engine)
        lines = [
            f"Today ({payload['date']}): {payload['today_percent']}% done",
            f"Best current streak: {payload['max_current_streak']}  "
            f"best longest streak: {payload['max_longest_streak']}",
        ]
        lines += [f"  {d['date']}: {d['done']}/{d['scheduled']} ({d['percent']}%)"
                  for d in payload["last_7_days"]]
        lines.append(f"Most consistent: {payload['most_consistent'] or '-'}  "
                     f"least consistent: {payload['least_consistent'] or '-'}")
        _emit(args, payload, lines)

    elif command == "export":
        habits = engine.select_all()
        if args.format == "csv":
            data = export_history_csv(habits)
        else:
            data = export_json(habits)
        filename = args.output or f"habitly_export_{engine.clock().isoformat()}.{args.format}"
        path = write_export(data, cfg.export_dir, filename)
        _emit(args, {"path": str(path), "bytes": len(data)}, [f"Exported to {path}"])

    elif command == "backup":
        store = engine.store
        if args.list:
            backups = store.list_backups()
            _emit(args, backups, [f"{b['name']}  {b['size_mb']:.3f} MB" for b in backups] or ["No backups"])
        elif args.restore:
            if not await store.restore_backup(Path(args.restore)):
                print(f"Failed to restore {args.restore}", file=sys.stderr)
                return 1
            habits = await engine.reload()
            _emit(args, {"restored": args.restore, "habits": len(habits)},
                  [f"Restored {len(habits)} habits from {args.restore}"])
        else:
            path = await store.create_backup(compressed=not args.plain)
            if path is None:
                print("No snapshot to back up", file=sys.stderr)
                return 1
            _emit(args, {"path": str(path)}, [f"Backup created: {path}"])

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = _config_for(args)
    setup_logging(cfg)

    try:
        return asyncio.run(run_command(args, cfg))
    except HabitError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
