from __future__ import annotations
import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple

from .analytics import Report, build_report, filter_by_range
from .db import connect, data_dir, migrate
from .errors import MalformedPersistedStateError
from .export import to_csv, to_json, write_export
from .heatmap import DAY_ABBREVIATIONS
from .logs import LOG_NAME, install_excepthook, setup_logging
from .options import Options
from .periods import PRESET_RANGES, format_hours_minutes, hour_label, preset_range
from .repository import Repository
from .store import TaskStore

LOGGER = logging.getLogger(__name__)


def ensure_default_options(repo: Repository) -> Options:
    try:
        options = repo.load_options()
    except MalformedPersistedStateError as e:
        LOGGER.warning("option sets unreadable, using defaults: %s", e)
        options = Options()
    repo.save_options(options)
    return options


def open_tracker(db_file: Optional[Path] = None) -> Tuple[Repository, TaskStore, Options]:
    conn = connect(db_file)
    migrate(conn)
    repo = Repository(conn)
    options = ensure_default_options(repo)
    return repo, TaskStore(repo), options


def _parse_day(s: str) -> date:
    try:
        return date.fromisoformat(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {s!r}") from None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="timetracker", description="Consultant time tracker")
    parser.add_argument("--db", type=Path, help="sqlite file (default: app data dir)")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_range(p: argparse.ArgumentParser) -> None:
        g = p.add_mutually_exclusive_group()
        g.add_argument("--preset", choices=sorted(PRESET_RANGES))
        g.add_argument("--from", dest="date_from", type=_parse_day)
        g.add_argument("--all", action="store_true", help="no date filter")
        p.add_argument("--to", dest="date_to", type=_parse_day)

    p_summary = sub.add_parser("summary", help="print tracked time statistics")
    add_range(p_summary)

    p_export = sub.add_parser("export", help="write tasks as JSON or CSV")
    p_export.add_argument("format", choices=("json", "csv"))
    p_export.add_argument("path", type=Path)
    add_range(p_export)
    return parser


def _resolve_range(args, default_preset: Optional[str]) -> Tuple[Optional[date], Optional[date]]:
    if args.all:
        return None, None
    if args.date_from:
        return args.date_from, args.date_to
    preset = args.preset or default_preset
    if preset:
        return preset_range(preset)
    return None, None


def format_report(report: Report) -> str:
    s = report.summary
    lines = [
        f"Tasks: {s.total_tasks}   Hours: {s.total_hours}   Avg hours/task: {s.avg_hours_per_task}",
        "",
        "By category:",
    ]
    lines += [f"  {r.label:<24} {r.total_hours:>8.2f} h  ({r.task_count})" for r in report.by_category]
    lines.append("By task type:")
    lines += [f"  {r.label:<24} {r.total_hours:>8.2f} h  ({r.task_count})" for r in report.by_task_type]
    lines.append("Weekly:")
    lines += [f"  {r.group_key:<24} {r.total_hours:>8.2f} h  ({r.task_count})" for r in report.weekly]

    hm = report.heatmap
    if hm.max_value > 0:
        busiest = max(hm.iter_cells(), key=lambda c: c.accumulated_seconds)
        lines.append(
            f"Busiest hour: {DAY_ABBREVIATIONS[busiest.day_of_week]} {hour_label(busiest.hour_of_day)}"
            f" ({format_hours_minutes(busiest.accumulated_seconds)})"
        )
    if report.skipped:
        lines.append(f"Skipped {len(report.skipped)} task(s) with unreadable data")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.date_to and not args.date_from:
        parser.error("--to needs --from")

    if args.db is not None:
        log_dir = args.db.resolve().parent
        log_dir.mkdir(parents=True, exist_ok=True)
    else:
        log_dir = data_dir()
    setup_logging(log_dir / LOG_NAME)
    install_excepthook()

    repo, store, options = open_tracker(args.db)
    try:
        return _run(args, repo, store, options)
    finally:
        repo.conn.close()


def _run(args, repo: Repository, store: TaskStore, options: Options) -> int:
    settings = repo.get_settings()

    if args.command == "summary":
        date_from, date_to = _resolve_range(args, settings.default_range_preset)
        report = build_report(
            store.list(),
            options,
            date_from,
            date_to,
            workday_start=settings.workday_start_hour,
            workday_hours=settings.workday_hours,
        )
        print(format_report(report))
        return 0

    date_from, date_to = _resolve_range(args, None)
    tasks, _ = filter_by_range(store.list(), date_from, date_to)
    if args.format == "json":
        text = to_json(tasks, options, settings.export_date_format)
    else:
        text = to_csv(tasks, options, settings.export_date_format)
    path = write_export(args.path, text)
    print(f"Exported {len(tasks)} task(s) to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
