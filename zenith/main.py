#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Zenith Planner - Command line
Backup, restore, statistics and calendar views over the local planner data

Version: 1.0.0
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from zenith.config import PlannerConfig
from zenith.core.models import ValidationError, validate_date_str
from zenith.services import Planner
from zenith.services.analytics import ANALYTICS_RANGES
from zenith.utils.datetime_utils import today_local
from zenith.utils.logger import configure_logging, setup_logger

logger = logging.getLogger(__name__)

WEEKDAY_HEADER = "Mo  Tu  We  Th  Fr  Sa  Su"


def iso_date(value: str) -> str:
    try:
        return validate_date_str(value)
    except ValidationError as e:
        raise argparse.ArgumentTypeError(str(e))


def month_number(value: str) -> int:
    month = int(value)
    if not 1 <= month <= 12:
        raise argparse.ArgumentTypeError("month must be between 1 and 12")
    return month


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='zenith',
        description='Zenith personal planner: backups, statistics and calendar views.',
        epilog='Example: zenith stats 2026-01-05 2026-01-11',
    )
    parser.add_argument('--data-dir', type=Path, default=None,
                        help='Directory holding planner_data.json (default: $ZENITH_DATA_DIR or data)')
    parser.add_argument('--log-file', default=None, help='Also write logs to this rotating file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    sub = parser.add_subparsers(dest='command', required=True)

    export = sub.add_parser('export', help='Write a JSON backup of all planner data')
    export.add_argument('--output', type=Path, default=None, help='Target directory (default: export dir)')

    restore = sub.add_parser('import', help='Restore planner data from a JSON backup')
    restore.add_argument('file', type=Path)

    stats = sub.add_parser('stats', help='Productivity statistics for an inclusive date range')
    stats.add_argument('start', type=iso_date)
    stats.add_argument('end', type=iso_date)

    analytics = sub.add_parser('analytics', help='Analytics report ending today')
    analytics.add_argument('--range', dest='range_name', choices=ANALYTICS_RANGES, default='week')

    calendar = sub.add_parser('calendar', help='Month calendar with task markers')
    calendar.add_argument('year', type=int)
    calendar.add_argument('month', type=month_number)

    sub.add_parser('streaks', help='Top habit streaks')

    tasks_csv = sub.add_parser('tasks-csv', help='Export all tasks as CSV')
    tasks_csv.add_argument('--output', type=Path, default=None, help='CSV file (default: stdout)')

    reset = sub.add_parser('reset', help='Delete all planner data')
    reset.add_argument('--yes', action='store_true', help='Confirm the reset')

    return parser


def render_calendar(summary: dict) -> str:
    """Plain-text month grid; * marks days with tasks"""
    lines = [summary["title"], WEEKDAY_HEADER]
    cells = []
    for cell in summary["grid"]:
        if cell["is_other_month"]:
            cells.append("   ")
        else:
            cells.append(f"{cell['day']:>2}" + ("*" if cell["has_tasks"] else " "))

    for row in range(0, len(cells), 7):
        lines.append(" ".join(cells[row:row + 7]).rstrip())
    return "\n".join(lines)


def run_command(args, planner: Planner, config: PlannerConfig) -> int:
    today = today_local(config.timezone)

    if args.command == 'export':
        path = planner.exporter.export_to_file(args.output, today)
        if path is None:
            return 1
        print(path)
        return 0

    if args.command == 'import':
        return 0 if planner.exporter.import_from_file(args.file) else 1

    if args.command == 'stats':
        stats = planner.analytics.stats(args.start, args.end)
        print(json.dumps(stats.to_dict(), indent=2))
        return 0

    if args.command == 'analytics':
        planner.habits.refresh_streaks(today)
        report = planner.analytics.report(args.range_name, today)
        if report is None:
            return 1
        print(json.dumps(report, indent=2, ensure_ascii=False))
        return 0

    if args.command == 'calendar':
        print(render_calendar(planner.analytics.monthly_summary(args.year, args.month, today)))
        return 0

    if args.command == 'streaks':
        planner.habits.refresh_streaks(today)
        habits = planner.habits.top_streaks()
        if not habits:
            print("No habits to track")
        for habit in habits:
            print(f"🔥 {habit.name}: {habit.current_streak} day streak (best {habit.longest_streak})")
        return 0

    if args.command == 'tasks-csv':
        csv_data = planner.exporter.export_tasks_csv(args.output)
        if args.output is None:
            sys.stdout.write(csv_data)
        else:
            print(args.output)
        return 0

    if args.command == 'reset':
        if not args.yes:
            print("Refusing to delete planner data without --yes", file=sys.stderr)
            return 1
        planner.reset()
        print("Planner data reset")
        return 0

    return 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = PlannerConfig()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.data_dir is not None:
        config.storage.data_dir = args.data_dir

    configure_logging(config, verbose=args.verbose)
    if args.log_file:
        setup_logger(args.log_file, level=logging.DEBUG if args.verbose else logging.INFO)

    config.ensure_directories()
    planner = Planner.from_config(config)
    logger.debug(f"⚙️ Running '{args.command}' with {config.to_dict()}")
    return run_command(args, planner, config)


if __name__ == '__main__':
    sys.exit(main())
