"""Dump Apple Calendar events to JSON via icalBuddy.

Usage: ical-buddy-json [-w | -d] [-c CALENDAR1[,CALENDAR2...]] [-g] [-r] [date]

Examples:
    ical-buddy-json -w 2021-09-12
    ical-buddy-json -d 2021-09-12
"""
import argparse
import json
import logging
import os
import sys
import time
from datetime import datetime
from typing import List, Optional

from icalbuddy.client import FetchError, ICalBuddyClient
from icalbuddy.parser import parse_lines
from processor.collection import Collection, format_collection, to_json
from processor.date_utils import (
    FormatError,
    end_of_day,
    end_of_week,
    start_of_day,
    start_of_week,
)
from processor.event_processor import EventProcessor


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'WARNING') -> None:
    """
    Configure logging with JSON formatter on stderr.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.WARNING))


def configure_from_env() -> ICalBuddyClient:
    """
    Set up logging and an icalBuddy client from environment variables.

    LOG_LEVEL sets the log level (DEBUG=1 forces DEBUG), ICALBUDDY_PATH
    names the icalBuddy binary and TIMEOUT_SECONDS bounds each call.
    """
    log_level = os.environ.get('LOG_LEVEL', 'WARNING')
    if os.environ.get('DEBUG'):
        log_level = 'DEBUG'
    setup_logging(log_level)

    return ICalBuddyClient(
        executable=os.environ.get('ICALBUDDY_PATH', 'icalBuddy'),
        timeout=int(os.environ.get('TIMEOUT_SECONDS', '30'))
    )


def event_window(target_date: str, mode: str = 'weekly') -> tuple[str, str]:
    """
    Return the (start_at, end_at) timestamps to query for a target date.

    Args:
        target_date: Date in YYYY-MM-DD format
        mode: "weekly" for the Sunday-Saturday week, "daily" for the day

    Raises:
        FormatError: If target_date is not YYYY-MM-DD
    """
    if mode == 'daily':
        return start_of_day(target_date), end_of_day(target_date)
    return start_of_week(target_date), end_of_week(target_date)


def fetch_records(
    client: ICalBuddyClient,
    target_date: str,
    mode: str = 'weekly',
    calendars: Optional[str] = None,
    group_by_date: bool = False
) -> Collection:
    """
    Run the whole pipeline: fetch, parse, build records and format them.

    Raises:
        FetchError: If icalBuddy is missing or fails
        FormatError: If a date or time can't be parsed
    """
    logger = logging.getLogger(__name__)

    start_at, end_at = event_window(target_date, mode)
    client.ensure_available()
    raw_output = client.fetch_events(start_at, end_at, calendars)

    raw_events = parse_lines(raw_output.splitlines())
    records = EventProcessor().process_events(raw_events)
    logger.info(
        f"Collected {len(records)} events",
        extra={'mode': mode, 'target_date': target_date}
    )
    return format_collection(records, group_by_date=group_by_date)


class CommandLineParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on invalid options."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = CommandLineParser(
        prog='ical-buddy-json',
        description='Dumps Apple Calendar data to JSON via icalBuddy.',
        epilog='Examples: ical-buddy-json -w 2021-09-12 | '
               'ical-buddy-json -d 2021-09-12'
    )
    window = parser.add_mutually_exclusive_group()
    window.add_argument(
        '-w', '--weekly', dest='mode', action='store_const', const='weekly',
        help='show events for the whole week containing the date (default)'
    )
    window.add_argument(
        '-d', '--daily', dest='mode', action='store_const', const='daily',
        help='limit output to events on the date'
    )
    parser.add_argument(
        '-c', '--calendars',
        help='comma separated list of calendars to check; overrides the '
             'defaults in ~/.icalBuddyConfig.plist'
    )
    parser.add_argument(
        '-g', '--group-by-date', action='store_true',
        help='return a JSON object with dates as keys'
    )
    parser.add_argument(
        '-r', '--raw', action='store_true',
        help='print raw icalBuddy output instead of JSON'
    )
    parser.add_argument(
        'date', nargs='?',
        help='target date in YYYY-MM-DD format (default: today)'
    )
    parser.set_defaults(mode='weekly')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Command line entry point.

    Returns:
        0 on success, 1 if icalBuddy is missing, fails, or a date is invalid
    """
    args = build_parser().parse_args(argv)
    client = configure_from_env()
    logger = logging.getLogger(__name__)

    target_date = args.date or datetime.now().strftime('%Y-%m-%d')
    start_time = time.time()

    try:
        if args.raw:
            start_at, end_at = event_window(target_date, args.mode)
            client.ensure_available()
            sys.stdout.write(
                client.fetch_events(start_at, end_at, args.calendars)
            )
            return 0

        collection = fetch_records(
            client,
            target_date,
            mode=args.mode,
            calendars=args.calendars,
            group_by_date=args.group_by_date
        )
    except FetchError as e:
        logger.error(
            f"Failed to fetch events: {e}",
            extra={'error_type': type(e).__name__}
        )
        return 1
    except FormatError as e:
        logger.error(
            f"Failed to parse date or time: {e}",
            extra={'error_type': type(e).__name__}
        )
        return 1

    print(to_json(collection))
    logger.info(
        "Export completed",
        extra={'duration_seconds': round(time.time() - start_time, 2)}
    )
    return 0


if __name__ == '__main__':
    sys.exit(main())
