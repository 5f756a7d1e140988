"""Print today's calendar events as a Tana paste outline."""
import logging
import sys
from datetime import datetime
from typing import List, Optional

from ical_buddy_json import CommandLineParser, configure_from_env, fetch_records
from icalbuddy.client import FetchError
from processor.date_utils import FormatError
from renderer.outline import load_records, render_outline


def build_parser() -> CommandLineParser:
    """Build the command line parser."""
    parser = CommandLineParser(
        prog='ical-buddy-tana',
        description='Render calendar events as Tana paste outline nodes.'
    )
    parser.add_argument(
        '-c', '--calendars',
        help='comma separated list of calendars to check'
    )
    parser.add_argument(
        '-i', '--input',
        help="read ical-buddy-json output from a file ('-' for stdin) "
             "instead of running icalBuddy"
    )
    parser.add_argument(
        'date', nargs='?',
        help='date to render in YYYY-MM-DD format (default: today)'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Command line entry point.

    Returns:
        0 on success, 1 if events can't be fetched or the input is invalid
    """
    args = build_parser().parse_args(argv)
    client = configure_from_env()
    logger = logging.getLogger(__name__)

    try:
        if args.input == '-':
            records = load_records(sys.stdin.read())
        elif args.input:
            with open(args.input, encoding='utf-8') as f:
                records = load_records(f.read())
        else:
            target_date = args.date or datetime.now().strftime('%Y-%m-%d')
            records = fetch_records(
                client,
                target_date,
                mode='daily',
                calendars=args.calendars
            )
    except (FetchError, FormatError) as e:
        logger.error(
            f"Failed to collect events: {e}",
            extra={'error_type': type(e).__name__}
        )
        return 1
    except (OSError, ValueError) as e:
        logger.error(
            f"Failed to read events from {args.input}: {e}",
            extra={'error_type': type(e).__name__}
        )
        return 1

    for line in render_outline(records):
        print(line)
    return 0


if __name__ == '__main__':
    sys.exit(main())
