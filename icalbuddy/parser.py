"""Parser for the line-oriented text icalBuddy prints."""
import logging
import re
from typing import Iterable, List, Optional, Tuple

from processor.models import LineShape, ParsedLine, ParserContext, RawEvent

logger = logging.getLogger(__name__)

# Sentinels passed to icalBuddy so real separators can't be confused with
# event text
PROPERTY_SEPARATOR = '#ICALBUDDY-PROPERTY-SEPARATOR#'
NEWLINE_SEPARATOR = '#ICALBUDDY-NEW-LINE#'
SECTION_SEPARATOR = '#ICALBUDDY-SECTION-SEPARATOR#'

# icalBuddy prints this under a date with no events (--showEmptyDates)
EMPTY_DAY_MARKER = 'Nothing.'

TRAILING_TIME_RANGE = re.compile(
    re.escape(PROPERTY_SEPARATOR) + r'[0-9]{2}:[0-9]{2} - [0-9]{2}:[0-9]{2}$'
)
CALENDAR_SUFFIX = re.compile(r'^(?P<title>.*) \((?P<calendar>[^()]*)\)$')


def classify_line(line: str) -> ParsedLine:
    """
    Classify one line of icalBuddy output.

    Shapes are tested in priority order and the first match wins:

        blank line                          -> BLANK
        2021-09-12:<section sep>            -> SECTION
        Nothing.                            -> EMPTY_DAY
        title<sep>20:30 - 21:30<sep>notes   -> TITLE_TIME_NOTES
        title<sep>18:45 - 19:45             -> TITLE_TIME
        title<sep>notes                     -> TITLE_NOTES
        title                               -> TITLE_ONLY

    Args:
        line: Raw line of output

    Returns:
        ParsedLine carrying the raw fields for its shape
    """
    line = line.strip()

    if not line:
        return ParsedLine(LineShape.BLANK)

    if line.endswith(SECTION_SEPARATOR):
        marker = line[:-len(SECTION_SEPARATOR)]
        date, colon, _ = marker.rpartition(':')
        return ParsedLine(LineShape.SECTION, date=date if colon else marker)

    if line == EMPTY_DAY_MARKER:
        return ParsedLine(LineShape.EMPTY_DAY)

    separators = line.count(PROPERTY_SEPARATOR)

    if separators >= 2:
        title, _, rest = line.partition(PROPERTY_SEPARATOR)
        time_range, _, notes = rest.rpartition(PROPERTY_SEPARATOR)
        return ParsedLine(
            LineShape.TITLE_TIME_NOTES,
            title=title,
            time_range=time_range,
            notes=notes
        )

    if TRAILING_TIME_RANGE.search(line):
        title, _, time_range = line.partition(PROPERTY_SEPARATOR)
        return ParsedLine(LineShape.TITLE_TIME, title=title, time_range=time_range)

    if separators == 1:
        title, _, notes = line.partition(PROPERTY_SEPARATOR)
        return ParsedLine(LineShape.TITLE_NOTES, title=title, notes=notes)

    return ParsedLine(LineShape.TITLE_ONLY, title=line)


def parse_line(
    context: ParserContext,
    line: str
) -> Tuple[ParserContext, Optional[RawEvent]]:
    """
    Advance the parser by one line.

    Args:
        context: Parser state from the previous line
        line: Raw line of output

    Returns:
        Tuple of (next context, RawEvent or None if the line holds no event)
    """
    parsed = classify_line(line)

    if parsed.shape is LineShape.SECTION:
        logger.debug(f"Entering section for date {parsed.date}")
        return ParserContext(current_date=parsed.date), None

    if parsed.shape in (LineShape.BLANK, LineShape.EMPTY_DAY):
        return context, None

    if not parsed.title.strip():
        logger.debug(f"Dropping line without a title: {line!r}")
        return context, None

    return context, RawEvent(
        title=parsed.title,
        date=context.current_date,
        time_range=parsed.time_range,
        notes=parsed.notes
    )


def parse_lines(
    lines: Iterable[str],
    context: Optional[ParserContext] = None
) -> List[RawEvent]:
    """
    Parse icalBuddy output into raw events, in order.

    Section markers set the date for every following line, so lines must
    be consumed in the order icalBuddy printed them.

    Args:
        lines: Lines of icalBuddy output
        context: Starting parser state (default: no current date)

    Returns:
        List of RawEvent objects
    """
    context = context or ParserContext()
    events = []

    for line in lines:
        context, event = parse_line(context, line)
        if event:
            events.append(event)

    logger.info(f"Parsed {len(events)} events from icalBuddy output")
    return events


def split_title(raw_title: str) -> Tuple[str, str]:
    """
    Split "Standup (Work)" into ("Standup", "Work").

    Only the last parenthesized suffix is treated as the calendar name.
    Titles without one get an empty calendar.
    """
    match = CALENDAR_SUFFIX.match(raw_title.strip())
    if not match:
        return raw_title.strip(), ''
    return match.group('title').strip(), match.group('calendar').strip()
