"""Event processor for normalizing parsed icalBuddy events."""
import logging
import re
from typing import List, Optional, Tuple

from icalbuddy.parser import NEWLINE_SEPARATOR, split_title
from processor.date_utils import minutes_between, to_12_hour
from processor.models import EventRecord, RawEvent

logger = logging.getLogger(__name__)


class EventProcessor:
    """Processor for turning raw event fields into EventRecords."""

    TIME_RANGE_PATTERN = re.compile(
        r'^(?P<start>[012][0-9]:[0-5][0-9]) - (?P<end>[012][0-9]:[0-5][0-9])$'
    )
    URL_PATTERN = re.compile(r'https?://[a-zA-Z0-9~#%&_+=,.?/-]+')

    def process_events(self, raw_events: List[RawEvent]) -> List[EventRecord]:
        """
        Build records for every raw event, preserving order.

        Args:
            raw_events: List of RawEvent objects from the parser

        Returns:
            List of EventRecord objects

        Raises:
            FormatError: If a time range passes the pattern but isn't a
                valid time (e.g. "29:00 - 30:00")
        """
        records = []

        for event in raw_events:
            record = self.build_record(event)
            if record:
                records.append(record)

        logger.info(
            f"Built {len(records)} event records out of "
            f"{len(raw_events)} parsed events"
        )
        return records

    def build_record(self, event: RawEvent) -> Optional[EventRecord]:
        """
        Build a single record.

        Args:
            event: RawEvent from the parser

        Returns:
            EventRecord, or None if the event has no usable title
        """
        title, calendar = split_title(event.title)
        if not title:
            logger.debug(f"Skipping event without a title: {event.title!r}")
            return None

        start_at, end_at, duration = self._parse_time_range(
            event.time_range, title
        )
        notes = event.notes.replace(NEWLINE_SEPARATOR, '\n')

        return EventRecord(
            title=title,
            calendar=calendar,
            date=event.date,
            notes=notes,
            start_at=start_at,
            end_at=end_at,
            duration=duration,
            urls=self.extract_urls(notes)
        )

    def extract_urls(self, notes: str) -> Tuple[str, ...]:
        """
        Find the unique URLs mentioned in event notes.

        Args:
            notes: Event notes

        Returns:
            Sorted tuple of distinct URLs
        """
        return tuple(sorted(set(self.URL_PATTERN.findall(notes))))

    def _parse_time_range(
        self,
        time_range: str,
        title: str
    ) -> Tuple[Optional[str], Optional[str], int]:
        """
        Parse "HH:MM - HH:MM" into 12-hour start/end times and a duration.

        Args:
            time_range: Raw time range field
            title: Event title, for logging

        Returns:
            Tuple of (start_at, end_at, duration); (None, None, 0) for
            all-day events
        """
        match = self.TIME_RANGE_PATTERN.match(time_range.strip())
        if not match:
            return None, None, 0

        start, end = match.group('start'), match.group('end')
        duration = minutes_between(start, end)

        if duration < 0:
            logger.warning(
                f"Event '{title}' ends before it starts ({start} - {end}); "
                f"recording a duration of 0"
            )
            duration = 0

        return to_12_hour(start), to_12_hour(end), duration
