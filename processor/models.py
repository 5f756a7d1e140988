"""Data models for event parsing and processing."""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Tuple


class LineShape(Enum):
    """Shapes a line of icalBuddy output can take, in match priority order."""
    BLANK = 'blank'
    SECTION = 'section'
    EMPTY_DAY = 'empty_day'
    TITLE_TIME_NOTES = 'title_time_notes'
    TITLE_TIME = 'title_time'
    TITLE_NOTES = 'title_notes'
    TITLE_ONLY = 'title_only'


@dataclass(frozen=True)
class ParsedLine:
    """A classified line with the raw fields its shape carries."""
    shape: LineShape
    title: str = ''
    time_range: str = ''
    notes: str = ''
    date: str = ''


@dataclass(frozen=True)
class ParserContext:
    """State carried from one line to the next."""
    current_date: str = ''


@dataclass
class RawEvent:
    """Textual fields of one event line before normalization."""
    title: str
    date: str
    time_range: str
    notes: str


@dataclass(frozen=True)
class EventRecord:
    """Normalized calendar event."""
    title: str
    calendar: str
    date: str
    notes: str
    start_at: Optional[str]
    end_at: Optional[str]
    duration: int
    urls: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.title:
            raise ValueError("EventRecord.title must not be empty")

        if (self.start_at is None) != (self.end_at is None):
            raise ValueError(
                f"Event '{self.title}' must have both start_at and end_at "
                f"or neither (got {self.start_at!r}, {self.end_at!r})"
            )

        if not isinstance(self.duration, int) or self.duration < 0:
            raise ValueError(
                f"Event '{self.title}' has invalid duration: {self.duration!r}"
            )

        if self.start_at is None and self.duration != 0:
            raise ValueError(
                f"All-day event '{self.title}' must have zero duration"
            )

        if len(set(self.urls)) != len(self.urls):
            raise ValueError(f"Event '{self.title}' has duplicate urls")

    @property
    def all_day(self) -> bool:
        """True when the event has no time of day."""
        return self.start_at is None

    def to_dict(self) -> dict:
        """Return the JSON-ready representation of the record."""
        data = asdict(self)
        data['urls'] = list(self.urls)
        return data
