"""Render event JSON as Tana paste outline text."""
import json
import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

TANA_HEADER = '%%tana%%'
ALL_DAY_LABEL = 'All Day Event'
TAG = '#meeting'


def render_line(record: Dict[str, Any]) -> str:
    """
    Render one event as an outline node.

    Args:
        record: Event dict as produced by format_collection

    Returns:
        Line like "- 08:30pm-09:30pm Standup #meeting"
    """
    start_at = record.get('start_at')
    end_at = record.get('end_at')

    if start_at is None:
        start_at = ALL_DAY_LABEL
        end_at = ''

    return f"- {start_at}-{end_at or ''} {record['title']} {TAG}"


def render_outline(records: List[Dict[str, Any]]) -> List[str]:
    """
    Render a flat list of events, preceded by the Tana paste header.

    Args:
        records: Event dicts in display order

    Returns:
        Output lines
    """
    lines = [TANA_HEADER]
    lines.extend(render_line(record) for record in records)
    logger.info(f"Rendered {len(records)} events as outline nodes")
    return lines


def load_records(text: str) -> List[Dict[str, Any]]:
    """
    Load event records from JSON produced by ical-buddy-json.

    Grouped output ({"date": [...]}) is flattened in key order.

    Raises:
        ValueError: If the JSON is not an event list or date mapping, or
            an event is not an object with a string title
    """
    data = json.loads(text)

    if isinstance(data, dict):
        records = []
        for date, group in data.items():
            if not isinstance(group, list):
                raise ValueError(
                    f"Expected a list of events for {date}, "
                    f"got {type(group).__name__}"
                )
            records.extend(group)
    elif isinstance(data, list):
        records = data
    else:
        raise ValueError(
            f"Expected a JSON array of events, got {type(data).__name__}"
        )

    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValueError(
                f"Event {index} is not an object: {type(record).__name__}"
            )
        if not isinstance(record.get('title'), str):
            raise ValueError(f"Event {index} is missing a title")

    return records
