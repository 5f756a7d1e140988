"""Arrange event records into the JSON collections the CLI prints."""
import json
from typing import Any, Dict, Iterable, List, Union

from processor.models import EventRecord

Collection = Union[List[Dict[str, Any]], Dict[str, List[Dict[str, Any]]]]


def format_collection(
    records: Iterable[EventRecord],
    group_by_date: bool = False
) -> Collection:
    """
    Format records as a list, or as a mapping of date to records.

    Args:
        records: EventRecords in parse order
        group_by_date: If True, return {"YYYY-MM-DD": [record, ...], ...}

    Returns:
        JSON-ready list or dict; order within each date is preserved
    """
    if not group_by_date:
        return [record.to_dict() for record in records]

    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for record in records:
        grouped.setdefault(record.date, []).append(record.to_dict())
    return grouped


def to_json(collection: Collection) -> str:
    """Serialize a collection as indented JSON."""
    return json.dumps(collection, indent=2, ensure_ascii=False)
