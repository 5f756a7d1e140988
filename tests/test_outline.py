"""Unit tests for the Tana outline renderer."""
import json

import pytest

from renderer.outline import load_records, render_line, render_outline


@pytest.fixture
def records():
    return [
        {
            'title': "Standup",
            'calendar': "Work",
            'date': "2021-09-13",
            'notes': "",
            'start_at': "09:00am",
            'end_at': "09:15am",
            'duration': 15,
            'urls': [],
        },
        {
            'title': "Holiday",
            'calendar': "Home",
            'date': "2021-09-13",
            'notes': "Office closed",
            'start_at': None,
            'end_at': None,
            'duration': 0,
            'urls': [],
        },
    ]


class TestRenderOutline:
    """Test cases for outline rendering."""

    def test_render_timed_event(self, records):
        assert render_line(records[0]) == "- 09:00am-09:15am Standup #meeting"

    def test_render_all_day_event(self, records):
        assert render_line(records[1]) == "- All Day Event- Holiday #meeting"

    def test_render_outline_has_header(self, records):
        assert render_outline(records) == [
            "%%tana%%",
            "- 09:00am-09:15am Standup #meeting",
            "- All Day Event- Holiday #meeting",
        ]

    def test_render_outline_empty(self):
        assert render_outline([]) == ["%%tana%%"]


class TestLoadRecords:
    """Test cases for load_records."""

    def test_load_flat_list(self, records):
        assert load_records(json.dumps(records)) == records

    def test_load_grouped_mapping(self, records):
        grouped = {"2021-09-13": records[:1], "2021-09-14": records[1:]}

        assert load_records(json.dumps(grouped)) == records

    def test_load_invalid_json(self):
        with pytest.raises(ValueError):
            load_records("not json")

    def test_load_unexpected_type(self):
        with pytest.raises(ValueError):
            load_records('"just a string"')

    def test_load_grouped_value_not_a_list(self):
        with pytest.raises(ValueError, match="2021-09-12"):
            load_records('{"2021-09-12": 5}')

    def test_load_event_without_title(self):
        with pytest.raises(ValueError, match="missing a title"):
            load_records('[{"start_at": null}]')

    def test_load_event_not_an_object(self):
        with pytest.raises(ValueError, match="not an object"):
            load_records('["Standup"]')
