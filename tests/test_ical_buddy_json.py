"""Integration tests for the ical-buddy-json command."""
import json
import logging
from unittest.mock import patch

import pytest

from ical_buddy_json import JsonFormatter, event_window, main, setup_logging
from icalbuddy.client import FetchError, ICalBuddyClient, MissingDependencyError
from icalbuddy.parser import NEWLINE_SEPARATOR as NL
from icalbuddy.parser import PROPERTY_SEPARATOR as PS
from icalbuddy.parser import SECTION_SEPARATOR as SS

SAMPLE_OUTPUT = "\n".join([
    f"2021-09-12:{SS}",
    "Nothing.",
    "",
    f"2021-09-13:{SS}",
    f"Standup (Work){PS}09:00 - 09:15{PS}Zoom: https://zoom.us/j/123{NL}Agenda in doc",
    f"newnew (Home){PS}18:45 - 19:45",
    f"Holiday (Home){PS}Office closed",
    "Birthday (Family)",
    f"2021-09-14:{SS}",
    f"test2 (Work){PS}20:30 - 21:30{PS}notes all day2",
    "",
])


@pytest.fixture
def mock_env(monkeypatch):
    """Set up environment variables for testing."""
    monkeypatch.setenv('LOG_LEVEL', 'INFO')
    monkeypatch.setenv('TIMEOUT_SECONDS', '15')
    monkeypatch.delenv('DEBUG', raising=False)
    monkeypatch.delenv('ICALBUDDY_PATH', raising=False)


@pytest.fixture
def mock_icalbuddy():
    """Patch icalBuddy so it looks installed and returns sample output."""
    with patch.object(ICalBuddyClient, 'ensure_available') as mock_available, \
            patch.object(ICalBuddyClient, 'fetch_events', return_value=SAMPLE_OUTPUT) as mock_fetch:
        yield mock_available, mock_fetch


class TestMain:
    """Test cases for the command line entry point."""

    def test_main_outputs_event_array(self, mock_env, mock_icalbuddy, capsys):
        """Test the default run prints a JSON array of events."""
        exit_code = main(['2021-09-15'])

        assert exit_code == 0
        events = json.loads(capsys.readouterr().out)

        assert [e['title'] for e in events] == [
            "Standup", "newnew", "Holiday", "Birthday", "test2"
        ]
        assert events[0] == {
            'title': "Standup",
            'calendar': "Work",
            'date': "2021-09-13",
            'notes': "Zoom: https://zoom.us/j/123\nAgenda in doc",
            'start_at': "09:00am",
            'end_at': "09:15am",
            'duration': 15,
            'urls': ["https://zoom.us/j/123"],
        }
        assert events[1]['notes'] == ""
        assert events[1]['duration'] == 60
        assert events[2]['start_at'] is None
        assert events[3]['calendar'] == "Family"
        assert events[4]['date'] == "2021-09-14"
        assert events[4]['start_at'] == "08:30pm"

    def test_main_weekly_window(self, mock_env, mock_icalbuddy):
        """Test the weekly window runs Sunday to Saturday."""
        _, mock_fetch = mock_icalbuddy

        main(['-w', '2021-09-15'])

        start_at, end_at, calendars = mock_fetch.call_args[0]
        assert start_at.startswith("2021-09-12 00:00:00")
        assert end_at.startswith("2021-09-18 23:59:59")
        assert calendars is None

    def test_main_daily_window_with_calendars(self, mock_env, mock_icalbuddy):
        _, mock_fetch = mock_icalbuddy

        main(['-d', '-c', 'Work,Home', '2021-09-15'])

        start_at, end_at, calendars = mock_fetch.call_args[0]
        assert start_at.startswith("2021-09-15 00:00:00")
        assert end_at.startswith("2021-09-15 23:59:59")
        assert calendars == "Work,Home"

    def test_main_group_by_date(self, mock_env, mock_icalbuddy, capsys):
        exit_code = main(['--group-by-date', '2021-09-15'])

        assert exit_code == 0
        grouped = json.loads(capsys.readouterr().out)

        assert set(grouped) == {"2021-09-13", "2021-09-14"}
        assert [e['title'] for e in grouped["2021-09-13"]] == [
            "Standup", "newnew", "Holiday", "Birthday"
        ]
        assert [e['title'] for e in grouped["2021-09-14"]] == ["test2"]

    def test_main_raw(self, mock_env, mock_icalbuddy, capsys):
        """Test raw mode prints icalBuddy output unchanged."""
        exit_code = main(['-r', '2021-09-15'])

        assert exit_code == 0
        assert capsys.readouterr().out == SAMPLE_OUTPUT

    def test_main_defaults_to_today(self, mock_env, mock_icalbuddy):
        _, mock_fetch = mock_icalbuddy

        assert main([]) == 0
        assert mock_fetch.call_count == 1

    def test_main_fetch_error(self, mock_env, mock_icalbuddy, capsys):
        """Test a fetch failure exits 1 and prints nothing to stdout."""
        _, mock_fetch = mock_icalbuddy
        mock_fetch.side_effect = FetchError("Error getting events!")

        exit_code = main(['2021-09-15'])

        assert exit_code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Error getting events!" in captured.err

    def test_main_missing_icalbuddy(self, mock_env, mock_icalbuddy, capsys):
        mock_available, mock_fetch = mock_icalbuddy
        mock_available.side_effect = MissingDependencyError("icalBuddy missing!")

        exit_code = main(['2021-09-15'])

        assert exit_code == 1
        mock_fetch.assert_not_called()
        assert capsys.readouterr().out == ""

    def test_main_invalid_date(self, mock_env, mock_icalbuddy, capsys):
        _, mock_fetch = mock_icalbuddy

        exit_code = main(['09/15/2021'])

        assert exit_code == 1
        mock_fetch.assert_not_called()

    def test_main_invalid_event_time_aborts(self, mock_env, mock_icalbuddy, capsys):
        """Test an unparseable time aborts the whole run."""
        _, mock_fetch = mock_icalbuddy
        mock_fetch.return_value = f"2021-09-13:{SS}\nBad{PS}29:00 - 29:30\n"

        exit_code = main(['2021-09-15'])

        assert exit_code == 1
        assert capsys.readouterr().out == ""

    def test_main_weekly_and_daily_conflict(self, mock_env):
        with pytest.raises(SystemExit) as exc_info:
            main(['-w', '-d'])

        assert exc_info.value.code == 1

    def test_main_unknown_option(self, mock_env, capsys):
        """Test an unknown option exits 1 with a usage message."""
        with pytest.raises(SystemExit) as exc_info:
            main(['--bogus'])

        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "unrecognized arguments: --bogus" in captured.err

    def test_main_uses_icalbuddy_path(self, mock_env, monkeypatch):
        """Test ICALBUDDY_PATH and TIMEOUT_SECONDS configure the client."""
        monkeypatch.setenv('ICALBUDDY_PATH', '/opt/bin/icalBuddy')

        with patch('ical_buddy_json.fetch_records', return_value=[]) as mock_fetch:
            main(['2021-09-15'])

        client = mock_fetch.call_args[0][0]
        assert client.executable == '/opt/bin/icalBuddy'
        assert client.timeout == 15


class TestEventWindow:
    """Test cases for event_window."""

    def test_weekly(self):
        start_at, end_at = event_window('2021-01-01')

        assert start_at.startswith("2020-12-27 00:00:00")
        assert end_at.startswith("2021-01-02 23:59:59")

    def test_daily(self):
        start_at, end_at = event_window('2021-01-01', mode='daily')

        assert start_at.startswith("2021-01-01 00:00:00")
        assert end_at.startswith("2021-01-01 23:59:59")


class TestLogging:
    """Test cases for logging setup."""

    def test_setup_logging_level(self):
        setup_logging('DEBUG')

        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, JsonFormatter)

    def test_setup_logging_unknown_level(self):
        setup_logging('LOUD')

        assert logging.getLogger().level == logging.WARNING

    def test_debug_env_forces_debug(self, mock_env, monkeypatch):
        monkeypatch.setenv('DEBUG', '1')

        with patch('ical_buddy_json.fetch_records', return_value=[]):
            main(['2021-09-15'])

        assert logging.getLogger().level == logging.DEBUG

    def test_json_formatter(self):
        record = logging.LogRecord(
            name='test', level=logging.INFO, pathname=__file__, lineno=1,
            msg='hello %s', args=('world',), exc_info=None
        )

        data = json.loads(JsonFormatter().format(record))

        assert data['message'] == 'hello world'
        assert data['level'] == 'INFO'
        assert data['logger'] == 'test'
        assert 'timestamp' in data
