"""Client for the icalBuddy command line tool."""
import logging
import shutil
import subprocess
from typing import List, Optional

from icalbuddy.parser import (
    NEWLINE_SEPARATOR,
    PROPERTY_SEPARATOR,
    SECTION_SEPARATOR,
)

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when icalBuddy cannot produce event output."""


class MissingDependencyError(FetchError):
    """Raised when the icalBuddy executable cannot be found."""


class ICalBuddyClient:
    """Runs icalBuddy and returns its raw, sentinel-delimited output."""

    EVENT_PROPERTIES = 'title,datetime,notes'

    def __init__(self, executable: str = 'icalBuddy', timeout: int = 30):
        """
        Initialize the icalBuddy client.

        Args:
            executable: Name or path of the icalBuddy binary
            timeout: Seconds to wait for icalBuddy to finish (default: 30)
        """
        self.executable = executable
        self.timeout = timeout

    def ensure_available(self) -> None:
        """
        Check that the icalBuddy executable is on PATH.

        Raises:
            MissingDependencyError: If it cannot be found
        """
        if shutil.which(self.executable) is None:
            raise MissingDependencyError(f"{self.executable} missing!")

    def build_command(
        self,
        start_at: str,
        end_at: str,
        calendars: Optional[str] = None
    ) -> List[str]:
        """
        Build the icalBuddy argument list for a date window.

        Args:
            start_at: Window start, e.g. "2021-09-12 00:00:00 -0400"
            end_at: Window end, e.g. "2021-09-18 23:59:59 -0400"
            calendars: Comma separated calendar names to include

        Returns:
            Command as a list of arguments
        """
        command = [self.executable]

        if calendars:
            command += ['--includeCals', calendars]

        command += [
            '--separateByDate',
            '--showEmptyDates',
            '--sectionSeparator', SECTION_SEPARATOR,
            '--noRelativeDates',
            '--dateFormat', '%Y-%m-%d',
            '--timeFormat', '%H:%M',
            '--bullet', '',
            '--propertySeparators', f"|{PROPERTY_SEPARATOR}|",
            '--includeEventProps', self.EVENT_PROPERTIES,
            '--propertyOrder', self.EVENT_PROPERTIES,
            '--noPropNames',
            '--notesNewlineReplacement', NEWLINE_SEPARATOR,
            f"eventsFrom:{start_at}",
            f"to:{end_at}",
        ]
        return command

    def fetch_events(
        self,
        start_at: str,
        end_at: str,
        calendars: Optional[str] = None
    ) -> str:
        """
        Fetch raw event output for a date window.

        Multi-day events that start before start_at are not included.

        Args:
            start_at: Window start timestamp
            end_at: Window end timestamp
            calendars: Comma separated calendar names to include

        Returns:
            icalBuddy output as text

        Raises:
            MissingDependencyError: If icalBuddy cannot be executed
            FetchError: If icalBuddy fails or times out
        """
        command = self.build_command(start_at, end_at, calendars)
        logger.info(
            f"Fetching events from {start_at} to {end_at}",
            extra={'calendars': calendars}
        )

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except FileNotFoundError as e:
            raise MissingDependencyError(f"{self.executable} missing!") from e
        except subprocess.TimeoutExpired as e:
            raise FetchError(
                f"{self.executable} timed out after {self.timeout} seconds"
            ) from e
        except OSError as e:
            raise FetchError(f"Unable to run {self.executable}: {e}") from e

        if result.returncode != 0:
            logger.debug(f"icalBuddy stderr: {result.stderr.strip()}")
            raise FetchError(
                f"Error getting events! ({self.executable} exited with "
                f"status {result.returncode})"
            )

        logger.debug(f"icalBuddy returned {len(result.stdout)} characters")
        return result.stdout
