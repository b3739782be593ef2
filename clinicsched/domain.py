from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class Day(IntEnum):
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    def __str__(self) -> str:
        return self.name

    # IntEnum would otherwise format as the bare number in f-strings.
    def __format__(self, format_spec: str) -> str:
        return format(self.name, format_spec)


@dataclass(frozen=True, order=True)
class Slot:
    """One bookable hour of one weekday.

    Ordering is chronological within the week: day first, then hour.
    """

    day: Day
    hour: int  # 0..23, start of the hour


class InvalidArgumentError(ValueError):
    """A record or calendar was built or fed with invalid data.

    This is a programming error on the caller side, retrying won't help.
    """


class InvalidHourError(InvalidArgumentError):
    """Hour is outside the calendar's working window."""

    def __init__(self, hour: object, start_hour: int, end_hour: int):
        self.hour = hour
        self.start_hour = start_hour
        self.end_hour = end_hour
        super().__init__(f"Hour must be between {start_hour} and {end_hour - 1}, got {hour!r}")
