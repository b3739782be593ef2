from __future__ import annotations

import functools

from clinicsched.domain import Day, InvalidArgumentError, Slot
from clinicsched.weekly_calendar import WeeklyCalendar


def _check_name(name: object) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgumentError("Doctor name must be a non-blank string")
    return name


@functools.total_ordering
class Doctor:
    """A doctor and the weekly calendar they own.

    Slot operations are forwarded to the calendar unchanged, including the
    InvalidHourError / False-on-conflict contract. Doctors sort by badge id.

    Ordering looks at the badge alone while equality compares every field,
    so the two only agree when badges are unique (Clinic enforces that).
    """

    def __init__(self, name: str, badge_id: int, specialty: str, calendar: WeeklyCalendar):
        if specialty is None:
            raise InvalidArgumentError("Doctor specialty is required")
        if calendar is None:
            raise InvalidArgumentError("Doctor calendar is required")

        self._name = _check_name(name)
        self._badge_id = badge_id
        self._specialty = specialty
        self._calendar = calendar

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = _check_name(value)

    @property
    def badge_id(self) -> int:
        return self._badge_id

    @property
    def specialty(self) -> str:
        return self._specialty

    def book_appointment(self, day: Day, hour: int, details: str) -> bool:
        return self._calendar.book(day, hour, details)

    def cancel_appointment(self, day: Day, hour: int) -> bool:
        return self._calendar.cancel(day, hour)

    def is_available(self, day: Day, hour: int) -> bool:
        return self._calendar.is_available(day, hour)

    def get_slot(self, day: Day, hour: int) -> str | None:
        return self._calendar.get_slot(day, hour)

    def export_schedule(self) -> dict[Day, list[str | None]]:
        return self._calendar.export_snapshot()

    def available_hours(self, day: Day) -> list[int]:
        return self._calendar.available_hours(day)

    def booked_slots(self) -> list[tuple[Slot, str]]:
        return self._calendar.booked_slots()

    @property
    def hours(self) -> range:
        return self._calendar.hours

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Doctor):
            return NotImplemented
        return (
            self._name == other._name
            and self._badge_id == other._badge_id
            and self._specialty == other._specialty
            and self._calendar == other._calendar
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Doctor):
            return NotImplemented
        return self._badge_id < other._badge_id

    def __hash__(self) -> int:
        return hash(self._badge_id)

    def __repr__(self) -> str:
        return f"Doctor(name={self._name!r}, badge_id={self._badge_id!r}, specialty={self._specialty!r})"

    def __str__(self) -> str:
        return f"Dr. {self._name} (badge #{self._badge_id}, {self._specialty})\n{self._calendar}"
