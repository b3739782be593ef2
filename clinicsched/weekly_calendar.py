from __future__ import annotations

import logging
import threading

from clinicsched.domain import Day, InvalidArgumentError, InvalidHourError, Slot

logger = logging.getLogger(__name__)

DEFAULT_START_HOUR = 8
DEFAULT_END_HOUR = 17


def _is_int(value: object) -> bool:
    # bool is an int subclass, but True/False are never meant as hours.
    return isinstance(value, int) and not isinstance(value, bool)


class WeeklyCalendar:
    """Hourly slots for one week of a single doctor.

    Every day holds the same fixed number of cells, one per working hour in
    ``[start_hour, end_hour)``. A cell is either ``None`` (available) or the
    booking description. Only the cell contents ever change; the grid itself
    is built once.
    """

    def __init__(self, start_hour: int = DEFAULT_START_HOUR, end_hour: int = DEFAULT_END_HOUR):
        if not _is_int(start_hour) or not _is_int(end_hour):
            raise InvalidArgumentError(f"Working hours must be integers, got {start_hour!r}..{end_hour!r}")
        if start_hour < 0 or end_hour > 24 or start_hour >= end_hour:
            raise InvalidArgumentError(f"Invalid working hours: {start_hour}..{end_hour}")

        self._start_hour = start_hour
        self._end_hour = end_hour
        self._slots_per_day = end_hour - start_hour
        # Indexed by (day ordinal, hour - start_hour).
        self._grid: list[list[str | None]] = [[None] * self._slots_per_day for _ in Day]
        self._lock = threading.Lock()

    @property
    def start_hour(self) -> int:
        return self._start_hour

    @property
    def end_hour(self) -> int:
        return self._end_hour

    @property
    def slots_per_day(self) -> int:
        return self._slots_per_day

    @property
    def hours(self) -> range:
        return range(self._start_hour, self._end_hour)

    def _validate_hour(self, hour: int) -> None:
        if not _is_int(hour) or hour < self._start_hour or hour >= self._end_hour:
            raise InvalidHourError(hour, self._start_hour, self._end_hour)

    def _cells(self, day: Day) -> list[str | None]:
        return self._grid[Day(day)]

    def book(self, day: Day, hour: int, details: str) -> bool:
        """Store ``details`` in the slot if it is free.

        Returns False, leaving the existing booking in place, when the slot is
        already taken. Raises InvalidHourError for hours outside the window.
        """
        self._validate_hour(hour)
        if not isinstance(details, str) or not details:
            raise InvalidArgumentError("Booking details must be a non-empty string")

        cells = self._cells(day)
        i = hour - self._start_hour
        with self._lock:
            if cells[i] is not None:
                logger.debug("Slot %s %02d:00 already booked", Day(day), hour)
                return False
            cells[i] = details

        logger.info("Booked %s %02d:00", Day(day), hour)
        return True

    def cancel(self, day: Day, hour: int) -> bool:
        """Free the slot. Returns False if there was nothing to cancel."""
        self._validate_hour(hour)

        cells = self._cells(day)
        i = hour - self._start_hour
        with self._lock:
            if cells[i] is None:
                return False
            cells[i] = None

        logger.info("Cancelled %s %02d:00", Day(day), hour)
        return True

    def is_available(self, day: Day, hour: int) -> bool:
        self._validate_hour(hour)
        return self._cells(day)[hour - self._start_hour] is None

    def get_slot(self, day: Day, hour: int) -> str | None:
        self._validate_hour(hour)
        return self._cells(day)[hour - self._start_hour]

    def available_hours(self, day: Day) -> list[int]:
        cells = self._cells(day)
        return [h for h, cell in zip(self.hours, cells) if cell is None]

    def booked_slots(self) -> list[tuple[Slot, str]]:
        with self._lock:
            return [
                (Slot(day=day, hour=hour), cell)
                for day in Day
                for hour, cell in zip(self.hours, self._grid[day])
                if cell is not None
            ]

    def export_snapshot(self) -> dict[Day, list[str | None]]:
        """Copy of every day's cells; changing it never touches the calendar."""
        with self._lock:
            return {day: list(self._grid[day]) for day in Day}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeeklyCalendar):
            return NotImplemented
        return (
            self._start_hour == other._start_hour
            and self._end_hour == other._end_hour
            and self._slots_per_day == other._slots_per_day
            and self._grid == other._grid
        )

    # Mutable: equal calendars may stop being equal after a booking.
    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        booked = sum(cell is not None for cells in self._grid for cell in cells)
        return f"WeeklyCalendar(start_hour={self._start_hour}, end_hour={self._end_hour}, booked={booked})"

    def __str__(self) -> str:
        lines: list[str] = []
        for day in Day:
            lines.append("")
            lines.append(f"--- {day} ---")
            for hour, cell in zip(self.hours, self._grid[day]):
                lines.append(f"{hour:02d}:00-{hour + 1:02d}:00: {cell if cell is not None else 'Available'}")
        return "\n".join(lines) + "\n"
