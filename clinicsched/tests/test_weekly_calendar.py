from __future__ import annotations

import threading

import pytest

from clinicsched.domain import Day, InvalidArgumentError, InvalidHourError, Slot
from clinicsched.weekly_calendar import WeeklyCalendar


def test_default_working_window_is_8_to_17() -> None:
    cal = WeeklyCalendar()
    assert (cal.start_hour, cal.end_hour, cal.slots_per_day) == (8, 17, 9)
    assert cal.hours == range(8, 17)


@pytest.mark.parametrize("start, end", [(-1, 10), (8, 25), (10, 10), (12, 8), (0, 0)])
def test_invalid_working_hours_are_rejected(start: int, end: int) -> None:
    with pytest.raises(InvalidArgumentError, match=r"Invalid working hours"):
        WeeklyCalendar(start, end)


def test_non_integer_working_hours_are_rejected() -> None:
    with pytest.raises(InvalidArgumentError):
        WeeklyCalendar(8.0, 17)  # type: ignore[arg-type]


def test_full_day_window_is_allowed() -> None:
    cal = WeeklyCalendar(0, 24)
    assert cal.slots_per_day == 24
    assert cal.book(Day.SUNDAY, 23, "late") is True
    assert cal.book(Day.MONDAY, 0, "early") is True


def test_booking_scenario() -> None:
    cal = WeeklyCalendar(8, 17)

    assert cal.book(Day.MONDAY, 9, "checkup") is True
    assert cal.book(Day.MONDAY, 9, "other") is False
    assert cal.get_slot(Day.MONDAY, 9) == "checkup"
    assert cal.cancel(Day.MONDAY, 9) is True
    assert cal.is_available(Day.MONDAY, 9) is True

    with pytest.raises(InvalidHourError):
        cal.book(Day.MONDAY, 7, "x")


@pytest.mark.parametrize("day", list(Day))
@pytest.mark.parametrize("hour", range(8, 17))
def test_book_then_cancel_restores_availability(day: Day, hour: int) -> None:
    cal = WeeklyCalendar()

    assert cal.book(day, hour, "visit") is True
    assert cal.is_available(day, hour) is False

    assert cal.cancel(day, hour) is True
    assert cal.is_available(day, hour) is True
    assert cal.get_slot(day, hour) is None


def test_cancel_never_booked_slot_is_noop() -> None:
    cal = WeeklyCalendar()
    cal.book(Day.TUESDAY, 10, "keep me")
    before = cal.export_snapshot()

    assert cal.cancel(Day.TUESDAY, 11) is False
    assert cal.export_snapshot() == before


@pytest.mark.parametrize("hour", [-5, 0, 7, 17, 18, 23, 24, 100])
def test_out_of_window_hours_fail_without_changing_state(hour: int) -> None:
    cal = WeeklyCalendar(8, 17)
    cal.book(Day.FRIDAY, 8, "first")
    before = cal.export_snapshot()

    with pytest.raises(InvalidHourError) as exc_info:
        cal.book(Day.FRIDAY, hour, "x")
    assert exc_info.value.hour == hour
    assert (exc_info.value.start_hour, exc_info.value.end_hour) == (8, 17)

    with pytest.raises(InvalidHourError):
        cal.cancel(Day.FRIDAY, hour)
    with pytest.raises(InvalidHourError):
        cal.is_available(Day.FRIDAY, hour)
    with pytest.raises(InvalidHourError):
        cal.get_slot(Day.FRIDAY, hour)

    assert cal.export_snapshot() == before


def test_invalid_hour_error_is_an_invalid_argument_error() -> None:
    with pytest.raises(InvalidArgumentError):
        WeeklyCalendar().get_slot(Day.MONDAY, 3)


def test_non_integer_hour_is_rejected() -> None:
    cal = WeeklyCalendar()
    with pytest.raises(InvalidHourError):
        cal.book(Day.MONDAY, "9", "x")  # type: ignore[arg-type]
    with pytest.raises(InvalidHourError):
        cal.is_available(Day.MONDAY, True)  # type: ignore[arg-type]


@pytest.mark.parametrize("details", ["", None])
def test_empty_details_are_rejected(details: str | None) -> None:
    cal = WeeklyCalendar()
    with pytest.raises(InvalidArgumentError, match=r"non-empty"):
        cal.book(Day.MONDAY, 9, details)  # type: ignore[arg-type]
    assert cal.is_available(Day.MONDAY, 9) is True


def test_hour_is_validated_before_details() -> None:
    with pytest.raises(InvalidHourError):
        WeeklyCalendar().book(Day.MONDAY, 20, "")


def test_export_snapshot_is_independent_copy() -> None:
    cal = WeeklyCalendar()
    cal.book(Day.WEDNESDAY, 12, "lunch consult")

    snapshot = cal.export_snapshot()
    assert list(snapshot) == list(Day)
    assert all(len(cells) == cal.slots_per_day for cells in snapshot.values())
    assert snapshot[Day.WEDNESDAY][12 - 8] == "lunch consult"

    snapshot[Day.WEDNESDAY][12 - 8] = "tampered"
    snapshot[Day.MONDAY][0] = "tampered"
    snapshot[Day.THURSDAY].clear()

    assert cal.get_slot(Day.WEDNESDAY, 12) == "lunch consult"
    assert cal.get_slot(Day.MONDAY, 8) is None
    assert cal.export_snapshot()[Day.THURSDAY] == [None] * cal.slots_per_day


def test_day_accepts_enum_ordinals() -> None:
    cal = WeeklyCalendar()
    cal.book(0, 9, "by ordinal")  # type: ignore[arg-type]
    assert cal.get_slot(Day.MONDAY, 9) == "by ordinal"

    with pytest.raises(ValueError):
        cal.book(7, 9, "no such day")  # type: ignore[arg-type]


def test_available_hours_and_booked_slots() -> None:
    cal = WeeklyCalendar(9, 13)
    cal.book(Day.THURSDAY, 10, "b")
    cal.book(Day.MONDAY, 12, "a")
    cal.book(Day.THURSDAY, 9, "c")

    assert cal.available_hours(Day.THURSDAY) == [11, 12]
    assert cal.available_hours(Day.SUNDAY) == [9, 10, 11, 12]
    assert cal.booked_slots() == [
        (Slot(Day.MONDAY, 12), "a"),
        (Slot(Day.THURSDAY, 9), "c"),
        (Slot(Day.THURSDAY, 10), "b"),
    ]


def test_equality_follows_bounds_and_cells() -> None:
    a = WeeklyCalendar(8, 17)
    b = WeeklyCalendar(8, 17)
    for cal in (a, b):
        cal.book(Day.MONDAY, 9, "checkup")
        cal.book(Day.SATURDAY, 16, "follow-up")
    assert a == b

    b.book(Day.SUNDAY, 8, "extra")
    assert a != b

    b.cancel(Day.SUNDAY, 8)
    assert a == b

    assert WeeklyCalendar(8, 17) != WeeklyCalendar(8, 18)
    assert WeeklyCalendar() != "calendar"


def test_calendar_is_unhashable() -> None:
    with pytest.raises(TypeError):
        hash(WeeklyCalendar())


def test_str_renders_every_day_and_slot() -> None:
    cal = WeeklyCalendar(8, 10)
    cal.book(Day.MONDAY, 9, "checkup")
    text = str(cal)

    assert "--- MONDAY ---\n08:00-09:00: Available\n09:00-10:00: checkup\n" in text
    assert "--- SUNDAY ---\n08:00-09:00: Available\n09:00-10:00: Available\n" in text
    assert text.count("Available") == 13


def test_str_last_hour_of_day() -> None:
    cal = WeeklyCalendar(23, 24)
    assert "23:00-24:00: Available" in str(cal)


def test_concurrent_booking_of_same_slot_has_single_winner() -> None:
    cal = WeeklyCalendar()
    barrier = threading.Barrier(16)
    results: list[bool] = []
    results_lock = threading.Lock()

    def worker(n: int) -> None:
        barrier.wait()
        ok = cal.book(Day.TUESDAY, 14, f"patient {n}")
        with results_lock:
            results.append(ok)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
    assert results.count(False) == 15
    assert cal.get_slot(Day.TUESDAY, 14) is not None
