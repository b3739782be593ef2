from __future__ import annotations

import logging
import threading
from collections import defaultdict

from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt

from clinicsched.config import Settings
from clinicsched.doctor import Doctor
from clinicsched.domain import Day, InvalidArgumentError, Slot
from clinicsched.records import Appointment
from clinicsched.weekly_calendar import WeeklyCalendar

logger = logging.getLogger(__name__)


class _SlotTaken(Exception):
    """Raised inside the next-free-hour search to make tenacity move on."""

    def __init__(self, slot: Slot):
        self.slot = slot
        super().__init__(f"{slot.day} {slot.hour:02d}:00 is taken")


def _log_after_attempt(retry_state: RetryCallState) -> None:
    if retry_state.outcome is not None and retry_state.outcome.failed:
        logger.debug("Attempt %s: %s", retry_state.attempt_number, retry_state.outcome.exception())


class Clinic:
    """Registry of doctors plus the appointments booked through it.

    Badge uniqueness is enforced here, the calendars themselves don't know
    about each other.
    """

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or Settings()
        self._doctors: dict[int, Doctor] = {}
        self._appointments: dict[tuple[int, Slot], Appointment] = {}
        self._lock = threading.Lock()

    @property
    def settings(self) -> Settings:
        return self._settings

    def register_doctor(self, doctor: Doctor) -> None:
        with self._lock:
            if doctor.badge_id in self._doctors:
                raise InvalidArgumentError(f"Duplicate badge id: {doctor.badge_id}")
            self._doctors[doctor.badge_id] = doctor
        logger.info("Registered %r", doctor)

    def add_doctor(self, name: str, badge_id: int, specialty: str) -> Doctor:
        calendar = WeeklyCalendar(self._settings.working_start_hour, self._settings.working_end_hour)
        doctor = Doctor(name, badge_id, specialty, calendar)
        self.register_doctor(doctor)
        return doctor

    def get_doctor(self, badge_id: int) -> Doctor:
        return self._doctors[badge_id]

    def doctors(self) -> list[Doctor]:
        return sorted(self._doctors.values())

    def doctors_by_specialty(self, specialty: str) -> list[Doctor]:
        wanted = specialty.casefold()
        return [d for d in self.doctors() if d.specialty.casefold() == wanted]

    def find_available_doctor(self, specialty: str, day: Day, hour: int) -> Doctor | None:
        for doctor in self.doctors_by_specialty(specialty):
            # Doctors may work different windows; outside it simply means "not this one".
            if hour in doctor.hours and doctor.is_available(day, hour):
                return doctor
        return None

    def _require_registered(self, doctor: Doctor) -> None:
        if self._doctors.get(doctor.badge_id) is not doctor:
            raise InvalidArgumentError(f"Doctor with badge {doctor.badge_id} is not registered in this clinic")

    def book(self, appointment: Appointment, day: Day, hour: int) -> bool:
        doctor = appointment.doctor
        self._require_registered(doctor)

        with self._lock:
            if not doctor.book_appointment(day, hour, appointment.details()):
                return False
            self._appointments[(doctor.badge_id, Slot(day=Day(day), hour=hour))] = appointment
        return True

    def book_next_available(self, appointment: Appointment, day: Day, from_hour: int | None = None) -> int | None:
        """Book the first free hour on ``day`` starting at ``from_hour``.

        Returns the booked hour, or None when no free hour was found within
        the search limit.
        """
        doctor = appointment.doctor
        self._require_registered(doctor)

        first = doctor.hours.start if from_hour is None else from_hour
        doctor.is_available(day, first)  # validates from_hour

        candidates = list(range(first, doctor.hours.stop))
        if self._settings.booking_search_attempts is not None:
            candidates = candidates[: self._settings.booking_search_attempts]

        retrying = Retrying(
            stop=stop_after_attempt(len(candidates)),
            retry=retry_if_exception_type(_SlotTaken),
            after=_log_after_attempt,
            reraise=True,
        )
        hour = first
        try:
            for attempt in retrying:
                with attempt:
                    hour = candidates[attempt.retry_state.attempt_number - 1]
                    if not self.book(appointment, day, hour):
                        raise _SlotTaken(Slot(day=Day(day), hour=hour))
        except _SlotTaken:
            logger.info(
                "No free slot for badge %s on %s from %02d:00 (%d hours tried)",
                doctor.badge_id,
                Day(day),
                first,
                len(candidates),
            )
            return None
        return hour

    def cancel(self, badge_id: int, day: Day, hour: int) -> bool:
        doctor = self.get_doctor(badge_id)
        with self._lock:
            if not doctor.cancel_appointment(day, hour):
                return False
            self._appointments.pop((badge_id, Slot(day=Day(day), hour=hour)), None)
        return True

    def reschedule(self, badge_id: int, day: Day, hour: int, new_day: Day, new_hour: int) -> bool:
        """Move a booking to another slot of the same doctor.

        The new slot is booked before the old one is released, so a taken
        target leaves the original booking as it was.
        """
        doctor = self.get_doctor(badge_id)
        old_key = (badge_id, Slot(day=Day(day), hour=hour))
        new_key = (badge_id, Slot(day=Day(new_day), hour=new_hour))

        with self._lock:
            details = doctor.get_slot(day, hour)
            if details is None:
                return False
            if not doctor.book_appointment(new_day, new_hour, details):
                return False
            doctor.cancel_appointment(day, hour)

            appointment = self._appointments.pop(old_key, None)
            if appointment is not None:
                self._appointments[new_key] = appointment

        logger.info("Rescheduled badge %s: %s %02d:00 -> %s %02d:00", badge_id, Day(day), hour, Day(new_day), new_hour)
        return True

    def _drop_stale(self) -> None:
        # Doctors are handed out live, so their calendars can change behind the
        # ledger. An entry only counts while its cell still holds its details.
        stale = [
            key
            for key, appt in self._appointments.items()
            if appt.doctor.get_slot(key[1].day, key[1].hour) != appt.details()
        ]
        for key in stale:
            logger.debug("Dropping stale appointment for badge %s at %s %02d:00", key[0], key[1].day, key[1].hour)
            del self._appointments[key]

    def appointment_at(self, badge_id: int, day: Day, hour: int) -> Appointment | None:
        with self._lock:
            self._drop_stale()
            return self._appointments.get((badge_id, Slot(day=Day(day), hour=hour)))

    def appointments_chronological(self) -> list[tuple[Slot, Appointment]]:
        with self._lock:
            self._drop_stale()
            items = sorted(self._appointments.items(), key=lambda kv: (kv[0][1], kv[0][0]))
        return [(slot, appt) for (_, slot), appt in items]

    def appointments_for_doctor(self, badge_id: int) -> list[tuple[Slot, Appointment]]:
        return [(slot, appt) for slot, appt in self.appointments_chronological() if appt.doctor_id == badge_id]

    def appointments_by_department(self) -> dict[str, list[tuple[Slot, Appointment]]]:
        result: dict[str, list[tuple[Slot, Appointment]]] = defaultdict(list)
        for slot, appt in self.appointments_chronological():
            result[appt.doctor.specialty].append((slot, appt))
        return dict(result)
