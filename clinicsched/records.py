from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clinicsched.doctor import Doctor


@dataclass(frozen=True)
class Patient:
    name: str
    patient_id: int
    age: int
    contact_info: str
    medical_history: str = ""


@dataclass(frozen=True)
class Appointment:
    """Who sees whom and why.

    Creating one reserves nothing: the slot is booked separately through the
    doctor's calendar (see Clinic.book).
    """

    patient: Patient
    doctor: Doctor
    date_time: str  # ISO-8601 recommended
    reason: str

    @property
    def patient_id(self) -> int:
        return self.patient.patient_id

    @property
    def doctor_id(self) -> int:
        return self.doctor.badge_id

    def details(self) -> str:
        who = f"{self.patient.name} (patient #{self.patient.patient_id})"
        return f"{self.reason} - {who}" if self.reason else who
