from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from clinicsched.domain import InvalidArgumentError
from clinicsched.weekly_calendar import DEFAULT_END_HOUR, DEFAULT_START_HOUR

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _parse_int(name: str, default: str) -> int:
    raw = os.getenv(name, default).strip()
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"Invalid {name} value: {raw!r}. Expected integer.") from e


@dataclass(frozen=True)
class Settings:
    # Working window used for calendars created by Clinic.add_doctor().
    working_start_hour: int = DEFAULT_START_HOUR
    working_end_hour: int = DEFAULT_END_HOUR

    # How many consecutive hours book_next_available() may try.
    # None means "until the end of the working day".
    booking_search_attempts: int | None = None

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        start, end = self.working_start_hour, self.working_end_hour
        if not all(isinstance(h, int) and not isinstance(h, bool) for h in (start, end)):
            raise InvalidArgumentError(f"Working hours must be integers, got {start!r}..{end!r}")
        if start < 0 or end > 24 or start >= end:
            raise InvalidArgumentError(f"Invalid working hours: {start}..{end}")

        attempts = self.booking_search_attempts
        if attempts is not None and (not isinstance(attempts, int) or isinstance(attempts, bool) or attempts < 1):
            raise InvalidArgumentError(f"booking_search_attempts must be None or an integer >= 1, got {attempts!r}")

        if not isinstance(logging.getLevelName(self.log_level), int):
            raise InvalidArgumentError(f"Unknown log level: {self.log_level!r}")


def load_settings(dotenv_path: str | None = None) -> Settings:
    # Existing env wins over .env; dotenv_path allows overriding in tests.
    load_dotenv(dotenv_path=dotenv_path, override=False)

    start_hour = _parse_int("CLINIC_START_HOUR", str(DEFAULT_START_HOUR))
    end_hour = _parse_int("CLINIC_END_HOUR", str(DEFAULT_END_HOUR))
    if start_hour < 0 or end_hour > 24 or start_hour >= end_hour:
        raise RuntimeError(
            f"CLINIC_START_HOUR/CLINIC_END_HOUR must satisfy 0 <= start < end <= 24, got {start_hour}..{end_hour}"
        )

    booking_search_attempts: int | None = None
    if os.getenv("BOOKING_SEARCH_ATTEMPTS", "").strip():
        booking_search_attempts = _parse_int("BOOKING_SEARCH_ATTEMPTS", "")
        if booking_search_attempts < 1:
            raise RuntimeError("BOOKING_SEARCH_ATTEMPTS must be >= 1")

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise RuntimeError(f"Invalid LOG_LEVEL value: {log_level!r}")

    return Settings(
        working_start_hour=start_hour,
        working_end_hour=end_hour,
        booking_search_attempts=booking_search_attempts,
        log_level=log_level,
    )


def setup_logging(settings: Settings | None = None) -> None:
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
