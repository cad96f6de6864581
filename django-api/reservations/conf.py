"""Reservation policy read from ``settings.RESERVATIONS``."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Self

from django.conf import settings

DEFAULTS = {
    "OFFER_WINDOW_SECONDS": 15 * 60,
    "HOLD_WINDOW_SECONDS": 10 * 60,
    "JOB_BATCH_SIZE": 100,
    "JOB_RETRY_SECONDS": 30,
}


@dataclass(frozen=True)
class ReservationPolicy:
    """Time windows and scheduler tuning."""

    offer_window: timedelta = timedelta(seconds=DEFAULTS["OFFER_WINDOW_SECONDS"])
    hold_window: timedelta = timedelta(seconds=DEFAULTS["HOLD_WINDOW_SECONDS"])
    job_batch_size: int = DEFAULTS["JOB_BATCH_SIZE"]
    job_retry_delay: timedelta = timedelta(seconds=DEFAULTS["JOB_RETRY_SECONDS"])

    @classmethod
    def from_settings(cls) -> Self:
        values = {**DEFAULTS, **getattr(settings, "RESERVATIONS", {})}
        return cls(
            offer_window=timedelta(seconds=values["OFFER_WINDOW_SECONDS"]),
            hold_window=timedelta(seconds=values["HOLD_WINDOW_SECONDS"]),
            job_batch_size=int(values["JOB_BATCH_SIZE"]),
            job_retry_delay=timedelta(seconds=values["JOB_RETRY_SECONDS"]),
        )
