"""Dispatches due scheduled jobs to their expiry handlers.

Delivery is at-least-once: a job is marked done only in the transaction
that ran its handler, and the handlers themselves are idempotent.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from django.utils import timezone

from reservations.conf import ReservationPolicy
from reservations.domain import JobKind, ScheduledJob
from reservations.services.offers import OfferLifecycleManager
from reservations.services.seat_holds import SeatHoldManager
from reservations.stores.interfaces import JobScheduler, UnitOfWork

logger = logging.getLogger(__name__)


class JobRunner:
    """Runs expiry callbacks whose time has come."""

    def __init__(
        self,
        uow: UnitOfWork,
        scheduler: JobScheduler,
        offers: OfferLifecycleManager,
        holds: SeatHoldManager,
        policy: ReservationPolicy,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._uow = uow
        self._scheduler = scheduler
        self._policy = policy
        self._clock = clock
        self._handlers: dict[JobKind, Callable[[dict], bool]] = {
            JobKind.EXPIRE_OFFER: lambda p: offers.expire(p["entry_id"], p["event_id"]),
            JobKind.EXPIRE_HOLD: lambda p: holds.expire_hold(p["hold_id"]),
        }

    def run_due(self, limit: int | None = None) -> int:
        """Run every job due now, up to ``limit``; return how many succeeded.

        Each job commits in its own transaction so event locks taken by a
        handler are released before the next job starts.
        """
        limit = limit or self._policy.job_batch_size
        completed = 0
        for _ in range(limit):
            with self._uow.atomic():
                jobs = self._scheduler.due_jobs(self._clock(), 1)
                if not jobs:
                    break
                if self._run(jobs[0]):
                    completed += 1
        return completed

    def _run(self, job: ScheduledJob) -> bool:
        try:
            with self._uow.atomic():
                applied = self._handlers[job.kind](job.payload)
                self._scheduler.mark_done(job.id, self._clock())
        except Exception as exc:
            logger.exception(
                "jobs.failed",
                extra={"job_id": str(job.id), "kind": job.kind.value},
            )
            self._scheduler.mark_failed(
                job.id, self._clock() + self._policy.job_retry_delay, repr(exc)
            )
            return False
        logger.debug(
            "jobs.completed",
            extra={"job_id": str(job.id), "kind": job.kind.value, "applied": applied},
        )
        return True
