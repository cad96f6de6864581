"""Run due offer and hold expiries."""

import logging
import time

from django.core.management.base import BaseCommand

from reservations.services import build_services

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Run scheduled offer and seat-hold expiries that are due."

    def add_arguments(self, parser):
        parser.add_argument(
            "--once",
            action="store_true",
            help="Run one batch and exit instead of polling.",
        )
        parser.add_argument(
            "--interval",
            type=float,
            default=1.0,
            help="Seconds to sleep when no job was due.",
        )
        parser.add_argument("--batch-size", type=int, default=None)

    def handle(self, *args, **options):
        runner = build_services().jobs
        if options["once"]:
            completed = runner.run_due(options["batch_size"])
            self.stdout.write(f"Ran {completed} job(s)")
            return

        logger.info("jobs.worker_started", extra={"interval": options["interval"]})
        try:
            while True:
                if runner.run_due(options["batch_size"]) == 0:
                    time.sleep(options["interval"])
        except KeyboardInterrupt:
            logger.info("jobs.worker_stopped")
