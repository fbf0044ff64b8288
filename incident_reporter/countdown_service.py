"""Background countdown service that ticks a fixed number of times and stops itself."""

import logging
import threading

from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)

JOB_ID = "countdown_tick"


class CountdownService:
    """
    Runs ``ticks`` one-second (by default) ticks on an APScheduler job.

    The scheduler is shut down from the last tick, so a started service
    always ends on its own.
    """

    def __init__(self, ticks: int = 10, interval_sec: float = 1.0):
        self.ticks = ticks
        self.interval_sec = interval_sec
        self.completed_ticks = 0
        self.scheduler = BackgroundScheduler()
        self._done = threading.Event()
        logger.debug("Countdown service created")

    @property
    def running(self) -> bool:
        return self.scheduler.running and not self._done.is_set()

    def _tick(self) -> None:
        self.completed_ticks += 1
        logger.info("running task %d", self.completed_ticks)
        if self.completed_ticks >= self.ticks:
            self._finish()

    def _finish(self) -> None:
        if self._done.is_set():
            return
        self._done.set()
        if self.scheduler.running:
            # Called from the job thread, so do not wait for running jobs
            self.scheduler.shutdown(wait=False)
        logger.info("Countdown service stopped after %d tick(s)", self.completed_ticks)

    def start(self) -> None:
        """Schedule the ticks and start the background scheduler."""
        if self.ticks <= 0:
            self._done.set()
            return
        self.scheduler.add_job(
            self._tick,
            trigger="interval",
            seconds=self.interval_sec,
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
        )
        self.scheduler.start()
        logger.info("Countdown service started (%d ticks every %ss)", self.ticks, self.interval_sec)

    def stop(self) -> None:
        """Stop the service before all ticks have run."""
        self._finish()

    def wait(self, timeout=None) -> bool:
        """Block until the service stops; returns False on timeout."""
        return self._done.wait(timeout)
