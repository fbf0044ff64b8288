"""Submission pipeline tying the form-state store to the incident repository."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional, Tuple

from incident_reporter.errors import FailureKind, SubmissionInProgressError, SubmissionResult
from incident_reporter.form_state import FormStateStore, IncidentReport
from incident_reporter.repository import UNKNOWN_ERROR_MESSAGE, IncidentRepository

logger = logging.getLogger(__name__)


class SubmissionPipeline:
    """
    Runs one submission at a time: Idle -> Submitting -> Success | Failed.

    The pipeline keeps its own in-flight marker, so resetting the form does
    not open the way for a second concurrent request. The store is marked as
    submitting before any work is scheduled, so observers always see
    ``is_submitting=True`` before the outcome of the same attempt. An outcome
    arriving after the form was reset is dropped.
    """

    def __init__(
        self,
        store: FormStateStore,
        repository: IncidentRepository,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.store = store
        self.repository = repository
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="incident-submit")
        self._lock = threading.Lock()
        self._in_flight: Optional[object] = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None

    def _begin(self) -> Tuple[object, int, IncidentReport]:
        with self._lock:
            if self._in_flight is not None:
                raise SubmissionInProgressError("A report submission is already in progress")
            attempt = self.store.begin_submission_attempt()
            if attempt is None:
                raise SubmissionInProgressError("A report submission is already in progress")
            token = object()
            self._in_flight = token
        generation, report = attempt
        return token, generation, report

    def _release(self, token: object) -> None:
        with self._lock:
            if self._in_flight is token:
                self._in_flight = None

    def _run(self, token: object, generation: int, report: IncidentReport) -> SubmissionResult:
        try:
            try:
                result = self.repository.submit_incident_report(report)
            except Exception as exc:
                logger.exception("Repository raised while submitting report")
                result = SubmissionResult.failed(FailureKind.UNKNOWN, str(exc) or UNKNOWN_ERROR_MESSAGE)
            if result.ok:
                self.store.finish_submission(generation, success=True)
            else:
                self.store.finish_submission(generation, error_message=result.message)
            return result
        finally:
            self._release(token)

    def submit(self) -> "Future[SubmissionResult]":
        """
        Submit the current form on the background executor.

        Returns:
            Future resolving to the SubmissionResult of this attempt

        Raises:
            SubmissionInProgressError: If a submission is already in flight
        """
        token, generation, report = self._begin()
        try:
            return self.executor.submit(self._run, token, generation, report)
        except RuntimeError as exc:
            # Executor already shut down
            self._release(token)
            self.store.finish_submission(generation, error_message=str(exc))
            raise

    def submit_blocking(self) -> SubmissionResult:
        """Submit the current form on the calling thread."""
        return self._run(*self._begin())

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self.executor.shutdown(wait=wait)
