"""
Incident repository for submitting reports to the incident API.
Handles multipart request construction, the single POST and result mapping.
"""

import logging
from typing import Optional

import requests

from incident_reporter.config import SubmissionConfig
from incident_reporter.encoder import encode_report, open_multipart_fields
from incident_reporter.errors import FailureKind, ImageTooLargeError, SubmissionResult
from incident_reporter.form_state import IncidentReport

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Incident reported successfully"
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"


class IncidentRepository:
    """Posts incident reports to the incident API. No retries are attempted."""

    def __init__(self, config: Optional[SubmissionConfig] = None, session: Optional[requests.Session] = None):
        """
        Initialize the repository.

        Args:
            config: Submission settings (base URL, timeouts, scratch dir, image limit)
            session: Session used for requests; a new one is created if not provided
        """
        self.config = config or SubmissionConfig.from_env()
        self.base_url = self.config.base_url.rstrip("/")
        self.incidents_endpoint = f"{self.base_url}/incidents"
        self.session = session or requests.Session()
        logger.info("Incident endpoint: %s (timeout %s)", self.incidents_endpoint, self.config.timeout)

    def close(self) -> None:
        self.session.close()

    def check_health(self) -> bool:
        """
        Check if the incident API is reachable.

        Returns:
            True if the API answers its health check with 200, False otherwise
        """
        health_url = f"{self.base_url}/health"
        try:
            response = self.session.get(health_url, timeout=self.config.timeout)
        except requests.RequestException as exc:
            logger.warning("Health check failed at %s: %s", health_url, exc)
            return False
        if response.status_code != 200:
            logger.warning("Health check at %s returned %s", health_url, response.status_code)
        return response.status_code == 200

    @staticmethod
    def map_response(response: requests.Response) -> SubmissionResult:
        """Map an HTTP response to a submission result."""
        if 200 <= response.status_code < 300:
            return SubmissionResult.success(SUCCESS_MESSAGE, status_code=response.status_code)

        # An empty body stays empty in the message
        return SubmissionResult.failed(
            FailureKind.SERVER_REJECTION,
            f"API Error: {response.status_code} - {response.text}",
            status_code=response.status_code,
            body=response.text,
        )

    def submit_incident_report(self, report: IncidentReport) -> SubmissionResult:
        """
        Submit one report. Every failure is returned, never raised.

        Args:
            report: Immutable report snapshot

        Returns:
            SubmissionResult describing success or the failure kind
        """
        try:
            with encode_report(
                report,
                scratch_dir=self.config.scratch_dir,
                max_image_bytes=self.config.max_image_bytes,
            ) as payload:
                with open_multipart_fields(payload) as files:
                    response = self.session.post(
                        self.incidents_endpoint,
                        files=files,
                        timeout=self.config.timeout,
                    )
        except ImageTooLargeError as exc:
            logger.warning("Rejected image before upload: %s", exc)
            return SubmissionResult.failed(FailureKind.VALIDATION, str(exc))
        except (requests.RequestException, OSError) as exc:
            logger.warning("Submission to %s failed: %s", self.incidents_endpoint, exc)
            return SubmissionResult.failed(FailureKind.TRANSPORT, str(exc) or UNKNOWN_ERROR_MESSAGE)
        except Exception as exc:
            logger.exception("Unexpected error while submitting report")
            return SubmissionResult.failed(FailureKind.UNKNOWN, str(exc) or UNKNOWN_ERROR_MESSAGE)

        result = self.map_response(response)
        if result.ok:
            logger.info("Report submitted: %s", response.status_code)
        else:
            logger.warning("Incident API returned %s: %s", response.status_code, response.text[:200])
        return result
