"""Exceptions and result types shared by the submission code."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class IncidentReporterError(Exception):
    """Base class for errors raised to callers of this package."""


class SubmissionInProgressError(IncidentReporterError):
    """Raised when a report is submitted while another one is still in flight."""


class ImageTooLargeError(IncidentReporterError):
    """Raised by the encoder when the attached image exceeds the upload limit."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"Image is {size / (1024 * 1024):.1f} MB, the upload limit is {limit / (1024 * 1024):.0f} MB"
        )


class FailureKind(str, Enum):
    VALIDATION = "validation"
    TRANSPORT = "transport"
    SERVER_REJECTION = "server_rejection"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of one submission attempt."""
    ok: bool
    message: str
    status_code: Optional[int] = None
    body: Optional[str] = None
    failure: Optional[FailureKind] = None

    @classmethod
    def success(cls, message: str, status_code: Optional[int] = None) -> "SubmissionResult":
        return cls(ok=True, message=message, status_code=status_code)

    @classmethod
    def failed(
        cls,
        kind: FailureKind,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> "SubmissionResult":
        return cls(ok=False, message=message, status_code=status_code, body=body, failure=kind)
