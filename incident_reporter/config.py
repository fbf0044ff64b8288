"""Configuration module loading environment variables for the incident reporter."""

import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Optional

# Incident API Settings
# Base URL of the remote incident API (the client posts to {base}/incidents)
API_BASE_URL = os.getenv("INCIDENT_API_BASE_URL", "http://localhost:8004")
# Connect and read timeouts in seconds
CONNECT_TIMEOUT = float(os.getenv("INCIDENT_CONNECT_TIMEOUT", "30"))
READ_TIMEOUT = float(os.getenv("INCIDENT_READ_TIMEOUT", "30"))

# Upload Settings
# Directory holding the scratch copy of an image while it is uploaded
SCRATCH_DIR = os.getenv("INCIDENT_SCRATCH_DIR", tempfile.gettempdir())
# Largest image accepted for upload (10 MB)
MAX_IMAGE_BYTES = int(os.getenv("INCIDENT_MAX_IMAGE_BYTES", str(10 * 1024 * 1024)))
DEFAULT_IMAGE_CONTENT_TYPE = "image/jpeg"

# Form Settings
DATETIME_FORMAT = "%Y-%m-%d %H:%M"

# Intake API Settings (local development receiver)
INTAKE_BIND_HOST = os.getenv("INCIDENT_INTAKE_HOST", "0.0.0.0")
INTAKE_BIND_PORT = int(os.getenv("INCIDENT_INTAKE_PORT", "8004"))

# Logging
LOG_LEVEL = os.getenv("INCIDENT_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass
class SubmissionConfig:
    """Settings used by the repository when posting a report."""
    base_url: str = API_BASE_URL
    connect_timeout: float = CONNECT_TIMEOUT
    read_timeout: float = READ_TIMEOUT
    scratch_dir: str = SCRATCH_DIR
    max_image_bytes: int = MAX_IMAGE_BYTES

    @classmethod
    def from_env(cls, base_url: Optional[str] = None) -> "SubmissionConfig":
        """Build a config from the environment, optionally overriding the base URL."""
        config = cls(
            base_url=os.getenv("INCIDENT_API_BASE_URL", API_BASE_URL),
            connect_timeout=float(os.getenv("INCIDENT_CONNECT_TIMEOUT", str(CONNECT_TIMEOUT))),
            read_timeout=float(os.getenv("INCIDENT_READ_TIMEOUT", str(READ_TIMEOUT))),
            scratch_dir=os.getenv("INCIDENT_SCRATCH_DIR", SCRATCH_DIR),
            max_image_bytes=int(os.getenv("INCIDENT_MAX_IMAGE_BYTES", str(MAX_IMAGE_BYTES))),
        )
        if base_url:
            config.base_url = base_url
        return config

    @property
    def timeout(self):
        """Timeout tuple in the form requests expects."""
        return (self.connect_timeout, self.read_timeout)


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging for entry points."""
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
