"""
Multipart encoding of incident reports.
Maps report attributes to wire names and manages the scratch copy of the image.
"""

import logging
import mimetypes
import os
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from incident_reporter import config
from incident_reporter.errors import ImageTooLargeError
from incident_reporter.form_state import IncidentReport
from incident_reporter.options import OTHER_INCIDENT_TYPE, OTHER_STREET

logger = logging.getLogger(__name__)

# Report attribute -> multipart part name, in the order parts are written
REQUIRED_TEXT_PARTS: Tuple[Tuple[str, str], ...] = (
    ("datetime", "datetime"),
    ("latitude", "latitude"),
    ("longitude", "longitude"),
    ("altitude", "altitude"),
    ("accuracy", "accuracy"),
    ("city", "city"),
    ("division", "division"),
    ("ward", "ward"),
    ("cell", "cell"),
    ("street", "street"),
    ("incident_type", "incidentType"),
    ("incident_details", "incidentDetails"),
)

IMAGE_PART = "image"


@dataclass
class ImageAttachment:
    """Image part of a report, backed by a scratch copy on disk."""
    filename: str
    content_type: str
    scratch_path: Path
    size: int


@dataclass
class MultipartPayload:
    """Text parts and optional image ready to hand to requests."""
    text_parts: List[Tuple[str, str]] = field(default_factory=list)
    image: Optional[ImageAttachment] = None

    def as_dict(self) -> Dict[str, str]:
        return dict(self.text_parts)


def detect_content_type(path: str) -> str:
    """Guess the MIME type of an image, falling back to JPEG."""
    content_type, _ = mimetypes.guess_type(path)
    if content_type is None:
        return config.DEFAULT_IMAGE_CONTENT_TYPE
    return content_type


def build_text_parts(report: IncidentReport) -> List[Tuple[str, str]]:
    """
    Build the text parts for a report.

    The free-text street and incident type are only sent when the
    matching sentinel option is selected.
    """
    parts = [(wire_name, getattr(report, attr)) for attr, wire_name in REQUIRED_TEXT_PARTS]

    if report.street == OTHER_STREET:
        parts.append(("otherStreet", report.other_street))

    if report.incident_type == OTHER_INCIDENT_TYPE:
        parts.append(("otherIncidentType", report.other_incident_type))

    return parts


def copy_to_scratch(image_path: str, scratch_dir: str) -> Path:
    """Copy the picked image into a scratch file and return its path.

    A partially written scratch file is removed if the copy fails.
    """
    suffix = Path(image_path).suffix or ".jpg"
    os.makedirs(scratch_dir, exist_ok=True)
    with open(image_path, "rb") as source:
        with tempfile.NamedTemporaryFile(
            prefix="upload", suffix=suffix, dir=scratch_dir, delete=False
        ) as scratch:
            try:
                shutil.copyfileobj(source, scratch)
            except BaseException:
                scratch.close()
                os.unlink(scratch.name)
                raise
    return Path(scratch.name)


@contextmanager
def encode_report(
    report: IncidentReport,
    scratch_dir: Optional[str] = None,
    max_image_bytes: Optional[int] = None,
) -> Iterator[MultipartPayload]:
    """
    Encode a report for the duration of one request.

    Args:
        report: Immutable report snapshot
        scratch_dir: Directory for the image scratch copy
        max_image_bytes: Upload limit for the image (None disables the check)

    Yields:
        MultipartPayload whose image scratch file exists until the block exits

    Raises:
        ImageTooLargeError: If the image exceeds max_image_bytes
        OSError: If the image cannot be read
    """
    payload = MultipartPayload(text_parts=build_text_parts(report))

    if report.image_path is None:
        yield payload
        return

    # Oversized images are rejected before anything is written to scratch
    source_size = os.stat(report.image_path).st_size
    if max_image_bytes is not None and source_size > max_image_bytes:
        raise ImageTooLargeError(source_size, max_image_bytes)

    scratch_path = copy_to_scratch(report.image_path, scratch_dir or config.SCRATCH_DIR)
    try:
        size = scratch_path.stat().st_size
        if max_image_bytes is not None and size > max_image_bytes:
            raise ImageTooLargeError(size, max_image_bytes)
        payload.image = ImageAttachment(
            filename=Path(report.image_path).name,
            content_type=detect_content_type(report.image_path),
            scratch_path=scratch_path,
            size=size,
        )
        logger.debug("Attached image %s (%d bytes) via %s", payload.image.filename, size, scratch_path)
        yield payload
    finally:
        try:
            scratch_path.unlink()
        except FileNotFoundError:
            pass


@contextmanager
def open_multipart_fields(payload: MultipartPayload) -> Iterator[List[Tuple[str, tuple]]]:
    """
    Yield every part in the shape requests expects for ``files=``.

    Text parts are passed as ``(None, value)`` so requests writes them without
    a filename; this keeps the body multipart even when no image is attached.
    """
    parts: List[Tuple[str, tuple]] = [(name, (None, value)) for name, value in payload.text_parts]
    if payload.image is None:
        yield parts
        return

    with open(payload.image.scratch_path, "rb") as handle:
        parts.append((IMAGE_PART, (payload.image.filename, handle, payload.image.content_type)))
        yield parts
