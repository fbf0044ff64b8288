"""
FastAPI receiver for incident reports.

Implements the ``POST /incidents`` contract the mobile client submits to, so
the client can be exercised locally without the production API.

Notes
- Reports are kept in memory only and are lost on restart.
- Fields are accepted as sent; the client performs no validation either.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from incident_reporter import config

logger = logging.getLogger(__name__)

IMAGE_PART = "image"

app = FastAPI(title="Incident Intake API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ReceivedImage(BaseModel):
    filename: Optional[str] = None
    content_type: Optional[str] = None
    size: int


class ReceivedIncident(BaseModel):
    """An incident report as it arrived over the wire."""
    incident_id: str
    received_at: str
    parts: Dict[str, str]
    image: Optional[ReceivedImage] = None


class IncidentResponse(BaseModel):
    """Response model for successful report submission."""
    success: bool
    incident_id: str
    message: str


# In-memory registry of received reports {incident_id: report}
received_incidents: Dict[str, ReceivedIncident] = {}


def _generate_incident_id() -> str:
    """Generate a unique incident ID: I_{uuid prefix}_{timestamp_ms}."""
    timestamp_ms = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"I_{str(uuid.uuid4())[:8]}_{timestamp_ms}"


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/incidents", response_model=IncidentResponse, status_code=status.HTTP_201_CREATED)
async def submit_incident(request: Request):
    """Accept a multipart incident report.

    Text parts are stored exactly as received, empty values included; the
    ``image`` part, if present, is summarised.
    """
    form = await request.form()

    parts: Dict[str, str] = {}
    received_image = None
    for name, value in form.multi_items():
        if isinstance(value, str):
            parts[name] = value
        elif name == IMAGE_PART and received_image is None:
            content = await value.read()
            received_image = ReceivedImage(
                filename=value.filename,
                content_type=value.content_type,
                size=len(content),
            )
        else:
            logger.warning("Ignoring unexpected file part %r", name)

    incident_id = _generate_incident_id()
    received_incidents[incident_id] = ReceivedIncident(
        incident_id=incident_id,
        received_at=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        parts=parts,
        image=received_image,
    )
    logger.info(
        "Received incident %s: %s on %s",
        incident_id,
        parts.get("incidentType") or "-",
        parts.get("street") or "-",
    )

    return IncidentResponse(
        success=True,
        incident_id=incident_id,
        message="Incident report received. Thank you for reporting traffic issues!",
    )


@app.get("/incidents", response_model=List[ReceivedIncident])
def list_incidents() -> List[ReceivedIncident]:
    """Return every report received since startup, oldest first."""
    return list(received_incidents.values())


def run(host: str = config.INTAKE_BIND_HOST, port: int = config.INTAKE_BIND_PORT) -> None:
    import uvicorn
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    config.configure_logging()
    run()
