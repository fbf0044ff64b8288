import threading
from datetime import datetime, timedelta
from urllib.parse import urlsplit

import pytest
import requests
from fastapi.testclient import TestClient
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from incident_reporter import intake_api
from incident_reporter.config import SubmissionConfig
from incident_reporter.form_state import FormStateStore
from incident_reporter.repository import IncidentRepository

BASE_URL = "http://incidents.test"


class FakeClock:
    """Clock that advances one minute every time it is read."""

    def __init__(self, start: datetime = datetime(2026, 3, 14, 9, 30)):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


def build_response(request, status_code: int, content: bytes, headers=None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = content
    response.headers = CaseInsensitiveDict(headers or {})
    response.encoding = "utf-8"
    response.url = request.url
    response.request = request
    return response


class RecordingAdapter(BaseAdapter):
    """Base adapter that remembers every request and the kwargs requests passed."""

    def __init__(self):
        super().__init__()
        self.requests = []
        self.send_kwargs = []

    def send(self, request, **kwargs):
        self.requests.append(request)
        self.send_kwargs.append(kwargs)
        return self.respond(request)

    def respond(self, request):
        raise NotImplementedError

    def close(self):
        pass


class ReceiverAdapter(RecordingAdapter):
    """Forwards requests to the FastAPI intake app."""

    def __init__(self, client: TestClient):
        super().__init__()
        self.client = client

    def respond(self, request):
        url = urlsplit(request.url)
        path = url.path + (f"?{url.query}" if url.query else "")
        headers = {k: v for k, v in request.headers.items() if k.lower() != "content-length"}
        resp = self.client.request(request.method, path, content=request.body, headers=headers)
        return build_response(request, resp.status_code, resp.content, dict(resp.headers))


class StaticAdapter(RecordingAdapter):
    """Answers every request with the same status and body."""

    def __init__(self, status_code: int, body: str = ""):
        super().__init__()
        self.status_code = status_code
        self.body = body

    def respond(self, request):
        return build_response(request, self.status_code, self.body.encode("utf-8"))


class RaisingAdapter(RecordingAdapter):
    """Raises the given exception instead of answering."""

    def __init__(self, exc: Exception):
        super().__init__()
        self.exc = exc

    def respond(self, request):
        raise self.exc


class BlockingAdapter(StaticAdapter):
    """Holds every request until ``release`` is set."""

    def __init__(self, status_code: int = 200, body: str = ""):
        super().__init__(status_code, body)
        self.entered = threading.Event()
        self.release = threading.Event()

    def respond(self, request):
        self.entered.set()
        self.release.wait(5)
        return super().respond(request)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return FormStateStore(clock=clock)


@pytest.fixture
def filled_store(store):
    store.set_latitude("3.0201")
    store.set_longitude("30.9111")
    store.set_altitude("1211")
    store.set_accuracy("4")
    store.set_city("Arua City")
    store.set_division("Central Division")
    store.set_ward("Mvara")
    store.set_cell("Cell B")
    store.set_street("Hospital Road")
    store.set_incident_type("Wrong Parking")
    store.set_incident_details("Truck parked across the junction")
    return store


@pytest.fixture
def submission_config(tmp_path):
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return SubmissionConfig(base_url=BASE_URL, scratch_dir=str(scratch))


@pytest.fixture
def make_repository(submission_config):
    def _make(adapter: BaseAdapter) -> IncidentRepository:
        session = requests.Session()
        session.mount("http://", adapter)
        return IncidentRepository(submission_config, session=session)

    return _make


@pytest.fixture
def intake_client():
    intake_api.received_incidents.clear()
    with TestClient(intake_api.app) as client:
        yield client
    intake_api.received_incidents.clear()


@pytest.fixture
def receiver(intake_client):
    return ReceiverAdapter(intake_client)


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "crash.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 256)
    return path
