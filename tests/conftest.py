"""Shared test configuration and fixtures for EventTrackPro tests"""

import asyncio
import json
import logging
import os

from tests.config import (
    DIET_FIELD_ID,
    EMAIL_FIELD_ID,
    NAME_FIELD_ID,
    test_config,
)

# The app reads its configuration at import time
os.environ["DATABASE_URL"] = test_config["database_url"]
os.environ["SESSION_SECRET_KEY"] = test_config["session_secret_key"]
os.environ["SESSION_HTTPS_ONLY"] = "false"
os.environ["ZAPIER_INBOUND_SECRET"] = test_config["zapier_inbound_secret"]
os.environ.pop("ADMIN_USERNAME", None)
os.environ.pop("ADMIN_PASSWORD", None)

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, create_engine  # noqa: E402

from eventtrackpro.backends.webhook_client import WebhookClient  # noqa: E402
from eventtrackpro.main import app  # noqa: E402
from eventtrackpro.models.database import get_db, init_db  # noqa: E402
from eventtrackpro.services.event_service import EventService  # noqa: E402
from eventtrackpro.services.form_service import FormService  # noqa: E402
from eventtrackpro.services.registration_service import (  # noqa: E402
    RegistrationService,
)
from eventtrackpro.services.user_service import UserService  # noqa: E402
from eventtrackpro.services.webhook_client_service import (  # noqa: E402
    get_webhook_client,
)
from eventtrackpro.services.webhook_service import WebhookService  # noqa: E402

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class WebhookReceiver:
    """Stands in for subscriber endpoints behind an httpx.MockTransport.

    Every URL answers 200 unless configured otherwise with respond(),
    fail() or delay().
    """

    def __init__(self):
        self.requests = []
        self._responses = {}
        self._delays = {}

    def respond(self, url: str, status_code: int = 200, text: str = "ok"):
        self._responses[url] = (status_code, text)

    def fail(self, url: str, exc_type=httpx.ConnectError):
        self._responses[url] = exc_type

    def delay(self, url: str, seconds: float):
        self._delays[url] = seconds

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        delay = self._delays.get(str(request.url))
        if delay:
            await asyncio.sleep(delay)
        outcome = self._responses.get(str(request.url), (200, "ok"))
        if isinstance(outcome, type):
            raise outcome("Connection refused", request=request)
        status_code, text = outcome
        return httpx.Response(status_code, text=text)

    def requests_to(self, url: str):
        return [r for r in self.requests if str(r.url) == url]

    def payloads_to(self, url: str):
        return [json.loads(r.content) for r in self.requests_to(url)]


@pytest.fixture
def _engine():
    """In-memory SQLite engine shared across connections of one test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def _db_session(_engine):
    """Private DB session for fixtures only.

    Do not use this fixture directly in tests. Prefer the service fixtures
    to avoid coupling tests to the session internals.
    """
    session = Session(_engine)

    yield session

    session.close()


@pytest.fixture
def event_service(_db_session):
    return EventService(_db_session)


@pytest.fixture
def form_service(_db_session):
    return FormService(_db_session)


@pytest.fixture
def registration_service(_db_session):
    return RegistrationService(_db_session)


@pytest.fixture
def webhook_service(_db_session):
    return WebhookService(_db_session)


@pytest.fixture
def user_service(_db_session):
    return UserService(_db_session)


@pytest.fixture
def webhook_receiver():
    return WebhookReceiver()


@pytest.fixture
def webhook_client(webhook_receiver):
    """WebhookClient whose deliveries are answered by webhook_receiver"""
    return WebhookClient(
        test_config, transport=httpx.MockTransport(webhook_receiver.handler)
    )


@pytest.fixture
def sample_form(form_service):
    """A form with opaque field ids, as produced by the form builder"""
    return form_service.create_form(
        {
            "title": "Workshop Registration",
            "require_all_fields": False,
            "fields": [
                {
                    "id": NAME_FIELD_ID,
                    "type": "text",
                    "label": "Full Name",
                    "required": True,
                },
                {
                    "id": EMAIL_FIELD_ID,
                    "type": "email",
                    "label": "Email",
                    "required": True,
                },
                {
                    "id": DIET_FIELD_ID,
                    "type": "select",
                    "label": "Dietary Preference",
                    "required": False,
                    "options": ["None", "Vegetarian", "Vegan"],
                },
            ],
        }
    )


@pytest.fixture
def sample_event(event_service, sample_form):
    return event_service.create_event(
        {
            "title": "Python Workshop",
            "description": "Hands-on intro",
            "date": "2025-03-14",
            "start_time": "18:00",
            "end_time": "20:00",
            "location": "Main Hall",
            "capacity": 2,
            "form_id": sample_form.id,
        }
    )


@pytest.fixture
def client(_db_session, webhook_client):
    """Test client backed by the test database and the mock webhook transport"""

    # Store original overrides to restore them later
    original_overrides = app.dependency_overrides.copy()

    def get_test_db():
        return _db_session

    app.dependency_overrides.clear()
    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_webhook_client] = lambda: webhook_client

    client = TestClient(app, base_url=test_config["base_url"])

    yield client

    # Completely restore original state
    app.dependency_overrides.clear()
    app.dependency_overrides.update(original_overrides)


@pytest.fixture
def admin_client(client, user_service):
    """Test client with a logged-in admin session"""
    user_service.create_user(
        username=test_config["admin_username"],
        password=test_config["admin_password"],
    )
    response = client.post(
        "/api/auth/login",
        json={
            "username": test_config["admin_username"],
            "password": test_config["admin_password"],
        },
    )
    assert response.status_code == 200
    return client
