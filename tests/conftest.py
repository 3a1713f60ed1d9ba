"""Shared fixtures and mocks for all tests."""

from __future__ import annotations

import json
from typing import Callable
from unittest.mock import MagicMock

import httpx
import pytest
import pytest_asyncio

from autopilot.config.settings import Settings
from autopilot.credentials.crypto import TokenCipher
from autopilot.models.action import ActionRequest
from autopilot.storage.connections import ConnectionStore
from autopilot.storage.credentials import CredentialStore
from autopilot.storage.database import Database

USER_ID = "user-1"


class RecordingHandler:
    """httpx.MockTransport handler that keeps every request it saw."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []
        self._responder = responder

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def json_body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def make_http():
    """Build an AsyncClient whose traffic goes to ``responder``."""
    def _make(responder):
        handler = RecordingHandler(responder)
        return httpx.AsyncClient(transport=httpx.MockTransport(handler)), handler
    return _make


@pytest.fixture
def offline_http(make_http):
    """Client that fails the test if anything reaches the network."""
    def _fail(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"Unexpected request: {request.method} {request.url}")
    return make_http(_fail)


@pytest.fixture
def mock_settings(monkeypatch):
    monkeypatch.setenv("AUTOPILOT_OPENAI_API_KEY", "sk-test-key-fake")
    monkeypatch.setenv("AUTOPILOT_OPENAI_MODEL", "gpt-4o")
    monkeypatch.setenv("AUTOPILOT_ENCRYPTION_KEY", "test-encryption-key")
    monkeypatch.setenv("AUTOPILOT_ENVIRONMENT", "development")
    monkeypatch.setenv("AUTOPILOT_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("AUTOPILOT_DB_PATH", ":memory:")
    monkeypatch.setenv("AUTOPILOT_HUB_API_KEY", "hub-secret")
    monkeypatch.setenv("AUTOPILOT_HUB_BASE_URL", "https://hub.test/v1")
    monkeypatch.setenv("AUTOPILOT_TELEGRAM_BOT_TOKEN", "123:bot-token")
    monkeypatch.setenv("AUTOPILOT_WEBHOOK_SECRET", "")
    monkeypatch.setenv("AUTOPILOT_GOOGLE_CLIENT_ID", "google-client")
    monkeypatch.setenv("AUTOPILOT_GOOGLE_CLIENT_SECRET", "google-secret")
    return Settings()  # type: ignore[call-arg]


@pytest.fixture
def cipher():
    return TokenCipher("test-encryption-key")


@pytest_asyncio.fixture
async def temp_db():
    database = Database(db_path=":memory:")
    await database.initialize()
    yield database
    await database.close()


@pytest.fixture
def credential_store(temp_db, cipher):
    return CredentialStore(temp_db, cipher)


@pytest.fixture
def connection_store(temp_db):
    return ConnectionStore(temp_db)


@pytest_asyncio.fixture
async def connected_store(credential_store):
    """Credential store where USER_ID has connected every direct provider."""
    await credential_store.create(USER_ID, "gmail", "me@example.com", "gmail-token")
    await credential_store.create(USER_ID, "slack", "workspace", "slack-token")
    await credential_store.create(USER_ID, "google_sheets", "me@example.com", "sheets-token")
    return credential_store


@pytest.fixture
def mock_openai_response():
    """Create a mock OpenAI chat completion response."""
    def _make(data):
        message = MagicMock()
        message.content = data if isinstance(data, str) or data is None else json.dumps(data)
        choice = MagicMock()
        choice.message = message
        response = MagicMock()
        response.choices = [choice]
        return response
    return _make


@pytest.fixture
def sample_email_request():
    return ActionRequest(
        original_prompt="Send an email to a@b.com saying hi",
        intent="Send a greeting email",
        tool="gmail",
        action="send_email",
        parameters={"to": "a@b.com", "subject": "Hi", "body": "hi"},
        required_credential="gmail",
    )
