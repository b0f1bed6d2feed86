"""Pytest fixtures: test client, in-memory DB, temporary storage, fake completion upstream."""
import json
import os
import tempfile

import httpx
import pytest
from fastapi.testclient import TestClient

# Must be set before the app is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="nirogya-storage-"))
os.environ.setdefault("OPENAI_API_KEY", "sk-test-dummy")
os.environ.pop("OPENROUTER_API_KEY", None)
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "1000")

from sqlmodel import Session, SQLModel

from app.api.deps import get_completion_client
from app.core.config import CompletionProvider, ProviderKind
from app.core.database import engine
from app.core.rate_limit import limiter
from app.main import app
from app.services.completion import CompletionClient

OPENAI_TEST_PROVIDER = CompletionProvider(
    kind=ProviderKind.OPENAI,
    api_key="sk-test-dummy",
    base_url="https://api.openai.test/v1",
    model="gpt-4o",
)

OPENROUTER_TEST_PROVIDER = CompletionProvider(
    kind=ProviderKind.OPENROUTER,
    api_key="sk-or-v1-test",
    base_url="https://openrouter.test/api/v1",
    model="openai/gpt-4o",
    referer="https://nirogya.app",
    app_title="Nirogya",
)


class FakeUpstream:
    """Records chat-completion requests and answers with a canned response."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.payload: dict | None = {"choices": [{"message": {"content": "Summary X"}}]}
        self.text: str | None = None

    def reply_with(self, content):
        self.status_code = 200
        self.payload = {"choices": [{"message": {"content": content}}]}

    def fail_with(self, status_code: int, text: str = "upstream exploded"):
        self.status_code = status_code
        self.payload = None
        self.text = text

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.payload is None:
            return httpx.Response(self.status_code, text=self.text or "")
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)

    def client(self, provider: CompletionProvider | None = OPENAI_TEST_PROVIDER) -> CompletionClient:
        return CompletionClient(
            provider,
            timeout=5.0,
            http_client=httpx.Client(transport=httpx.MockTransport(self.handler)),
        )


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def openrouter_provider():
    return OPENROUTER_TEST_PROVIDER


@pytest.fixture(autouse=True)
def _fresh_state():
    """Empty tables and rate-limit counters for every test."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    limiter.reset()
    yield
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(upstream):
    """TestClient wired to the fake upstream; lifespan prepares DB and storage."""
    app.dependency_overrides[get_completion_client] = lambda: upstream.client()
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    with Session(engine) as session:
        yield session


@pytest.fixture
def storage(client):
    return app.state.storage
