"""Shared test fixtures for backend tests."""

import json
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from genshai.api.agents import get_blueprint_service
from genshai.core.database import get_session
from genshai.models.conversation import Message, MessageRole
from genshai.services.blueprint import BlueprintService
from genshai.services.llm import get_llm_provider
from genshai.services.llm.gateway import GatewayProvider

# In-memory SQLite with StaticPool so all connections (including threads) share one DB
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

GATEWAY_URL = "https://gateway.test/v1/chat/completions"


def get_test_session():
    with Session(test_engine) as session:
        yield session


def delta_frame(content: str) -> bytes:
    payload = {"choices": [{"index": 0, "delta": {"content": content}}]}
    return f"data: {json.dumps(payload)}\n\n".encode()


ROLE_FRAME = b'data: {"choices":[{"index":0,"delta":{"role":"assistant"}}]}\n\n'
FINISH_FRAME = b'data: {"choices":[{"index":0,"delta":{},"finish_reason":"stop"}]}\n\n'
DONE_FRAME = b"data: [DONE]\n\n"


def messages_in(conversation_id: str, role: MessageRole | None = None) -> list[Message]:
    with Session(test_engine) as session:
        statement = select(Message).where(Message.conversation_id == conversation_id)
        if role is not None:
            statement = statement.where(Message.role == role)
        return list(session.exec(statement.order_by(Message.created_at, Message.id)).all())


def all_messages(role: MessageRole | None = None) -> list[Message]:
    with Session(test_engine) as session:
        statement = select(Message)
        if role is not None:
            statement = statement.where(Message.role == role)
        return list(session.exec(statement).all())


class FakeGateway:
    """Stands in for the LLM gateway and Wikipedia; records every request it receives."""

    def __init__(self):
        self.requests: list[dict] = []
        self.status = 200
        self.chunks: list[bytes] = [
            ROLE_FRAME,
            delta_frame("Be"),
            delta_frame(" still."),
            FINISH_FRAME,
            DONE_FRAME,
        ]
        self.fail_after: int | None = None  # drop the connection after this many chunks
        self.unreachable = False
        self.completion = "{}"
        self.wiki_extract = "A Roman emperor and Stoic philosopher."
        self.wiki_search_body = None  # replaces the search response body when set
        self.on_request = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "en.wikipedia.org":
            return self._wikipedia(request)

        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)

        body = json.loads(request.content)
        self.requests.append(body)
        if self.on_request:
            self.on_request(body)

        if self.status != 200:
            return httpx.Response(self.status, json={"error": {"message": "upstream says no"}})
        if not body.get("stream"):
            return httpx.Response(200, json={"choices": [{"message": {"content": self.completion}}]})
        return httpx.Response(
            200,
            headers={"content-type": "text/event-stream"},
            content=self._stream(),
        )

    async def _stream(self):
        for i, chunk in enumerate(self.chunks):
            if self.fail_after is not None and i == self.fail_after:
                raise httpx.ReadError("connection reset by peer")
            yield chunk

    def _wikipedia(self, request: httpx.Request) -> httpx.Response:
        if request.url.params.get("list") == "search":
            if self.wiki_search_body is not None:
                return httpx.Response(200, json=self.wiki_search_body)
            return httpx.Response(200, json={"query": {"search": [{"title": "Marcus Aurelius"}]}})
        return httpx.Response(
            200, json={"query": {"pages": {"1": {"extract": self.wiki_extract}}}}
        )

    @property
    def last_messages(self) -> list[dict]:
        return self.requests[-1]["messages"]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def provider(self) -> GatewayProvider:
        return GatewayProvider(api_key="test-key", url=GATEWAY_URL, transport=self.transport())


@pytest.fixture(autouse=True)
def setup_test_db():
    """Create all tables before each test, drop after."""
    import genshai.models  # noqa: F401 - register models
    SQLModel.metadata.create_all(test_engine)
    with patch("genshai.services.conversation_store.engine", test_engine):
        yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(gateway):
    """FastAPI TestClient with the database and gateway replaced."""
    with patch("genshai.core.database.engine", test_engine):
        from genshai.main import app

        app.dependency_overrides[get_session] = get_test_session
        app.dependency_overrides[get_llm_provider] = gateway.provider
        app.dependency_overrides[get_blueprint_service] = lambda: BlueprintService(
            gateway.provider(), transport=gateway.transport()
        )

        with TestClient(app) as c:
            yield c

        app.dependency_overrides.clear()
