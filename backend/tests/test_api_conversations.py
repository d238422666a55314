"""Tests for conversation history endpoints."""

from datetime import datetime, timedelta, timezone

from sqlmodel import Session

from tests.conftest import messages_in, test_engine
from genshai.models.conversation import Conversation, Message, MessageRole


def _seed_conversation(agent_id="marcus-aurelius", user_session="s1", user_id=None, messages=None, age=0):
    """Insert a conversation + messages directly into the test DB."""
    created = datetime.now(timezone.utc) - timedelta(minutes=age)
    with Session(test_engine) as session:
        conv = Conversation(
            agent_id=agent_id,
            user_session=user_session,
            user_id=user_id,
            created_at=created,
            updated_at=created,
        )
        session.add(conv)
        session.commit()
        session.refresh(conv)

        for i, (role, content) in enumerate(messages or []):
            msg = Message(
                conversation_id=conv.id,
                role=role,
                content=content,
                created_at=created + timedelta(seconds=i),
            )
            session.add(msg)
        session.commit()

        return conv.id


def test_history_empty(client):
    response = client.get("/api/conversations", params={"agentId": "marcus-aurelius", "userSession": "s1"})
    assert response.status_code == 200
    assert response.json() == {"conversationId": None, "messages": []}


def test_history_missing_parameters(client):
    response = client.get("/api/conversations", params={"agentId": "marcus-aurelius"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing parameters"}

    response = client.get("/api/conversations", params={"userSession": "s1"})
    assert response.status_code == 400


def test_history_returns_latest_conversation_oldest_message_first(client):
    _seed_conversation(messages=[(MessageRole.USER, "old question")], age=60)
    cid = _seed_conversation(
        messages=[(MessageRole.USER, "hello"), (MessageRole.AGENT, "Greetings, friend.")],
    )

    response = client.get("/api/conversations", params={"agentId": "marcus-aurelius", "userSession": "s1"})
    data = response.json()
    assert data["conversationId"] == cid
    assert [(m["role"], m["content"]) for m in data["messages"]] == [
        ("user", "hello"),
        ("agent", "Greetings, friend."),
    ]
    assert {"id", "role", "content", "created_at"} <= set(data["messages"][0])


def test_history_is_scoped_to_agent_and_caller(client):
    _seed_conversation(agent_id="elon-musk", messages=[(MessageRole.USER, "rockets?")])
    _seed_conversation(user_session="s2", messages=[(MessageRole.USER, "not yours")])

    response = client.get("/api/conversations", params={"agentId": "marcus-aurelius", "userSession": "s1"})
    assert response.json()["messages"] == []


def test_history_by_user_id(client):
    cid = _seed_conversation(user_session="browser-a", user_id="user-1", messages=[(MessageRole.USER, "hi")])

    response = client.get("/api/conversations", params={"agentId": "marcus-aurelius", "userId": "user-1"})
    assert response.json()["conversationId"] == cid


def test_get_conversation(client):
    cid = _seed_conversation(messages=[(MessageRole.USER, "hello"), (MessageRole.AGENT, "hi there")])
    response = client.get(f"/api/conversations/{cid}", params={"userSession": "s1"})
    assert response.status_code == 200
    data = response.json()
    assert data["agent_id"] == "marcus-aurelius"
    assert len(data["messages"]) == 2
    assert data["messages"][0]["role"] == "user"
    assert data["messages"][1]["role"] == "agent"


def test_get_conversation_not_found(client):
    response = client.get("/api/conversations/does-not-exist", params={"userSession": "s1"})
    assert response.status_code == 404


def test_get_conversation_of_someone_else(client):
    cid = _seed_conversation(messages=[(MessageRole.USER, "private")])
    response = client.get(f"/api/conversations/{cid}", params={"userSession": "intruder"})
    assert response.status_code == 404


def test_delete_conversation(client):
    cid = _seed_conversation(messages=[(MessageRole.USER, "hello"), (MessageRole.AGENT, "bye")])
    response = client.delete(f"/api/conversations/{cid}", params={"userSession": "s1"})
    assert response.status_code == 200
    assert response.json() == {"status": "deleted"}

    assert client.get(f"/api/conversations/{cid}", params={"userSession": "s1"}).status_code == 404
    assert messages_in(cid) == []


def test_delete_conversation_not_found(client):
    response = client.delete("/api/conversations/does-not-exist", params={"userSession": "s1"})
    assert response.status_code == 404
