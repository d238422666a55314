"""Tests for the persona catalog and custom agent endpoints."""

import json
from unittest.mock import patch

from sqlmodel import Session, select

from tests.conftest import test_engine
from genshai.models.agent import CustomAgent
from genshai.services.personas import STATIC_PERSONAS


def _create(client, name="Ada Lovelace", **extra):
    body = {"name": name, "domain": "Computing", "layer_core_values": "Poetical science"}
    body.update(extra)
    return client.post("/api/agents", json=body)


def test_list_agents_static_only(client):
    response = client.get("/api/agents")
    assert response.status_code == 200
    data = response.json()
    assert [a["id"] for a in data] == list(STATIC_PERSONAS)
    assert all(a["source"] == "static" for a in data)


def test_create_agent(client):
    response = _create(client, conversation_starters=["What is a machine?", "  "])
    assert response.status_code == 201
    data = response.json()
    assert data["id"] == "ada-lovelace"
    assert data["source"] == "custom"
    assert data["conversation_starters"] == ["What is a machine?"]
    assert data["layers"]["core_values"] == "Poetical science"
    assert data["system_prompt"].startswith("You are Ada Lovelace.")


def test_create_agent_slug_collisions(client):
    assert _create(client).status_code == 201
    assert _create(client).status_code == 409
    assert _create(client, name="Marcus Aurelius").status_code == 409


def test_create_agent_slug_race_is_a_conflict(client):
    assert _create(client).status_code == 201

    # Another request created the same slug after this one checked for it.
    with patch("genshai.api.agents._get_custom", return_value=None):
        response = _create(client)

    assert response.status_code == 409
    with Session(test_engine) as session:
        assert len(session.exec(select(CustomAgent)).all()) == 1


def test_create_agent_requires_name_and_domain(client):
    response = client.post("/api/agents", json={"name": "", "domain": "Computing"})
    assert response.status_code == 400
    assert "error" in response.json()

    assert _create(client, name="!!!").status_code == 400


def test_private_agents_are_visible_to_their_creator_only(client):
    _create(client, created_by="user-1")
    _create(client, name="Grace Hopper", is_public=True)

    anonymous = [a["id"] for a in client.get("/api/agents").json()]
    assert "grace-hopper" in anonymous
    assert "ada-lovelace" not in anonymous

    own = [a["id"] for a in client.get("/api/agents", params={"createdBy": "user-1"}).json()]
    assert {"ada-lovelace", "grace-hopper"} <= set(own)


def test_get_agent(client):
    assert client.get("/api/agents/nikola-tesla").json()["name"] == "Nikola Tesla"

    _create(client, is_public=True)
    assert client.get("/api/agents/ada-lovelace").json()["domain"] == "Computing"

    assert client.get("/api/agents/nobody").status_code == 404


def test_update_agent(client):
    _create(client, tagline="Enchantress of numbers")
    response = client.put(
        "/api/agents/ada-lovelace",
        json={"name": None, "tagline": None, "layer_mental_models": "Symbolic manipulation"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Ada Lovelace"
    assert data["tagline"] is None
    assert data["layers"]["mental_models"] == "Symbolic manipulation"
    assert "MENTAL MODELS:\nSymbolic manipulation" in data["system_prompt"]


def test_update_missing_agent(client):
    assert client.put("/api/agents/nobody", json={"name": "X"}).status_code == 404


def test_private_agent_is_fetched_by_its_creator_only(client):
    _create(client, created_by="user-1")

    assert client.get("/api/agents/ada-lovelace").status_code == 404
    assert client.get("/api/agents/ada-lovelace", params={"createdBy": "user-2"}).status_code == 404
    response = client.get("/api/agents/ada-lovelace", params={"createdBy": "user-1"})
    assert response.status_code == 200
    assert response.json()["created_by"] == "user-1"


def test_deactivated_agent_is_hidden(client):
    _create(client, is_public=True, created_by="user-1")
    client.put("/api/agents/ada-lovelace", json={"is_active": False})
    assert "ada-lovelace" not in [a["id"] for a in client.get("/api/agents").json()]
    assert client.get("/api/agents/ada-lovelace").status_code == 404
    assert client.get("/api/agents/ada-lovelace", params={"createdBy": "user-1"}).status_code == 404


def test_delete_agent(client):
    _create(client)
    response = client.delete("/api/agents/ada-lovelace")
    assert response.status_code == 200
    assert client.get("/api/agents/ada-lovelace").status_code == 404
    assert client.delete("/api/agents/ada-lovelace").status_code == 404


def test_blueprint(client, gateway):
    gateway.completion = "```json\n" + json.dumps(
        {"name": "Marcus Aurelius", "era": "121 – 180", "layer_core_values": "Virtue is the only good"}
    ) + "\n```"
    response = client.post("/api/agents/blueprint", json={"name": "Marcus Aurelius"})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["blueprint"]["layer_core_values"] == "Virtue is the only good"

    sent = gateway.requests[-1]
    assert sent["model"] == "google/gemini-2.5-flash"
    assert sent["response_format"] == {"type": "json_object"}
    assert gateway.wiki_extract in sent["messages"][1]["content"]


def test_blueprint_invalid_json_is_a_server_error(client, gateway):
    gateway.completion = "I would rather not."
    response = client.post("/api/agents/blueprint", json={"name": "Marcus Aurelius"})
    assert response.status_code == 500
    assert "invalid blueprint" in response.json()["error"]


def test_blueprint_rate_limited(client, gateway):
    gateway.status = 429
    response = client.post("/api/agents/blueprint", json={"name": "Marcus Aurelius"})
    assert response.status_code == 429
    assert "Rate limit" in response.json()["error"]


def test_blueprint_survives_odd_wikipedia_response(client, gateway):
    gateway.wiki_search_body = ["not", "an", "object"]
    gateway.completion = json.dumps({"name": "Marcus Aurelius"})
    response = client.post("/api/agents/blueprint", json={"name": "Marcus Aurelius"})

    assert response.status_code == 200
    assert response.json()["blueprint"] == {"name": "Marcus Aurelius"}
    assert "Wikipedia:" not in gateway.requests[-1]["messages"][1]["content"]
