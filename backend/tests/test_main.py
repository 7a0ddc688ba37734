"""Tests for the FastAPI endpoints (offline session, no lifespan)."""

import json

import pytest
from fastapi.testclient import TestClient

import main
from conftest import ScriptedProvider, make_embedder, make_generator
from llm.client import GenerativeClient
from session import AssistantSession


@pytest.fixture
def session(profile, monkeypatch):
    s = AssistantSession(
        profile,
        embedder=make_embedder(),
        generator=GenerativeClient(None),
        conversational=False,
    )
    monkeypatch.setattr(main, "session", s)
    return s


@pytest.fixture
def client(session):
    return TestClient(main.app)


def _parse_stream(body: str) -> list[tuple[str, object]]:
    out = []
    for line in body.splitlines():
        if line:
            prefix, _, payload = line.partition(":")
            out.append((prefix, json.loads(payload)))
    return out


def test_health(client):
    data = client.get("/health").json()
    assert data["status"] == "ok"
    assert data["profile"] == "Jane Doe"
    assert data["documents"] == 13
    assert data["llm_provider"] == "none"
    assert data["llm_available"] is False
    assert data["embedding_model_loaded"] is False


def test_chat(client):
    resp = client.post("/chat", json={"query": "How can I contact you?"})
    assert resp.status_code == 200
    data = resp.json()
    assert "jane@example.com" in data["response"]
    assert len(data["sections"]) == 3
    assert {"id", "category", "content"} <= set(data["sections"][0])


def test_chat_rejects_empty_query(client):
    assert client.post("/chat", json={"query": ""}).status_code == 422


def test_chat_stream_protocol(client):
    resp = client.post("/chat/stream", json={"query": "Where are you based?"})
    assert resp.status_code == 200
    events = _parse_stream(resp.text)

    assert events[0] == ("8", [{"stage": "generating"}])
    text = "".join(payload for prefix, payload in events if prefix == "0")
    assert text == "I'm based in Lisbon, Portugal."
    sections = next(p for prefix, p in events if prefix == "8" and "sections" in p[0])
    assert len(sections[0]["sections"]) == 3
    assert events[-2] == ("e", {"finishReason": "stop"})
    assert events[-1] == ("d", {"finishReason": "stop"})


def _llm_client(profile, monkeypatch, chunks, error=None):
    s = AssistantSession(
        profile,
        embedder=make_embedder(),
        generator=make_generator(ScriptedProvider(chunks, error=error)),
        conversational=False,
    )
    monkeypatch.setattr(main, "session", s)
    return TestClient(main.app)


@pytest.mark.parametrize("chunks,answer", [
    (["I code.", " And th"], "I code."),
    (["Hi there. I ", "build APIs. Tha"], "Hi there. I build APIs."),
    (["Hello", " world."], "Hello world."),
])
def test_chat_stream_llm_deltas_join_to_trimmed_answer(profile, monkeypatch, chunks, answer):
    client = _llm_client(profile, monkeypatch, chunks)
    events = _parse_stream(client.post("/chat/stream", json={"query": "What do you do?"}).text)

    text = "".join(payload for prefix, payload in events if prefix == "0")
    assert text == answer
    assert ("8", [{"stage": "replaced"}]) not in events
    assert events[-1] == ("d", {"finishReason": "stop"})


def test_chat_stream_llm_failure_after_sentence_signals_replacement(profile, monkeypatch):
    client = _llm_client(
        profile, monkeypatch, ["I am based ", "somewhere. Ac"], error=RuntimeError("reset"),
    )
    events = _parse_stream(client.post("/chat/stream", json={"query": "Where are you based?"}).text)

    marker = events.index(("8", [{"stage": "replaced"}]))
    after = "".join(payload for prefix, payload in events[marker:] if prefix == "0")
    assert after == "I'm based in Lisbon, Portugal."


def test_conversation_roundtrip(client):
    client.post("/chat", json={"query": "Who are you?"})
    data = client.get("/conversation").json()
    assert data["count"] == 2
    assert data["messages"][0] == {"sender": "user", "text": "Who are you?", "streaming": False}

    assert client.delete("/conversation").json() == {"cleared": True}
    assert client.get("/conversation").json()["count"] == 0


def test_busy_session_conflicts(client, session):
    session._pending_query = "still running"
    assert client.post("/chat", json={"query": "hi"}).status_code == 409
    assert client.post("/chat/stream", json={"query": "hi"}).status_code == 409
    assert client.delete("/conversation").status_code == 409


def test_loading_state(client):
    assert client.get("/loading").json() == {"loading": False, "progress": 0.0, "status": ""}


def test_documents(client):
    data = client.get("/documents").json()
    assert data["count"] == 13
    assert data["documents"][0]["id"] == "basics"


def test_uninitialized_session(monkeypatch):
    monkeypatch.setattr(main, "session", None)
    assert TestClient(main.app).get("/health").status_code == 503
