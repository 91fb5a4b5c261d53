"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from newhire import engine
from newhire.config import get_settings
from newhire.main import app, get_contract_initiator, get_staff_notifier, get_store_factory
from newhire.storage import MemorySessionStore
from tests.conftest import CEO_EMAIL, DEV_EMAIL, FakeInitiator, FakeNotifier


@pytest.fixture
def fakes(monkeypatch, memory_sessions):
    monkeypatch.setenv("STAFF_CEO_EMAIL", CEO_EMAIL)
    monkeypatch.setenv("STAFF_DEV_EMAIL", DEV_EMAIL)
    get_settings.cache_clear()

    initiator = FakeInitiator()
    notifier = FakeNotifier()
    app.dependency_overrides[get_store_factory] = lambda: MemorySessionStore
    app.dependency_overrides[get_contract_initiator] = lambda: initiator
    app.dependency_overrides[get_staff_notifier] = lambda: notifier
    yield initiator, notifier
    app.dependency_overrides.clear()


@pytest.fixture
def client(fakes):
    return TestClient(app)


def chat(client, session_id, message):
    resp = client.post("/chat", json={"session_id": session_id, "message": message})
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_steps(client):
    steps = client.get("/steps").json()["steps"]
    assert steps[0]["id"] == "start"
    assert steps[-2]["auto_successor"] == "completed"


def test_start_creates_session(client):
    body = client.post("/start").json()
    assert body["session_id"]
    assert body["step"] == "start"
    assert body["data"] == {}
    assert body["input_enabled"] is True
    assert "legal first name" in body["message"]


def test_full_conversation(client, fakes):
    initiator, notifier = fakes
    session_id = client.post("/start").json()["session_id"]
    for text in ["Jane", "Doe", "y", "n", "Texas", "jane@x.com"]:
        body = chat(client, session_id, text)
    assert body["step"] == "final_instructions_pre_contract"

    body = chat(client, session_id, "sign contract")
    assert body["step"] == "awaiting_adobe_signature_completion"
    assert "http://sign" in body["message"]
    assert initiator.calls[0]["agreement_title"].startswith("Independent Contractor Agreement - Jane Doe - ")

    body = chat(client, session_id, "contract signed")
    assert body["step"] == "completed"
    assert body["data"]["adobe_agreement_id"] == "A1"
    assert body["warnings"] == []
    assert len(notifier.calls) == 4


def test_resume_returns_current_prompt(client):
    session_id = client.post("/start").json()["session_id"]
    chat(client, session_id, "Jane")
    body = client.post("/resume", json={"session_id": session_id}).json()
    assert body["step"] == "collect_first_name"
    assert body["message"] == "Thank you, Jane. And what is your legal last name?"


def test_resume_unknown_session_starts_fresh(client):
    body = client.post("/resume", json={"session_id": "nope"}).json()
    assert body["session_id"] == "nope"
    assert body["step"] == "start"


def test_chat_unknown_session(client):
    resp = client.post("/chat", json={"session_id": "missing", "message": "hello"})
    assert resp.status_code == 404


def test_disqualified_session_can_only_reset(client, memory_sessions):
    session_id = client.post("/start").json()["session_id"]
    chat(client, session_id, "Jane")
    chat(client, session_id, "Doe")
    body = chat(client, session_id, "n")
    assert body["step"] == "completed"
    assert body["input_enabled"] is False
    assert body["message"] == engine.NO_COMPUTER_MESSAGE
    assert session_id not in memory_sessions

    body = chat(client, session_id, "y")
    assert body["step"] == "completed"
    assert body["input_enabled"] is False
    assert body["data"] == {}
    assert body["message"] == engine.ALREADY_COMPLETE_MESSAGE
    assert session_id not in memory_sessions

    body = chat(client, session_id, "reset")
    assert body["step"] == "start"
    assert body["input_enabled"] is True


def test_start_with_existing_session_resets(client):
    session_id = client.post("/start").json()["session_id"]
    chat(client, session_id, "Jane")
    body = client.post("/start", json={"session_id": session_id}).json()
    assert body["session_id"] == session_id
    assert body["step"] == "start"
    assert body["data"] == {}


def test_chat_requires_session_id(client):
    resp = client.post("/chat", json={"message": "hello"})
    assert resp.status_code == 422
