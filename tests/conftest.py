import os

# Must be set before chat_backend.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from chat_backend.database import Base, SessionLocal, engine, init_db
from chat_backend.main import app
from chat_backend.services import gpt_llm
from chat_backend.services.gpt_llm import LLMReply


class FakeLLM:
    """Stands in for gpt_llm.generate_response; replays queued replies or errors."""

    def __init__(self):
        self.replies = []
        self.calls = []

    def queue(self, *items):
        self.replies.extend(items)

    def __call__(self, conversation_history, model_id=None):
        self.calls.append([dict(m) for m in conversation_history])
        item = self.replies.pop(0) if self.replies else LLMReply("Could you tell me a bit more?")
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture(autouse=True)
def fresh_db():
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def fake_llm(monkeypatch):
    fake = FakeLLM()
    monkeypatch.setattr(gpt_llm, "generate_response", fake)
    return fake


@pytest.fixture
def client(fake_llm):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def started(client):
    """A fresh interview; returns its conversation id."""
    response = client.post("/api/chat", json={"isInitial": True})
    assert response.status_code == 200
    return response.json()["conversationId"]
