import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from mcq_service import models  # noqa: F401
from mcq_service.db import Base, get_db
from mcq_service.item_bank import ItemBank
from mcq_service.main import app
from mcq_service.matching import TopicMatcher
from mcq_service.resources import get_generator_factory, get_item_bank, get_matcher
from mcq_service.settings import DEFAULT_ITEM_BANK


VALID_REPLY = """```json
{
  "stem": "Which pod phase follows Pending once all containers start?",
  "code": null,
  "options": [
    {"id": "A", "text": "Running"},
    {"id": "B", "text": "Succeeded"},
    {"id": "C", "text": "Failed"},
    {"id": "D", "text": "Unknown"}
  ],
  "correct": "a",
  "feedback": {"correct": "Yes.", "incorrect": "Not quite.", "explanation": "Pods move to Running when containers start."}
}
```"""


class FakeGenerator:
    """Stands in for GeminiClient: canned replies, records prompts."""

    model_name = "fake:model"

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    async def generate(self, prompt, *, thinking_budget=None):
        self.prompts.append(prompt)
        return self.replies.pop(0)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None


@pytest.fixture
def db_session(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, future=True)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def bank():
    return ItemBank.from_json(DEFAULT_ITEM_BANK)


@pytest.fixture
def matcher():
    return TopicMatcher()


@pytest.fixture
def fake_generator():
    return FakeGenerator(VALID_REPLY)


@pytest.fixture
def client(db_session, bank, matcher):
    def _db():
        yield db_session

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_item_bank] = lambda: bank
    app.dependency_overrides[get_matcher] = lambda: matcher
    app.dependency_overrides[get_generator_factory] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()
