"""Shared fixtures for the Quiz service tests."""

from typing import Iterable, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from packages.common.config import Settings
from packages.schemas.quiz import AnswerKey
from services.quiz.app import create_app
from services.quiz.repo import QuestionStore, QuizStore, build_engine, build_sessionmaker, init_db


class FakeQuestionStore:
    """In-memory stand-in for QuestionStore's evaluation reads."""

    def __init__(self) -> None:
        self.rows: list[dict] = []
        self.key_requests: list[set] = []

    def add(self, quiz_id: str, question_id: str, correct_option_id: str) -> None:
        self.rows.append({"quiz_id": quiz_id, "id": question_id, "correct_option_id": correct_option_id})

    async def count_by_quiz(self, quiz_id: str) -> int:
        return sum(1 for r in self.rows if r["quiz_id"] == quiz_id)

    async def find_answer_keys(self, quiz_id: str, question_ids: Iterable[str]) -> List[AnswerKey]:
        ids = set(question_ids)
        self.key_requests.append(ids)
        return [
            AnswerKey(id=r["id"], correct_option_id=r["correct_option_id"])
            for r in self.rows
            if r["quiz_id"] == quiz_id and r["id"] in ids
        ]


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(_env_file=None, DATABASE_DSN=f"sqlite+aiosqlite:///{tmp_path / 'quiz.db'}")


@pytest.fixture
def fake_store() -> FakeQuestionStore:
    return FakeQuestionStore()


@pytest_asyncio.fixture
async def stores(settings):
    """(QuizStore, QuestionStore) over a fresh SQLite database."""
    engine = build_engine(settings)
    await init_db(engine)
    sessions = build_sessionmaker(engine)
    yield QuizStore(sessions), QuestionStore(sessions)
    await engine.dispose()


async def _client_for(settings: Settings):
    app = create_app(settings)
    await init_db(app.state.engine)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    await app.state.engine.dispose()


@pytest_asyncio.fixture
async def client(settings):
    async for ac in _client_for(settings):
        yield ac


@pytest_asyncio.fixture
async def strict_client(settings):
    async for ac in _client_for(settings.model_copy(update={"STRICT_QUIZ_REFERENCES": True})):
        yield ac


@pytest_asyncio.fixture
async def app_and_client(settings):
    """App plus a client that returns 500 responses instead of re-raising server errors."""
    app = create_app(settings)
    await init_db(app.state.engine)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield app, ac
    await app.state.engine.dispose()
