"""Repository layer for the Quiz service.

Provides async database wiring plus the two stores the service is built on:
- QuizStore: create / find / list quiz titles.
- QuestionStore: create questions and read them back through one of two
  projections (participant-facing without the answer key, or key-only for
  evaluation). No method returns full rows for a caller to filter.
"""

import json
import uuid
from typing import Iterable, Sequence

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from packages.common.config import Settings
from packages.schemas import quiz as schemas
from .errors import InvalidIdentifier, InvalidPayload
from .models import Base, Question, Quiz, as_utc


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for `settings.DATABASE_DSN`."""
    return create_async_engine(settings.DATABASE_DSN, echo=settings.DATABASE_ECHO)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create database schema if it doesn't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def parse_id(value: object) -> str:
    """Validate an identifier and return it unchanged.

    Identifiers are UUIDs in their 32-char lowercase hex form.

    Raises:
        InvalidIdentifier: `value` is not a canonical identifier.
    """
    try:
        canonical = uuid.UUID(value).hex  # type: ignore[arg-type]
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdentifier(value) from None
    if canonical != value:
        raise InvalidIdentifier(value)
    return canonical


def _valid_ids(values: Iterable[object]) -> set[str]:
    out = set()
    for value in values:
        try:
            out.add(parse_id(value))
        except InvalidIdentifier:
            continue
    return out


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid payload"


def _quiz_out(row: Quiz) -> schemas.Quiz:
    return schemas.Quiz(
        id=row.id, title=row.title, created_at=as_utc(row.created_at), updated_at=as_utc(row.updated_at)
    )


class QuizStore:
    """Persistence for quiz titles."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def create(self, title: str) -> schemas.Quiz:
        """Insert a new quiz and return it.

        Raises:
            InvalidPayload: the title is missing or blank.
        """
        try:
            payload = schemas.QuizCreate(title=title)
        except ValidationError as exc:
            raise InvalidPayload(_validation_message(exc)) from exc
        row = Quiz(title=payload.title)
        async with self._sessions() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
        return _quiz_out(row)

    async def find_by_id(self, quiz_id: str) -> schemas.Quiz | None:
        """Fetch a single quiz by id.

        Returns:
            The Quiz if found; otherwise None.
        """
        quiz_id = parse_id(quiz_id)
        async with self._sessions() as session:
            res = await session.execute(select(Quiz).where(Quiz.id == quiz_id))
            row = res.scalar_one_or_none()
        return _quiz_out(row) if row is not None else None

    async def list_titles(self) -> list[schemas.QuizTitle]:
        """List every quiz as {id, title}, oldest first."""
        async with self._sessions() as session:
            res = await session.execute(select(Quiz.id, Quiz.title).order_by(Quiz.created_at, Quiz.id))
            return [schemas.QuizTitle(id=r.id, title=r.title) for r in res]


class QuestionStore:
    """Persistence for questions, keyed by quiz id."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def create(
        self,
        quiz_id: str,
        text: str,
        options: Sequence[schemas.Option | dict],
        correct_option_id: str,
    ) -> schemas.Question:
        """Insert a new question row and return the created Question.

        The referenced quiz is not looked up and `correct_option_id` is not
        matched against the option ids.

        Args:
            quiz_id: Id of the owning quiz.
            text: Question prompt (trimmed).
            options: Ordered options, each with a non-empty id and text.
            correct_option_id: Answer key.

        Raises:
            InvalidIdentifier: `quiz_id` is malformed.
            InvalidPayload: a field is missing or blank.
        """
        quiz_id = parse_id(quiz_id)
        try:
            payload = schemas.QuestionCreate(text=text, options=options, correct_option_id=correct_option_id)
        except ValidationError as exc:
            raise InvalidPayload(_validation_message(exc)) from exc
        row = Question(
            quiz_id=quiz_id,
            text=payload.text,
            options=json.dumps([o.model_dump() for o in payload.options]),
            correct_option_id=payload.correct_option_id,
        )
        async with self._sessions() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
        return schemas.Question(
            id=row.id,
            quiz_id=row.quiz_id,
            text=row.text,
            options=payload.options,
            correct_option_id=row.correct_option_id,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )

    async def count_by_quiz(self, quiz_id: str) -> int:
        """Return the number of questions that reference `quiz_id`."""
        quiz_id = parse_id(quiz_id)
        async with self._sessions() as session:
            res = await session.execute(
                select(func.count()).select_from(Question).where(Question.quiz_id == quiz_id)
            )
            return int(res.scalar_one())

    async def find_public(self, quiz_id: str) -> list[schemas.PublicQuestion]:
        """Return the questions of a quiz without their answer keys, in insertion order."""
        quiz_id = parse_id(quiz_id)
        q = (
            select(Question.id, Question.text, Question.options)
            .where(Question.quiz_id == quiz_id)
            .order_by(Question.created_at, Question.id)
        )
        async with self._sessions() as session:
            res = await session.execute(q)
            return [
                schemas.PublicQuestion(id=r.id, text=r.text, options=json.loads(r.options))
                for r in res
            ]

    async def find_answer_keys(self, quiz_id: str, question_ids: Iterable[str]) -> list[schemas.AnswerKey]:
        """Return {id, correct_option_id} for the requested questions of a quiz.

        Ids that are malformed, unknown or belong to another quiz are absent
        from the result.
        """
        quiz_id = parse_id(quiz_id)
        ids = _valid_ids(question_ids)
        if not ids:
            return []
        q = (
            select(Question.id, Question.correct_option_id)
            .where(Question.quiz_id == quiz_id, Question.id.in_(ids))
        )
        async with self._sessions() as session:
            res = await session.execute(q)
            return [schemas.AnswerKey(id=r.id, correct_option_id=r.correct_option_id) for r in res]
