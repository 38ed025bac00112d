"""SQLAlchemy models for the Quiz service.

Defines two tables:
- Quiz: A titled container of questions.
- Question: A multiple-choice question that points back at its quiz.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base, Mapped, mapped_column
from sqlalchemy import String, Text, DateTime

Base = declarative_base()


def new_id() -> str:
    """Return a fresh opaque identifier (UUID4 as 32 hex chars)."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to timestamps read back naive (SQLite drops the offset)."""
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)


class Quiz(Base):
    """Quiz entity.

    Attributes:
        id: Primary key (UUID hex).
        title: Trimmed, non-empty title.
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
    """

    __tablename__ = "quizzes"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(200))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Question(Base):
    """Question entity that belongs to a Quiz.

    `quiz_id` is a plain indexed column rather than a foreign key: a question
    may reference a quiz id that does not exist.

    Attributes:
        id: Primary key (UUID hex).
        quiz_id: Id of the owning quiz.
        text: Trimmed, non-empty prompt.
        options: JSON-encoded list of {"id", "text"} objects (stored as text).
        correct_option_id: Answer key.
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
    """

    __tablename__ = "questions"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    quiz_id: Mapped[str] = mapped_column(String(32), index=True)
    text: Mapped[str] = mapped_column(Text)
    options: Mapped[str] = mapped_column(Text, default="[]")  # JSON encoded list
    correct_option_id: Mapped[str] = mapped_column(String(200))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
