"""Quiz schemas: quizzes, questions in their three projections, submissions and scores."""

from datetime import datetime
from typing import Annotated, List

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _non_empty(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


def _present(value: str) -> str:
    if not value:
        raise ValueError("must not be empty")
    return value


TrimmedStr = Annotated[str, AfterValidator(_non_empty)]
RequiredStr = Annotated[str, AfterValidator(_present)]


class _Schema(BaseModel):
    """Base model: camelCase on the wire, snake_case attributes, both accepted on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuizCreate(_Schema):
    """Payload for creating a quiz; the title is trimmed before storage."""
    title: TrimmedStr


class Quiz(_Schema):
    """A stored quiz."""
    id: str
    title: str
    created_at: datetime
    updated_at: datetime


class QuizTitle(_Schema):
    """Listing entry for a quiz."""
    id: str
    title: str


class Option(_Schema):
    """A selectable option of a multiple-choice question."""
    id: RequiredStr
    text: RequiredStr


class QuestionCreate(_Schema):
    """Payload for adding a question to a quiz."""
    text: TrimmedStr
    options: List[Option]
    correct_option_id: RequiredStr


class Question(_Schema):
    """A stored question including its answer key (author-facing only)."""
    id: str
    quiz_id: str
    text: str
    options: List[Option]
    correct_option_id: str
    created_at: datetime
    updated_at: datetime


class PublicQuestion(_Schema):
    """Participant-facing projection; carries no answer key."""
    id: str
    text: str
    options: List[Option]


class AnswerKey(_Schema):
    """Evaluation projection; carries nothing but the answer key."""
    id: str
    correct_option_id: str


class SubmittedAnswer(_Schema):
    """One selected option for one question."""
    question_id: str
    selected_option_id: str


class EvaluationResult(BaseModel):
    """Score for a submission; `total` is the full question count of the quiz."""
    score: int
    total: int
