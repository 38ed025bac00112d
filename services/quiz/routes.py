# services/quiz/routes.py
"""HTTP routes for quizzes, questions and submissions (mounted at /api/quizzes)."""

from collections.abc import Mapping
from typing import Any, List

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from packages.common.config import Settings
from packages.schemas.quiz import (
    EvaluationResult, PublicQuestion, Question, QuestionCreate, Quiz, QuizCreate, QuizTitle,
)
from .errors import QuizNotFound
from .evaluator import AnswerEvaluator
from .repo import QuestionStore, QuizStore

router = APIRouter(prefix="/api/quizzes", tags=["quiz"])


def get_quiz_store(request: Request) -> QuizStore:
    return request.app.state.quizzes


def get_question_store(request: Request) -> QuestionStore:
    return request.app.state.questions


def get_evaluator(request: Request) -> AnswerEvaluator:
    return request.app.state.evaluator


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


@router.post("", response_model=Quiz, status_code=status.HTTP_201_CREATED)
async def create_quiz(payload: QuizCreate, quizzes: QuizStore = Depends(get_quiz_store)) -> Quiz:
    """Create a quiz from its title."""
    return await quizzes.create(payload.title)


@router.get("", response_model=List[QuizTitle])
async def list_quizzes(quizzes: QuizStore = Depends(get_quiz_store)) -> List[QuizTitle]:
    """Return every quiz as {id, title}."""
    return await quizzes.list_titles()


@router.get("/{quiz_id}", response_model=Quiz)
async def read_quiz(quiz_id: str, quizzes: QuizStore = Depends(get_quiz_store)) -> Quiz:
    """Return the quiz with `quiz_id`; 404 if not found."""
    quiz = await quizzes.find_by_id(quiz_id)
    if quiz is None:
        raise QuizNotFound()
    return quiz


@router.post("/{quiz_id}/questions", response_model=Question, status_code=status.HTTP_201_CREATED)
async def add_question(
    quiz_id: str,
    payload: QuestionCreate,
    quizzes: QuizStore = Depends(get_quiz_store),
    questions: QuestionStore = Depends(get_question_store),
    settings: Settings = Depends(get_app_settings),
) -> Question:
    """Add a question to a quiz and return it, answer key included.

    With STRICT_QUIZ_REFERENCES the quiz must exist (404) and the answer key
    must name one of the options (400).
    """
    if settings.STRICT_QUIZ_REFERENCES:
        if await quizzes.find_by_id(quiz_id) is None:
            raise QuizNotFound()
        if payload.correct_option_id not in {o.id for o in payload.options}:
            raise HTTPException(400, "correctOptionId must match one of the option ids")
    return await questions.create(quiz_id, payload.text, payload.options, payload.correct_option_id)


@router.get("/{quiz_id}/questions", response_model=List[PublicQuestion])
async def list_questions(quiz_id: str, questions: QuestionStore = Depends(get_question_store)) -> List[PublicQuestion]:
    """Return the quiz's questions without answer keys."""
    return await questions.find_public(quiz_id)


@router.post("/{quiz_id}/submit", response_model=EvaluationResult)
async def submit_answers(
    quiz_id: str,
    payload: Any = Body(None),
    evaluator: AnswerEvaluator = Depends(get_evaluator),
) -> EvaluationResult:
    """Score `{"answers": [...]}`; `total` is always the quiz's full question count.

    Any body that is not a JSON object carries no answers and is rejected
    like a non-array `answers` field.
    """
    answers = payload.get("answers") if isinstance(payload, Mapping) else None
    return await evaluator.evaluate(quiz_id, answers)
