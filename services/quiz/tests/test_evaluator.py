"""Tests for AnswerEvaluator scoring rules."""

import logging

import pytest

from packages.common.logging import set_request_id
from packages.schemas.quiz import SubmittedAnswer
from services.quiz.errors import InvalidInputShape, NoQuestionsForQuiz
from services.quiz.evaluator import AnswerEvaluator, coerce_answer

QUIZ = "quiz-a"
OTHER = "quiz-b"


@pytest.fixture
def three_questions(fake_store):
    fake_store.add(QUIZ, "q1", "opt2")
    fake_store.add(QUIZ, "q2", "opt1")
    fake_store.add(QUIZ, "q3", "opt2")
    fake_store.add(OTHER, "x1", "opt1")
    return fake_store


def answers(*pairs):
    return [{"questionId": q, "selectedOptionId": o} for q, o in pairs]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "submitted, expected",
    [
        (answers(("q1", "opt2"), ("q2", "opt1"), ("q3", "opt2")), 3),
        (answers(("q1", "opt2"), ("q2", "opt2"), ("q3", "opt2")), 2),
        (answers(("q1", "opt1"), ("q2", "opt2"), ("q3", "opt3")), 0),
        (answers(("q1", "opt2"), ("q2", "opt1")), 2),
        ([], 0),
    ],
)
async def test_scores_against_full_total(three_questions, submitted, expected) -> None:
    result = await AnswerEvaluator(three_questions).evaluate(QUIZ, submitted)
    assert result.score == expected
    assert result.total == 3


@pytest.mark.asyncio
async def test_foreign_and_unknown_questions_never_score(three_questions) -> None:
    submitted = answers(("q1", "opt2"), ("x1", "opt1"), ("missing", "opt1"))
    result = await AnswerEvaluator(three_questions).evaluate(QUIZ, submitted)
    assert (result.score, result.total) == (1, 3)


@pytest.mark.asyncio
async def test_option_match_is_case_sensitive(three_questions) -> None:
    result = await AnswerEvaluator(three_questions).evaluate(QUIZ, answers(("q1", "OPT2")))
    assert result.score == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("bad", ["not an array", None, 42, {"questionId": "q1"}, b"q1"])
async def test_non_sequence_rejected_before_store_access(fake_store, bad) -> None:
    with pytest.raises(InvalidInputShape) as exc:
        await AnswerEvaluator(fake_store).evaluate("never-looked-up", bad)
    assert exc.value.message == "Answers must be in array format"
    assert fake_store.key_requests == []


@pytest.mark.asyncio
async def test_quiz_without_questions_rejected(three_questions) -> None:
    with pytest.raises(NoQuestionsForQuiz):
        await AnswerEvaluator(three_questions).evaluate("empty-quiz", answers(("q1", "opt2")))
    assert three_questions.key_requests == []


@pytest.mark.asyncio
async def test_only_submitted_ids_are_requested(three_questions) -> None:
    await AnswerEvaluator(three_questions).evaluate(QUIZ, answers(("q1", "opt2"), ("q1", "opt1"), ("zz", "a")))
    assert three_questions.key_requests == [{"q1", "zz"}]


@pytest.mark.asyncio
async def test_duplicates_counted_by_default(three_questions) -> None:
    submitted = answers(("q1", "opt2"), ("q1", "opt2"), ("q2", "opt1"), ("q3", "opt2"))
    result = await AnswerEvaluator(three_questions).evaluate(QUIZ, submitted)
    assert (result.score, result.total) == (4, 3)


@pytest.mark.asyncio
async def test_duplicates_scored_once_when_disabled(three_questions) -> None:
    submitted = answers(("q1", "opt1"), ("q1", "opt2"), ("q2", "opt1"), ("q2", "opt1"))
    result = await AnswerEvaluator(three_questions, count_duplicates=False).evaluate(QUIZ, submitted)
    # first answer per question wins: q1 wrong, q2 right
    assert (result.score, result.total) == (1, 3)


@pytest.mark.asyncio
async def test_accepts_models_tuples_and_snake_case(three_questions) -> None:
    submitted = (
        SubmittedAnswer(question_id="q1", selected_option_id="opt2"),
        {"question_id": "q2", "selected_option_id": "opt1"},
        {"questionId": "q3"},
        "garbage",
    )
    result = await AnswerEvaluator(three_questions).evaluate(QUIZ, submitted)
    assert (result.score, result.total) == (2, 3)


@pytest.mark.asyncio
async def test_emits_audit_event(three_questions, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="quiz.audit"):
        await AnswerEvaluator(three_questions).evaluate(QUIZ, answers(("q1", "opt2"), ("nope", "a")))
    events = [r.getMessage() for r in caplog.records if r.name == "quiz.audit"]
    if len(events) != 1:
        pytest.fail(f"Expected one audit event, got {events}")
    assert '"verb": "evaluated"' in events[0]
    assert '"matched": 1' in events[0]


def test_coerce_answer_rejects_non_string_fields() -> None:
    assert coerce_answer({"questionId": 1, "selectedOptionId": "a"}) is None
    assert coerce_answer(["q1", "a"]) is None
    assert coerce_answer({"questionId": "q1", "selectedOptionId": "a"}) == SubmittedAnswer(
        question_id="q1", selected_option_id="a"
    )


@pytest.mark.asyncio
async def test_audit_event_carries_request_id(three_questions, caplog) -> None:
    set_request_id("rid-123")
    try:
        with caplog.at_level(logging.INFO, logger="quiz.audit"):
            await AnswerEvaluator(three_questions).evaluate(QUIZ, answers(("q1", "opt2")))
    finally:
        set_request_id(None)
    events = [r.getMessage() for r in caplog.records if r.name == "quiz.audit"]
    assert '"request_id": "rid-123"' in events[0]
