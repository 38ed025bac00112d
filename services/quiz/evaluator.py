# services/quiz/evaluator.py
"""Answer evaluation for the Quiz service.

`AnswerEvaluator.evaluate` scores a list of submitted answers against the
answer keys of one quiz:

1. count the quiz's questions (zero -> NoQuestionsForQuiz);
2. fetch the key-only projection for the submitted question ids;
3. add one point per submitted answer whose selected option equals the key.

Answers for questions outside the quiz score nothing and are not errors.
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Protocol

from packages.common.tracing import audit_event
from packages.schemas.quiz import AnswerKey, EvaluationResult, SubmittedAnswer
from .errors import InvalidInputShape, NoQuestionsForQuiz

logger = logging.getLogger(__name__)


class AnswerKeySource(Protocol):
    """The part of the question store the evaluator reads from."""

    async def count_by_quiz(self, quiz_id: str) -> int: ...

    async def find_answer_keys(self, quiz_id: str, question_ids: Iterable[str]) -> List[AnswerKey]: ...


def _read(item: Mapping, camel: str, snake: str) -> Any:
    return item[camel] if camel in item else item.get(snake)


def coerce_answer(item: Any) -> Optional[SubmittedAnswer]:
    """Read one submitted element as a SubmittedAnswer, or None if it is not a pair."""
    if isinstance(item, SubmittedAnswer):
        return item
    if not isinstance(item, Mapping):
        return None
    question_id = _read(item, "questionId", "question_id")
    selected = _read(item, "selectedOptionId", "selected_option_id")
    if not isinstance(question_id, str) or not isinstance(selected, str):
        return None
    return SubmittedAnswer(question_id=question_id, selected_option_id=selected)


def is_answer_sequence(answers: Any) -> bool:
    """True for list/tuple input; strings, mappings and scalars are rejected."""
    return isinstance(answers, (list, tuple))


class AnswerEvaluator:
    """Scores submissions against the stored answer keys.

    Args:
        questions: Store providing question counts and key-only lookups.
        count_duplicates: When True every submitted answer is scored, so
            repeating a correct answer for one question scores it again and
            `score` may exceed `total`. When False only the first answer for
            each question is scored.
    """

    def __init__(self, questions: AnswerKeySource, count_duplicates: bool = True) -> None:
        self._questions = questions
        self.count_duplicates = count_duplicates

    async def evaluate(self, quiz_id: str, answers: Any) -> EvaluationResult:
        """Score `answers` for `quiz_id`.

        Raises:
            InvalidInputShape: `answers` is not a list/tuple.
            NoQuestionsForQuiz: the quiz id matches no questions.
            StoreError: propagated unchanged from the store.
        """
        if not is_answer_sequence(answers):
            logger.info("rejected submission", extra={"quiz_id": quiz_id, "reason": "shape"})
            raise InvalidInputShape()

        total = await self._questions.count_by_quiz(quiz_id)
        if total == 0:
            logger.info("rejected submission", extra={"quiz_id": quiz_id, "reason": "no_questions"})
            raise NoQuestionsForQuiz()

        submitted = [coerce_answer(a) for a in answers]
        wanted = {a.question_id for a in submitted if a is not None}
        keys = await self._questions.find_answer_keys(quiz_id, wanted)
        key_by_id = {k.id: k.correct_option_id for k in keys}

        score = 0
        matched = 0
        seen: set[str] = set()
        for answer in submitted:
            if answer is None or answer.question_id not in key_by_id:
                logger.debug("skipping unmatched answer", extra={"quiz_id": quiz_id, "answer": answer})
                continue
            if not self.count_duplicates:
                if answer.question_id in seen:
                    continue
                seen.add(answer.question_id)
            matched += 1
            if answer.selected_option_id == key_by_id[answer.question_id]:
                score += 1

        audit_event(
            "participant", "evaluated", quiz_id,
            score=score, total=total, submitted=len(submitted), matched=matched,
        )
        return EvaluationResult(score=score, total=total)
