# services/quiz/errors.py
"""Exception hierarchy for the quiz service.

Each error carries the client-facing message used in `{"error": ...}` bodies.
"""


class QuizServiceError(Exception):
    """Base class for every error raised by the quiz service."""

    message = "Quiz service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class EvaluationError(QuizServiceError):
    """An evaluation was rejected; no partial result exists."""


class InvalidInputShape(EvaluationError):
    message = "Answers must be in array format"


class NoQuestionsForQuiz(EvaluationError):
    """Raised for an empty quiz and for a quiz id that matches nothing alike."""

    message = "No questions are found for this quiz"


class InvalidPayload(QuizServiceError):
    """Author input failed validation before reaching storage."""

    message = "Invalid payload"


class QuizNotFound(QuizServiceError):
    message = "Quiz not found"


class StoreError(QuizServiceError):
    """Storage-level failure; surfaced to clients as a server error."""

    message = "Storage failure"


class InvalidIdentifier(StoreError):
    message = "Malformed identifier"

    def __init__(self, value: object) -> None:
        super().__init__(f"Malformed identifier: {value!r}")
        self.value = value
