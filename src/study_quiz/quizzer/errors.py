"""Exceptions raised by the quiz bank and session engine.

Every error here reports caller misuse of the engine (a violated
precondition) or a malformed catalog. None of them is transient, so nothing
in the package retries on them.
"""

from __future__ import annotations

__all__ = [
    "QuizError",
    "InvalidQuestionError",
    "InvalidQuizError",
    "InvalidOptionError",
    "NoAnswerSelectedError",
    "SessionFinishedError",
    "SessionNotFinishedError",
    "SessionNotStartedError",
    "QuizNotFoundError",
    "QuestionBankError",
]


class QuizError(RuntimeError):
    """Base class for quiz bank and session errors."""


class InvalidQuestionError(QuizError):
    """Raised when a question has too few options or a bad correct index."""


class InvalidQuizError(QuizError):
    """Raised when a quiz cannot be attempted (no questions, duplicate ids)."""


class InvalidOptionError(QuizError):
    """Raised when an option index falls outside the current question."""


class NoAnswerSelectedError(QuizError):
    """Raised when advancing without a pending answer."""


class SessionFinishedError(QuizError):
    """Raised when a question query or transition hits a finished session."""


class SessionNotFinishedError(QuizError):
    """Raised when the score is requested before the last answer."""


class SessionNotStartedError(QuizError):
    """Raised when a session without a bound quiz is queried or driven."""


class QuizNotFoundError(QuizError, KeyError):
    """Raised when the bank has no quiz with the requested id."""

    def __init__(self, quiz_id: object) -> None:
        super().__init__(f"Unknown quiz '{quiz_id}'.")
        self.quiz_id = quiz_id

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message.
        return str(self.args[0])


class QuestionBankError(QuizError):
    """Raised when a catalog file cannot be read or validated."""
