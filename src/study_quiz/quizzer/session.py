"""Quiz session engine.

:class:`QuizSession` walks one quiz from its first question to a score. The
flow is strictly linear: pick an option (as many times as you like), advance
to commit it, repeat until every question has an answer. Every transition
checks its preconditions before touching any state, so a rejected call
leaves the session exactly as it was.

Each :meth:`QuizSession.start` binds a fresh :class:`QuizAttempt`; earlier
attempts are dropped, never rewound. Adapters render from :meth:`snapshot`
and the query methods and never reach into the attempt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, NamedTuple, Optional, Union

from .bank import QuestionBank
from .errors import (
    InvalidOptionError,
    InvalidQuizError,
    NoAnswerSelectedError,
    QuizError,
    SessionFinishedError,
    SessionNotFinishedError,
    SessionNotStartedError,
)
from .models import Question, Quiz

logger = logging.getLogger(__name__)

EXCELLENT_THRESHOLD = 80
GOOD_THRESHOLD = 60


class SessionState(str, Enum):
    IDLE = "idle"
    ANSWERING = "answering"
    ANSWER_SELECTED = "answer_selected"
    FINISHED = "finished"


class Score(NamedTuple):
    """``(correct, total)`` for a finished attempt."""

    correct: int
    total: int

    @property
    def percentage(self) -> int:
        """Percentage of correct answers, rounded half up."""

        # floor(100 * c / t + 1/2) in integers, so .5 never goes to even.
        return (200 * self.correct + self.total) // (2 * self.total)

    @property
    def verdict(self) -> str:
        percentage = self.percentage
        if percentage >= EXCELLENT_THRESHOLD:
            return "excellent"
        if percentage >= GOOD_THRESHOLD:
            return "good"
        return "keep-studying"


@dataclass(frozen=True)
class AnswerResult:
    """How one recorded answer compares with the question's key."""

    position: int
    question: Question
    selected: int

    @property
    def is_correct(self) -> bool:
        return self.question.is_correct(self.selected)

    @property
    def selected_text(self) -> str:
        return self.question.options[self.selected]


@dataclass
class QuizAttempt:
    """Mutable state of one attempt; owned by a single session."""

    quiz: Quiz
    current_index: int = 0
    pending_answer: Optional[int] = None
    recorded_answers: list[int] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return len(self.recorded_answers) == len(self.quiz.questions)


@dataclass(frozen=True)
class SessionView:
    """Read-only picture of a session for presentation code."""

    state: SessionState
    quiz_id: Optional[str] = None
    topic: Optional[str] = None
    question_number: int = 0
    total_questions: int = 0
    question: Optional[Question] = None
    pending_answer: Optional[int] = None
    recorded_answers: tuple[int, ...] = ()
    progress: float = 0.0

    @property
    def can_advance(self) -> bool:
        return self.state is SessionState.ANSWER_SELECTED

    @property
    def is_last_question(self) -> bool:
        return (
            self.question is not None
            and self.question_number == self.total_questions
        )


class QuizSession:
    """State machine driving a single linear pass over one quiz."""

    def __init__(self, bank: Optional[QuestionBank] = None) -> None:
        self._bank = bank
        self._attempt: Optional[QuizAttempt] = None

    # -- transitions -----------------------------------------------------

    def start(self, quiz: Union[Quiz, str]) -> None:
        """Begin a fresh attempt on ``quiz`` (a :class:`Quiz` or bank id)."""

        target = self._resolve_quiz(quiz)
        if not target.questions:
            self._reject("start", f"Quiz '{target.id}' has no questions.")
            raise InvalidQuizError(f"Quiz '{target.id}' has no questions.")
        self._attempt = QuizAttempt(quiz=target)
        logger.debug(
            "Quiz session started",
            extra={
                "event": "session_started",
                "quiz_id": target.id,
                "questions": len(target.questions),
            },
        )

    def select_answer(self, option_index: int) -> None:
        attempt = self._active_attempt("select_answer")
        question = attempt.quiz.questions[attempt.current_index]
        if (
            isinstance(option_index, bool)
            or not isinstance(option_index, int)
            or not 0 <= option_index < len(question.options)
        ):
            message = (
                f"Option {option_index!r} is not valid for question "
                f"'{question.id}' (expected 0..{len(question.options) - 1})."
            )
            self._reject("select_answer", message)
            raise InvalidOptionError(message)
        attempt.pending_answer = option_index
        logger.debug(
            "Answer selected",
            extra={
                "event": "answer_selected",
                "quiz_id": attempt.quiz.id,
                "question_id": question.id,
                "option": option_index,
            },
        )

    def advance(self) -> None:
        """Commit the pending answer and move on (or finish)."""

        attempt = self._active_attempt("advance")
        if attempt.pending_answer is None:
            message = "Select an answer before advancing."
            self._reject("advance", message)
            raise NoAnswerSelectedError(message)
        question = attempt.quiz.questions[attempt.current_index]
        attempt.recorded_answers.append(attempt.pending_answer)
        attempt.pending_answer = None
        logger.debug(
            "Answer recorded",
            extra={
                "event": "answer_recorded",
                "quiz_id": attempt.quiz.id,
                "question_id": question.id,
                "answered": len(attempt.recorded_answers),
            },
        )
        if attempt.finished:
            score = self._score_for(attempt)
            logger.debug(
                "Quiz session finished",
                extra={
                    "event": "session_finished",
                    "quiz_id": attempt.quiz.id,
                    "correct": score.correct,
                    "total": score.total,
                },
            )
            return
        attempt.current_index += 1

    def reset(self) -> None:
        """Drop the current attempt and return to idle."""

        if self._attempt is not None:
            logger.debug(
                "Quiz session reset",
                extra={
                    "event": "session_reset",
                    "quiz_id": self._attempt.quiz.id,
                },
            )
        self._attempt = None

    # -- queries ---------------------------------------------------------

    @property
    def state(self) -> SessionState:
        attempt = self._attempt
        if attempt is None:
            return SessionState.IDLE
        if attempt.finished:
            return SessionState.FINISHED
        if attempt.pending_answer is not None:
            return SessionState.ANSWER_SELECTED
        return SessionState.ANSWERING

    @property
    def quiz(self) -> Optional[Quiz]:
        return self._attempt.quiz if self._attempt is not None else None

    @property
    def current_index(self) -> int:
        return self._started_attempt("current_index").current_index

    @property
    def pending_answer(self) -> Optional[int]:
        if self._attempt is None:
            return None
        return self._attempt.pending_answer

    @property
    def recorded_answers(self) -> tuple[int, ...]:
        if self._attempt is None:
            return ()
        return tuple(self._attempt.recorded_answers)

    @property
    def finished(self) -> bool:
        return self._attempt is not None and self._attempt.finished

    def current_question(self) -> Question:
        attempt = self._active_attempt("current_question")
        return attempt.quiz.questions[attempt.current_index]

    def progress_fraction(self) -> float:
        attempt = self._started_attempt("progress_fraction")
        if attempt.finished:
            return 1.0
        return (attempt.current_index + 1) / len(attempt.quiz.questions)

    def score(self) -> Score:
        attempt = self._started_attempt("score")
        if not attempt.finished:
            message = (
                f"Quiz '{attempt.quiz.id}' is not finished "
                f"({len(attempt.recorded_answers)}/"
                f"{len(attempt.quiz.questions)} answered)."
            )
            self._reject("score", message)
            raise SessionNotFinishedError(message)
        return self._score_for(attempt)

    def results(self) -> Iterator[AnswerResult]:
        """Yield one :class:`AnswerResult` per question of a finished quiz."""

        attempt = self._started_attempt("results")
        if not attempt.finished:
            raise SessionNotFinishedError(
                f"Quiz '{attempt.quiz.id}' is not finished."
            )
        for position, (question, selected) in enumerate(
            zip(attempt.quiz.questions, attempt.recorded_answers), start=1
        ):
            yield AnswerResult(position, question, selected)

    def snapshot(self) -> SessionView:
        attempt = self._attempt
        state = self.state
        if attempt is None:
            return SessionView(state=state)
        total = len(attempt.quiz.questions)
        question = None
        if state is not SessionState.FINISHED:
            question = attempt.quiz.questions[attempt.current_index]
        return SessionView(
            state=state,
            quiz_id=attempt.quiz.id,
            topic=attempt.quiz.topic,
            question_number=min(attempt.current_index + 1, total),
            total_questions=total,
            question=question,
            pending_answer=attempt.pending_answer,
            recorded_answers=tuple(attempt.recorded_answers),
            progress=self.progress_fraction(),
        )

    # -- helpers ---------------------------------------------------------

    def _resolve_quiz(self, quiz: Union[Quiz, str]) -> Quiz:
        if isinstance(quiz, Quiz):
            return quiz
        if self._bank is None:
            raise QuizError(
                f"Cannot look up quiz '{quiz}': session has no question bank."
            )
        return self._bank.get_quiz(quiz)

    def _started_attempt(self, operation: str) -> QuizAttempt:
        if self._attempt is None:
            message = f"{operation}() needs a started quiz."
            self._reject(operation, message)
            raise SessionNotStartedError(message)
        return self._attempt

    def _active_attempt(self, operation: str) -> QuizAttempt:
        attempt = self._started_attempt(operation)
        if attempt.finished:
            message = f"{operation}() is not available once the quiz is done."
            self._reject(operation, message)
            raise SessionFinishedError(message)
        return attempt

    @staticmethod
    def _score_for(attempt: QuizAttempt) -> Score:
        correct = sum(
            1
            for question, answer in zip(
                attempt.quiz.questions, attempt.recorded_answers
            )
            if question.is_correct(answer)
        )
        return Score(correct=correct, total=len(attempt.quiz.questions))

    def _reject(self, operation: str, reason: str) -> None:
        logger.debug(
            "Rejected %s",
            operation,
            extra={
                "event": "transition_rejected",
                "operation": operation,
                "state": self.state.value,
                "reason": reason,
            },
        )
