"""Read-only catalog of quizzes.

A :class:`QuestionBank` is built once (from the packaged catalog or a JSONL
file) and never changes afterwards. Each JSONL line holds one quiz::

    {"id": "...", "topic": "...",
     "questions": [{"id": "1", "prompt": "...", "options": [...], "correct": 0}]}
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from importlib import resources
from pathlib import Path
from types import MappingProxyType

from .errors import QuestionBankError, QuizError, QuizNotFoundError
from .models import Quiz, build_quiz
from .utils import iter_jsonl

logger = logging.getLogger(__name__)

BUILTIN_CATALOG = "catalog.jsonl"


class QuestionBank:
    """Ordered, immutable lookup of quizzes by id."""

    def __init__(self, quizzes: Iterable[Quiz]) -> None:
        ordered: dict[str, Quiz] = {}
        for quiz in quizzes:
            if quiz.id in ordered:
                raise QuestionBankError(f"Duplicate quiz id '{quiz.id}'.")
            if not quiz.questions:
                raise QuestionBankError(f"Quiz '{quiz.id}' has no questions.")
            ordered[quiz.id] = quiz
        self._quizzes = MappingProxyType(ordered)
        self._order = tuple(ordered.values())

    @classmethod
    def builtin(cls) -> "QuestionBank":
        """Load the catalog shipped with the package."""

        resource = resources.files(__package__).joinpath(BUILTIN_CATALOG)
        with resources.as_file(resource) as path:
            return cls.from_jsonl(path)

    @classmethod
    def from_jsonl(cls, path: Path) -> "QuestionBank":
        """Load quizzes from ``path``, one JSON object per line."""

        path = Path(path)
        quizzes: list[Quiz] = []
        try:
            for lineno, record in iter_jsonl(path):
                quizzes.append(_quiz_from_record(record, path, lineno))
        except FileNotFoundError as exc:
            raise QuestionBankError(f"Question bank not found: {path}") from exc
        except OSError as exc:
            raise QuestionBankError(
                f"Cannot read question bank {path}: {exc.strerror or exc}"
            ) from exc
        except ValueError as exc:
            raise QuestionBankError(f"{path}: {exc}") from exc
        try:
            bank = cls(quizzes)
        except QuestionBankError as exc:
            raise QuestionBankError(f"{path}: {exc}") from exc
        logger.debug(
            "Loaded question bank",
            extra={
                "event": "bank_loaded",
                "path": path,
                "quizzes": len(bank),
            },
        )
        return bank

    def list_quizzes(self) -> tuple[Quiz, ...]:
        return self._order

    def get_quiz(self, quiz_id: str) -> Quiz:
        try:
            return self._quizzes[str(quiz_id)]
        except KeyError:
            raise QuizNotFoundError(quiz_id) from None

    def __contains__(self, quiz_id: object) -> bool:
        return str(quiz_id) in self._quizzes

    def __iter__(self) -> Iterator[Quiz]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)


def _quiz_from_record(record: dict, path: Path, lineno: int) -> Quiz:
    quiz_id = record.get("id")
    if quiz_id is None or not str(quiz_id).strip():
        raise QuestionBankError(f"{path}: line {lineno}: quiz 'id' is missing.")
    questions = record.get("questions")
    if not isinstance(questions, list):
        raise QuestionBankError(
            f"{path}: line {lineno}: quiz '{quiz_id}' needs a questions list."
        )
    if not all(isinstance(item, dict) for item in questions):
        raise QuestionBankError(
            f"{path}: line {lineno}: questions must be JSON objects."
        )
    topic = str(record.get("topic") or quiz_id)
    try:
        return build_quiz(str(quiz_id).strip(), topic, questions)
    except QuizError as exc:
        raise QuestionBankError(f"{path}: line {lineno}: {exc}") from exc
