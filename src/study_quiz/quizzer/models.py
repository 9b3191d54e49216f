"""Immutable quiz and question records."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .errors import InvalidQuestionError, InvalidQuizError

MIN_OPTIONS = 2


@dataclass(frozen=True)
class Question:
    """A multiple-choice question with exactly one correct option."""

    id: str
    prompt: str
    options: tuple[str, ...]
    correct_option_index: int

    def __post_init__(self) -> None:
        options = tuple(str(option) for option in self.options)
        object.__setattr__(self, "options", options)
        if len(options) < MIN_OPTIONS:
            raise InvalidQuestionError(
                f"Question '{self.id}' needs at least {MIN_OPTIONS} options, "
                f"found {len(options)}."
            )
        index = self.correct_option_index
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidQuestionError(
                f"Question '{self.id}' correct option must be an integer."
            )
        if not 0 <= index < len(options):
            raise InvalidQuestionError(
                f"Question '{self.id}' correct option {index} is outside "
                f"0..{len(options) - 1}."
            )

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_option_index]

    def is_correct(self, option_index: int) -> bool:
        return option_index == self.correct_option_index


@dataclass(frozen=True)
class Quiz:
    """An ordered set of questions on one topic.

    ``questions`` may be empty here; the session refuses to start such a quiz
    and the bank refuses to load one.
    """

    id: str
    topic: str
    questions: tuple[Question, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        questions = tuple(self.questions)
        object.__setattr__(self, "questions", questions)
        seen: set[str] = set()
        for question in questions:
            if question.id in seen:
                raise InvalidQuizError(
                    f"Quiz '{self.id}' repeats question id '{question.id}'."
                )
            seen.add(question.id)

    @property
    def total_questions(self) -> int:
        return len(self.questions)


def build_quiz(
    quiz_id: str, topic: str, questions: Iterable[dict[str, object]]
) -> Quiz:
    """Build a :class:`Quiz` from plain mappings.

    Each mapping needs ``prompt``, ``options`` and ``correct``; ``id``
    defaults to the 1-based position.
    """

    records = []
    for position, data in enumerate(questions, start=1):
        options = data.get("options")
        if not isinstance(options, (list, tuple)):
            raise InvalidQuestionError(
                f"Question {position} of quiz '{quiz_id}' needs an options "
                "list."
            )
        records.append(
            Question(
                id=str(data.get("id", position)),
                prompt=str(data.get("prompt", "")).strip(),
                options=tuple(options),
                correct_option_index=data.get("correct"),  # type: ignore[arg-type]
            )
        )
    return Quiz(id=str(quiz_id), topic=str(topic), questions=tuple(records))
