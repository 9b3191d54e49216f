"""Shared testing fixtures for the study_quiz test suite."""

from .quizzes import make_quiz, quiz_record  # noqa: F401
from .workspace import WorkspaceBuilder  # noqa: F401

__all__ = [
    "WorkspaceBuilder",
    "make_quiz",
    "quiz_record",
]
