from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable, Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import WorkspaceBuilder, make_quiz  # noqa: E402
from study_quiz.quizzer import Quiz  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_workspace(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Point the workspace and config env vars at a per-test directory."""

    root = tmp_path / "study-quiz-data"
    monkeypatch.setenv("STUDY_QUIZ_DATA_HOME", str(root))
    for name in (
        "STUDY_QUIZ_CONFIG",
        "STUDY_QUIZ_BANK_PATH",
        "STUDY_QUIZ_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return root


@pytest.fixture(autouse=True)
def _reset_quizzer_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("study_quiz.quizzer")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def quiz_factory() -> Callable[..., Quiz]:
    return make_quiz


@pytest.fixture
def two_question_quiz() -> Quiz:
    """Q1 (correct=1, two options) and Q2 (correct=0, three options)."""

    return make_quiz(
        [
            (["Alpha", "Beta"], 1),
            (["Red", "Green", "Blue"], 0),
        ],
        quiz_id="pair",
        topic="Pairs",
    )
