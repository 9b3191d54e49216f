from ._main import build_arg_parser, main
from .bank import QuestionBank
from .errors import (
    InvalidOptionError,
    InvalidQuestionError,
    InvalidQuizError,
    NoAnswerSelectedError,
    QuestionBankError,
    QuizError,
    QuizNotFoundError,
    SessionFinishedError,
    SessionNotFinishedError,
    SessionNotStartedError,
)
from .models import Question, Quiz, build_quiz
from .session import (
    AnswerResult,
    QuizSession,
    Score,
    SessionState,
    SessionView,
)
from .view import QuizSessionResult, parse_session_command, run_quiz_session

__all__ = [
    "build_arg_parser",
    "main",
    "QuestionBank",
    "Question",
    "Quiz",
    "build_quiz",
    "QuizSession",
    "SessionState",
    "SessionView",
    "Score",
    "AnswerResult",
    "run_quiz_session",
    "parse_session_command",
    "QuizSessionResult",
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
