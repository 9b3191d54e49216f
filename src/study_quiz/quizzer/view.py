"""Rich console front end for :class:`~study_quiz.quizzer.session.QuizSession`.

The loop renders whatever state the session reports, reads one command, and
forwards it as a session intent. Engine errors are shown to the learner and
the loop carries on; the session itself is never modified directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .bank import QuestionBank
from .errors import QuizError
from .session import QuizSession, Score, SessionState, SessionView

InputProvider = Callable[[], str]
ExitAction = Literal["finished", "quit", "reset"]

_MAX_OPTION_DIGITS = 3

_VERDICT_LABELS = {
    "excellent": ("Excellent work!", "bold green"),
    "good": ("Good job!", "bold yellow"),
    "keep-studying": ("Keep studying.", "bold red"),
}


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input."""

    type: Literal["select", "next", "reset", "quit"]
    option: Optional[int] = None


@dataclass(frozen=True)
class QuizSessionResult:
    """Return value from :func:`run_quiz_session`."""

    exit_action: ExitAction
    score: Optional[Score]
    view: SessionView


def option_label(index: int) -> str:
    return chr(ord("A") + index)


def parse_session_command(raw: Optional[str]) -> Optional[SessionCommand]:
    """Parse one line of input.

    Letters pick options (``a`` is the first), as do 1-based numbers.
    Anything else, non-ASCII input included, yields ``None``.
    """

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    lowered = text.lower()
    if lowered in {"n", "next"}:
        return SessionCommand("next")
    if lowered in {"r", "reset", "back"}:
        return SessionCommand("reset")
    if lowered in {"q", "quit", "exit"}:
        return SessionCommand("quit")
    if not text.isascii():
        return None
    if text.isdigit():
        if len(text) > _MAX_OPTION_DIGITS:
            return None
        return SessionCommand("select", int(text) - 1)
    if len(text) == 1 and text.isalpha():
        return SessionCommand("select", ord(text.upper()) - ord("A"))
    return None


def render_catalog(console: Console, bank: QuestionBank) -> None:
    table = Table(title="Quizzes", box=box.SIMPLE, expand=False)
    table.add_column("Id", style="cyan")
    table.add_column("Topic")
    table.add_column("Questions", justify="right")
    for quiz in bank.list_quizzes():
        table.add_row(quiz.id, quiz.topic, str(quiz.total_questions))
    console.print(table)


def run_quiz_session(
    session: QuizSession,
    quiz_id: str,
    console: Console,
    input_provider: InputProvider,
    *,
    show_progress: bool = True,
) -> QuizSessionResult:
    """Start ``quiz_id`` on ``session`` and drive it from console input."""

    session.start(quiz_id)

    exit_action: ExitAction = "quit"
    while session.state is not SessionState.FINISHED:
        _render_question(console, session.snapshot(), show_progress)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            break
        command = parse_session_command(raw)
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        if command.type == "quit":
            console.print("\n[bold yellow]Ending quiz without finishing.[/]")
            break
        if command.type == "reset":
            session.reset()
            console.print("[bold yellow]Back to topics.[/]")
            exit_action = "reset"
            break
        _apply_command(command, session, console)

    view = session.snapshot()
    score = None
    if session.state is SessionState.FINISHED:
        exit_action = "finished"
        score = session.score()
        _render_summary(console, session, score)
    return QuizSessionResult(exit_action, score, view)


def _apply_command(
    command: SessionCommand, session: QuizSession, console: Console
) -> None:
    try:
        if command.type == "select" and command.option is not None:
            session.select_answer(command.option)
            console.print(
                f"Selected [bold]{option_label(command.option)}[/]."
            )
        elif command.type == "next":
            session.advance()
    except QuizError as exc:
        console.print(f"[red]{exc}[/red]")


def _render_question(
    console: Console, view: SessionView, show_progress: bool
) -> None:
    question = view.question
    if question is None:
        return
    header = Text.assemble(
        (f"{view.topic}  ", "bold magenta"),
        (f"Question {view.question_number}", "bold cyan"),
        (f" / {view.total_questions}", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.prompt, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Option")
    for index, option in enumerate(question.options):
        selected = index == view.pending_answer
        row = Text("• " if selected else "  ")
        row.append(option, style="bold green" if selected else "")
        table.add_row(option_label(index), row)
    console.print(table)

    if show_progress:
        console.print(
            Text(f"Progress {view.progress * 100:.0f}%", style="dim")
        )
    if not view.can_advance:
        advance_hint = "pick an option to continue"
    elif view.is_last_question:
        advance_hint = "n (finish)"
    else:
        advance_hint = "n (next)"
    keys = ", ".join(
        option_label(index) for index in range(len(question.options))
    )
    console.print(
        Text(
            f"Commands: options [{keys}], {advance_hint}, reset, quit",
            style="dim",
        )
    )


def _render_summary(
    console: Console, session: QuizSession, score: Score
) -> None:
    label, style = _VERDICT_LABELS[score.verdict]
    console.print()
    console.print(
        Panel(
            Text.assemble(
                (
                    f"You scored {score.correct} out of {score.total} "
                    "questions\n",
                    "",
                ),
                (f"{score.percentage}%\n", "bold"),
                (label, style),
            ),
            title="Quiz Complete!",
            border_style="magenta",
        )
    )

    table = Table(title="Responses", box=box.SIMPLE, expand=True)
    table.add_column("#", justify="right")
    table.add_column("Question", overflow="fold")
    table.add_column("Your answer")
    table.add_column("Correct answer")
    table.add_column("Result", justify="center")
    for result in session.results():
        question = result.question
        table.add_row(
            str(result.position),
            question.prompt,
            f"{option_label(result.selected)}. {result.selected_text}",
            f"{option_label(question.correct_option_index)}. "
            f"{question.correct_option}",
            "✅" if result.is_correct else "❌",
        )
    console.print(table)
