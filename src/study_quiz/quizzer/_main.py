import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.text import Text

from ..core.logging import configure_logger
from .bank import QuestionBank
from .config import (
    ConfigOverrides,
    LoadResult,
    QuizzerConfigError,
    load_config,
    write_config_template,
)
from .errors import QuestionBankError, QuizNotFoundError
from .session import QuizSession
from .view import (
    InputProvider,
    QuizSessionResult,
    render_catalog,
    run_quiz_session,
)


def _load(args: argparse.Namespace) -> LoadResult:
    overrides = ConfigOverrides(
        bank_path=getattr(args, "bank", None),
        log_level=getattr(args, "log_level", None),
        verbose=True if getattr(args, "verbose", False) else None,
    )
    return load_config(
        config_path=getattr(args, "config", None),
        overrides=overrides,
        workspace_path=getattr(args, "workspace", None),
    )


def _open_bank(bank_path: Optional[Path]) -> QuestionBank:
    if bank_path is None:
        return QuestionBank.builtin()
    return QuestionBank.from_jsonl(bank_path)


def _cmd_list(args: argparse.Namespace, console: Console) -> int:
    try:
        loaded = _load(args)
        bank = _open_bank(loaded.config.bank_path)
    except (QuizzerConfigError, QuestionBankError) as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return 2
    render_catalog(console, bank)
    return 0


def _cmd_start(
    args: argparse.Namespace,
    console: Console,
    input_provider: InputProvider,
) -> int:
    try:
        loaded = _load(args)
        bank = _open_bank(loaded.config.bank_path)
    except (QuizzerConfigError, QuestionBankError) as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return 2
    config = loaded.config
    logger, log_path = configure_logger(
        "study_quiz.quizzer",
        log_dir=loaded.layout.path_for("logs"),
        level=config.log_level,
        verbose=config.verbose,
    )
    logger.debug(
        "quizzer start invoked",
        extra={"quiz_id": args.quiz_id, "config_path": loaded.config_path},
    )

    session = QuizSession(bank)
    quiz_id = args.quiz_id
    while True:
        picked = quiz_id is None
        if picked:
            quiz_id = _pick_quiz(console, bank, input_provider)
            if quiz_id is None:
                break
        try:
            result = run_quiz_session(
                session,
                quiz_id,
                console,
                input_provider,
                show_progress=config.show_progress,
            )
        except QuizNotFoundError as exc:
            console.print(f"[red]Error: {exc}[/red]")
            if not picked:
                render_catalog(console, bank)
                return 2
            quiz_id = None
            continue
        _log_session_end(logger, quiz_id, result)
        if result.exit_action == "quit":
            break
        quiz_id = None

    if config.verbose:
        console.print(f"[dim]Log file: {log_path}[/dim]")
    return 0


def _pick_quiz(
    console: Console, bank: QuestionBank, input_provider: InputProvider
) -> Optional[str]:
    """Show the catalog and read a quiz id; ``None`` means stop."""

    while True:
        console.print()
        render_catalog(console, bank)
        console.print(
            Text("Type a quiz id to start, or q to quit.", style="dim")
        )
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            return None
        choice = raw.strip()
        if choice.lower() in {"q", "quit", "exit"}:
            return None
        if choice:
            return choice


def _log_session_end(
    logger: logging.Logger, quiz_id: str, result: QuizSessionResult
) -> None:
    extra = {"quiz_id": quiz_id, "exit_action": result.exit_action}
    if result.score is not None:
        extra.update(
            correct=result.score.correct,
            total=result.score.total,
            percentage=result.score.percentage,
        )
    logger.info("Quiz session ended", extra=extra)


def _cmd_config_init(args: argparse.Namespace, console: Console) -> int:
    try:
        loaded = _load(args)
        path = write_config_template(loaded.layout, overwrite=args.force)
    except QuizzerConfigError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return 2
    console.print(f"Wrote config template -> {path}")
    return 0


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", type=Path, help="Path to a quizzer.toml config file"
    )
    parser.add_argument(
        "--workspace", type=Path, help="Override the workspace root"
    )
    parser.add_argument(
        "--bank", type=Path, help="JSONL question bank to use instead"
    )


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="study quizzer",
        description="Take multiple-choice topic quizzes in the terminal",
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp_list = sub.add_parser("list", help="List available quizzes")
    _add_common(sp_list)

    sp_start = sub.add_parser(
        "start",
        help="Start a quiz session, returning to the catalog between quizzes",
    )
    sp_start.add_argument(
        "quiz_id",
        nargs="?",
        help="Quiz to open first; omit to pick from the catalog",
    )
    _add_common(sp_start)
    sp_start.add_argument("--log-level", help="Log level for quizzer.log")
    sp_start.add_argument(
        "--verbose",
        action="store_true",
        help="Echo debug logs to stderr",
    )

    sp_cfg = sub.add_parser("config", help="Configuration helpers")
    cfg_sub = sp_cfg.add_subparsers(dest="action", required=True)
    sp_cfg_init = cfg_sub.add_parser(
        "init", help="Write the quizzer.toml template to the workspace"
    )
    sp_cfg_init.add_argument(
        "--workspace", type=Path, help="Override the workspace root"
    )
    sp_cfg_init.add_argument(
        "--force", action="store_true", help="Overwrite an existing file"
    )
    return p


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
    input_provider: Optional[Callable[[], str]] = None,
) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    console = console or Console()
    if args.command == "list":
        return _cmd_list(args, console)
    if args.command == "start":
        provider = input_provider or (lambda: console.input("> "))
        return _cmd_start(args, console, provider)
    if args.command == "config" and args.action == "init":
        return _cmd_config_init(args, console)
    parser.print_help(sys.stderr)  # pragma: no cover - argparse guards this
    return 2
