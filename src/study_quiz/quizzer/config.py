"""Configuration loader for the quizzer command."""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

from study_quiz.core import config as core_config
from study_quiz.core import workspace as workspace_mod

CONFIG_FILENAME = "quizzer.toml"
CONFIG_ENV = "STUDY_QUIZ_CONFIG"
ENV_PREFIX = "STUDY_QUIZ_"

_DEFAULT_LOG_LEVEL = "INFO"


class QuizzerConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizzerConfig:
    """Fully resolved quizzer settings."""

    bank_path: Optional[Path]
    show_progress: bool
    log_level: str
    verbose: bool


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of env and file values."""

    bank_path: Optional[Path] = None
    log_level: Optional[str] = None
    verbose: Optional[bool] = None


@dataclass(frozen=True)
class LoadResult:
    config: QuizzerConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise QuizzerConfigError(str(exc)) from exc

    requested = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )

    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested.exists():
        try:
            core_config.merge_defaults(
                table, core_config.load_toml(requested), source=requested
            )
        except core_config.TomlConfigError as exc:
            raise QuizzerConfigError(str(exc)) from exc
        loaded_path = requested
    elif config_path is not None or _env_string(env_map, "CONFIG"):
        raise QuizzerConfigError(f"Config file not found: {requested}")

    bank_path = _pick_first(
        overrides.bank_path,
        _env_path(env_map, "BANK_PATH"),
        _optional_path(table["bank"]["path"]),
    )
    log_level = _pick_first(
        overrides.log_level,
        _env_string(env_map, "LOG_LEVEL"),
        table["logging"]["level"],
    )
    verbose = _pick_first(overrides.verbose, table["logging"]["verbose"])

    config = QuizzerConfig(
        bank_path=_resolve_bank_path(bank_path, layout),
        show_progress=_require_bool(
            table["session"]["show_progress"], field="session.show_progress"
        ),
        log_level=_require_level(log_level),
        verbose=_require_bool(verbose, field="logging.verbose"),
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def write_config_template(
    layout: workspace_mod.WorkspaceLayout, *, overwrite: bool = False
) -> Path:
    """Write the packaged ``quizzer.toml`` into the workspace config dir."""

    template = (
        resources.files(__package__)
        .joinpath(CONFIG_FILENAME)
        .read_text(encoding="utf-8")
    )
    target = layout.path_for("config") / CONFIG_FILENAME
    try:
        return core_config.write_toml_template(
            target, template=template, overwrite=overwrite
        )
    except core_config.TomlConfigError as exc:
        raise QuizzerConfigError(str(exc)) from exc


def _default_table() -> MutableMapping[str, MutableMapping[str, Any]]:
    return {
        "bank": {"path": ""},
        "session": {"show_progress": True},
        "logging": {"level": _DEFAULT_LOG_LEVEL, "verbose": False},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return Path(config_path).expanduser()
    env_candidate = _env_string(env_map, "CONFIG")
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _resolve_bank_path(
    candidate: Optional[Path], layout: workspace_mod.WorkspaceLayout
) -> Optional[Path]:
    if candidate is None:
        return None
    candidate = candidate.expanduser()
    if not candidate.is_absolute():
        return (layout.home / candidate).resolve()
    return candidate.resolve()


def _optional_path(value: str) -> Optional[Path]:
    raw = value.strip()
    return Path(raw) if raw else None


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise QuizzerConfigError(f"'{field}' must be a boolean.")
    return value


def _require_level(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuizzerConfigError("'logging.level' must be a non-empty string.")
    return value.strip().upper()


def _env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _env_path(env_map: Mapping[str, str], key: str) -> Optional[Path]:
    raw = _env_string(env_map, key)
    return Path(raw) if raw is not None else None


def _pick_first(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
