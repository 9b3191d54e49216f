"""TOML configuration helpers shared by study-quiz commands."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Mapping, MutableMapping, NoReturn, Optional

__all__ = [
    "TomlConfigError",
    "load_toml",
    "merge_defaults",
    "write_toml_template",
]


class TomlConfigError(RuntimeError):
    """Raised when TOML config IO or validation fails."""


def load_toml(path: Path) -> Mapping[str, Any]:
    """Load a TOML document from ``path``.

    IO and parse failures surface as :class:`TomlConfigError` so callers can
    re-raise them as their own configuration errors.
    """

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    except OSError as exc:
        raise TomlConfigError(
            f"Cannot read config file {path}: {exc.strerror or exc}"
        ) from exc
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(
            f"Failed to parse config TOML {path}: {exc}"
        ) from exc


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
    source: Optional[Path] = None,
) -> None:
    """Recursively merge ``override`` into ``base``.

    ``base`` doubles as the schema: keys it lacks are rejected, tables must
    stay tables, and scalars must keep the type of their default (``bool``
    and ``int`` are not interchangeable). Errors name the dotted key and, when
    given, the ``source`` file the override came from.
    """

    for key, value in override.items():
        dotted = f"{path}{key}"
        if key not in base:
            _fail(f"Unknown configuration key '{dotted}'.", source)
        base_value = base[key]
        if isinstance(base_value, MutableMapping):
            if not isinstance(value, Mapping):
                _fail(
                    "Expected table for '{0}', found {1}.".format(
                        dotted,
                        type(value).__name__,
                    ),
                    source,
                )
            merge_defaults(
                base_value, value, path=f"{dotted}.", source=source
            )
            continue
        if base_value is not None and type(value) is not type(base_value):
            _fail(
                "Expected {0} for '{1}', found {2}.".format(
                    type(base_value).__name__,
                    dotted,
                    type(value).__name__,
                ),
                source,
            )
        base[key] = value


def _fail(message: str, source: Optional[Path]) -> NoReturn:
    if source is not None:
        message = f"{message} ({source})"
    raise TomlConfigError(message)


def write_toml_template(
    path: Path,
    *,
    template: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write ``template`` to ``path`` unless it exists and ``overwrite`` is off.

    New files are owner-only (``0o600``) unless ``mode`` says otherwise.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {path}")
    path.write_text(template, encoding="utf-8")
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path
