"""Filesystem helpers shared by tests."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Union


@dataclass
class WorkspaceBuilder:
    """Helper bound to a tmp directory for writing banks and configs."""

    root: Path

    def write(self, relative: Union[str, Path], content: str) -> Path:
        path = self.root / Path(relative)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def write_jsonl(
        self, relative: Union[str, Path], records: Iterable[object]
    ) -> Path:
        lines = [json.dumps(record, ensure_ascii=False) for record in records]
        return self.write(relative, "\n".join(lines) + "\n")
