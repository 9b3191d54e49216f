import json

from pathlib import Path
from typing import Iterator, Tuple, Union


def iter_jsonl(path: Union[str, Path]) -> Iterator[Tuple[int, dict]]:
    """Yield ``(line_number, record)`` pairs, skipping blank lines.

    Raises ``ValueError`` naming the line when a record is not a JSON object.
    """
    with Path(path).open("r", encoding="utf-8") as fh:
        for lineno, line in enumerate(fh, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                raise ValueError(f"line {lineno}: {exc.msg}") from exc
            if not isinstance(record, dict):
                raise ValueError(f"line {lineno}: expected a JSON object")
            yield lineno, record
