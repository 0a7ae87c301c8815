"""Input/output utilities for answer files and JSONL reports."""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any


def load_answers(path: Path | str) -> Any:
    """Load answers from a JSON file.

    Accepts either a bare list of `{id, score}` entries or an object with an
    `answers` key, as posted to the HTTP service. Shape checks are left to
    the scoring engine.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict) and "answers" in data:
        return data["answers"]
    return data


def write_jsonl(path: Path | str, records: Iterable[dict[str, Any]]) -> int:
    """Write records to a JSONL file.

    Returns:
        Number of records written.
    """
    count = 0
    with open(path, "w", encoding="utf-8") as f:
        for record in records:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")
            count += 1
    return count
