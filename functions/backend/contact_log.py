"""
Append-only storage for contact submissions: a JSON-lines file and an
in-memory test implementation.
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


class ContactLog(Protocol):
    """Defines the operations the API needs from the contact log."""

    def append(self, record: dict) -> None:
        ...

    def read_all(self) -> list[dict]:
        ...


@dataclass
class InMemoryContactLog:
    """Test double for the contact log."""

    records: list[dict] = field(default_factory=list)

    def append(self, record: dict) -> None:
        # Round-trip through JSON to mimic what the file log persists.
        self.records.append(json.loads(json.dumps(record, default=str)))

    def read_all(self) -> list[dict]:
        return list(self.records)

    def reset(self) -> None:
        self.records.clear()


@dataclass
class FileContactLog:
    """
    Appends one JSON object per line to a local file.

    Each record is written with a single write call on a file opened in
    append mode, so concurrent appenders never interleave partial lines.
    """

    path: str

    def __post_init__(self):
        self._lock = threading.Lock()

    def append(self, record: dict) -> None:
        line = json.dumps(record, default=str) + "\n"
        with self._lock:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line)

    def read_all(self) -> list[dict]:
        path = Path(self.path)
        if not path.exists():
            return []
        with open(path, "r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
