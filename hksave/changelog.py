"""
Append-only change history for a watched save slot.

Each detected batch of changes is written as a plain-text block:

    [2026-10-17 12:00:00+02:00] Change #3 detected:
      .playerData.geo: 120 -> 135
    <blank line>

The file is opened once in append mode and kept open for the life of the
watch loop. It is never truncated, so restarting the watcher continues the
existing history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import TextIO

from .diff import ChangeRecord, format_plain


@dataclass
class ChangeBatch:
    """All records detected for one write of the save file."""

    number: int
    timestamp: datetime
    records: list[ChangeRecord] = field(default_factory=list)

    @property
    def heading(self) -> str:
        return f"[{format_timestamp(self.timestamp)}] Change #{self.number} detected:"

    def plain_lines(self) -> list[str]:
        """Heading, indented plain records and the trailing blank line."""
        return [self.heading, *(f"  {format_plain(r)}" for r in self.records), ""]


def format_timestamp(timestamp: datetime) -> str:
    return timestamp.isoformat(sep=" ", timespec="seconds")


class ChangeLog:
    """Append-only change log file handle."""

    def __init__(self, path: Path):
        self.path = path
        self._handle: TextIO | None = None

    def open(self) -> "ChangeLog":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self.path.open("a", encoding="utf-8")
        return self

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "ChangeLog":
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def write_batch(self, batch: ChangeBatch) -> None:
        """Append a batch and flush it to disk."""
        if self._handle is None:
            raise RuntimeError(f"change log {self.path} is not open")

        self._handle.write("\n".join(batch.plain_lines()) + "\n")
        self._handle.flush()
