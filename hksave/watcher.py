"""
Polling change tracker for a single save file.

Each poll is one pass through the tracker's states:

    CHECK    stat the save; unchanged mtime ends the pass
    DECODE   read and decode the envelope (codec errors are fatal)
    COMPARE  diff the baseline against the new document, report changes
    PERSIST  overwrite the mirror file, advance baseline and mtime
    MISSING  save absent; forget the mtime so its return is always a change

`run_watch_loop` sleeps between polls (IDLE) and never returns on its own.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from rich.console import Console

from . import envelope
from .changelog import ChangeBatch, ChangeLog
from .diff import compare, format_rich

DEFAULT_POLL_INTERVAL = 1.0


class DocumentError(ValueError):
    """Decoded plaintext is not a JSON document."""


class PollOutcome(str, Enum):
    """What a single poll did."""

    UNCHANGED = "unchanged"
    MISSING = "missing"
    DECODED = "decoded"  # persisted, no differences reported
    CHANGED = "changed"  # persisted and reported a change batch


@dataclass
class WatchState:
    last_modified: int | None = None  # st_mtime_ns
    change_counter: int = 0
    missing: bool = False  # absence already reported


def local_now() -> datetime:
    """Current local time with offset, falling back to UTC."""
    try:
        return datetime.now().astimezone()
    except (OSError, OverflowError, ValueError):
        return datetime.now(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _reject_constant(token: str) -> Any:
    raise DocumentError(f"decoded save contains non-JSON constant {token}")


def _loads(text: str | bytes) -> Any:
    # NaN and Infinity are Python extensions, not JSON.
    return json.loads(text, parse_constant=_reject_constant)


def pretty_document(plaintext: bytes) -> str:
    """Parse decoded plaintext and return it as indented JSON."""
    try:
        document = _loads(plaintext)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DocumentError(f"decoded save is not valid JSON: {e}") from e
    try:
        return json.dumps(document, indent=2, ensure_ascii=False, allow_nan=False)
    except ValueError as e:
        # Out-of-range numbers such as 1e999 parse to inf.
        raise DocumentError(f"decoded save is not valid JSON: {e}") from e


def _parse_baseline(text: str | None) -> tuple[bool, Any]:
    if text is None:
        return False, None
    # An empty baseline (first run) compares as an empty mapping.
    if not text.strip():
        return True, {}
    try:
        return True, _loads(text)
    except (json.JSONDecodeError, DocumentError):
        return False, None


class ChangeTracker:
    """
    Tracks semantic changes to one save file.

    The baseline is the text last written to the mirror file. It is loaded
    from disk on construction so a restarted tracker picks up where the
    previous one stopped.
    """

    def __init__(
        self,
        save_path: Path,
        mirror_path: Path,
        change_log: ChangeLog,
        console: Console,
        clock: Callable[[], datetime] = local_now,
    ):
        self.save_path = save_path
        self.mirror_path = mirror_path
        self.change_log = change_log
        self.console = console
        self.clock = clock
        self.state = WatchState()

        # None marks a mirror that cannot be read as text; the first diff is skipped.
        self.baseline: str | None
        try:
            self.baseline = mirror_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self.baseline = ""
        except UnicodeDecodeError:
            self.baseline = None

    def poll(self) -> PollOutcome:
        """Run one CHECK pass and whatever it leads to."""
        try:
            modified = self.save_path.stat().st_mtime_ns
        except FileNotFoundError:
            return self._missing()

        self.state.missing = False
        if modified == self.state.last_modified:
            return PollOutcome.UNCHANGED

        try:
            raw = self.save_path.read_bytes()
        except FileNotFoundError:
            return self._missing()

        text = pretty_document(envelope.decode(raw))
        changed = self._compare(text)
        self._persist(text, modified)
        return PollOutcome.CHANGED if changed else PollOutcome.DECODED

    def _missing(self) -> PollOutcome:
        self.state.last_modified = None
        # Once per disappearance, not on every poll.
        if not self.state.missing:
            self.console.print("File doesn't exist (yet)", style="dim")
        self.state.missing = True
        return PollOutcome.MISSING

    def _compare(self, text: str) -> bool:
        ok, old = _parse_baseline(self.baseline)
        if not ok:
            return False

        changes = compare(old, _loads(text))
        if not changes:
            return False

        self.state.change_counter += 1
        batch = ChangeBatch(
            number=self.state.change_counter,
            timestamp=self.clock(),
            records=changes,
        )

        self.console.print(batch.heading, markup=False, highlight=False, soft_wrap=True)
        for record in changes:
            self.console.print("  ", format_rich(record), sep="", highlight=False, soft_wrap=True)
        self.console.print()

        self.change_log.write_batch(batch)
        return True

    def _persist(self, text: str, modified: int) -> None:
        self.mirror_path.write_text(text, encoding="utf-8")
        self.baseline = text
        self.state.last_modified = modified


def run_watch_loop(
    tracker: ChangeTracker,
    interval: float = DEFAULT_POLL_INTERVAL,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Poll forever, sleeping `interval` seconds between passes.

    Codec and document errors propagate out of the loop, as does any I/O
    error other than the save file being absent.
    """
    while True:
        tracker.poll()
        sleep(interval)
