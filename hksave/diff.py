"""
Structural diff between two decoded save documents.

The comparison walks both JSON trees in a fixed order so that the same pair
of documents always yields the same list of records:

- mappings: removed keys, then added keys, then common keys (old-side order)
- sequences: index by index
- everything else: a single MODIFIED record when the values differ

Each record is rendered two ways, as plain text for the change log and as a
styled `rich.text.Text` for the console. Both renderings share one text.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from rich.text import Text


class ChangeKind(str, Enum):
    """Classification of a single change."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class Sentinel:
    """Placeholder rendered in place of a value that does not exist."""

    def __init__(self, label: str):
        self.label = label

    def __repr__(self) -> str:
        return f"Sentinel({self.label!r})"


# Missing side of a mapping key, or the old side of an appended list item.
NULL = Sentinel("null")
# New side of a list item that was truncated away.
REMOVED = Sentinel("removed")


@dataclass(frozen=True)
class ChangeRecord:
    """One difference between the baseline and the new document."""

    path: str
    old: Any
    new: Any
    kind: ChangeKind


def _json_equal(old: Any, new: Any) -> bool:
    # No coercion: true != 1 and 1 != 1.0, matching JSON value equality.
    return type(old) is type(new) and old == new


def compare(old: Any, new: Any, path: str = "") -> list[ChangeRecord]:
    """
    Compare two decoded documents and return the ordered list of changes.

    Args:
        old: Baseline document
        new: Newly decoded document
        path: Path prefix for emitted records. Keys are always joined with a
            leading ".", so a root key `a` is reported as `.a`.

    Returns:
        Change records in traversal order (empty when the documents are equal)
    """
    changes: list[ChangeRecord] = []
    _compare(old, new, path, changes)
    return changes


def _compare(old: Any, new: Any, path: str, changes: list[ChangeRecord]) -> None:
    if isinstance(old, dict) and isinstance(new, dict):
        for key, value in old.items():
            if key not in new:
                changes.append(ChangeRecord(f"{path}.{key}", value, NULL, ChangeKind.REMOVED))

        for key, value in new.items():
            if key not in old:
                changes.append(ChangeRecord(f"{path}.{key}", NULL, value, ChangeKind.ADDED))

        for key, value in old.items():
            if key in new:
                _compare(value, new[key], f"{path}.{key}", changes)

    elif isinstance(old, list) and isinstance(new, list):
        for i in range(max(len(old), len(new))):
            item_path = f"{path}[{i}]"
            if i < len(old) and i < len(new):
                _compare(old[i], new[i], item_path, changes)
            elif i < len(old):
                changes.append(ChangeRecord(item_path, old[i], REMOVED, ChangeKind.REMOVED))
            else:
                changes.append(ChangeRecord(item_path, NULL, new[i], ChangeKind.ADDED))

    elif not _json_equal(old, new):
        changes.append(ChangeRecord(path, old, new, ChangeKind.MODIFIED))


def render_value(value: Any) -> str:
    """Render a record value as compact JSON, or a sentinel as its bare label."""
    if isinstance(value, Sentinel):
        return value.label
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def format_plain(record: ChangeRecord) -> str:
    """Format a record for the durable change log."""
    return f"{record.path}: {render_value(record.old)} -> {render_value(record.new)}"


def format_rich(record: ChangeRecord) -> Text:
    """Format a record for the console. `.plain` always equals `format_plain`."""
    new_style = "red" if isinstance(record.new, Sentinel) else "green"
    # A key dropped from a mapping keeps its old value unstyled.
    old_style = "" if record.new is NULL else "red"
    return Text.assemble(
        record.path,
        ": ",
        (render_value(record.old), old_style),
        " -> ",
        (render_value(record.new), new_style),
    )
