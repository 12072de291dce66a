"""Pytest configuration and fixtures."""

from __future__ import annotations

import json
from io import StringIO
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

from hksave import envelope


def write_save(path: Path, document: Any) -> bytes:
    """Encode a document and write it as a save file."""
    raw = envelope.encode(json.dumps(document, separators=(",", ":")).encode("utf-8"))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(raw)
    return raw


@pytest.fixture
def sample_document() -> dict[str, Any]:
    """A trimmed-down save document."""
    return {
        "playerData": {
            "version": "1.5.78.11833",
            "health": 5,
            "geo": 120,
            "hasDash": False,
            "charms": [1, 2, 3],
        },
        "sceneData": {"persistentBoolItems": []},
    }


@pytest.fixture
def console() -> Console:
    """Console writing to an in-memory buffer, without colours."""
    return Console(file=StringIO(), width=200, color_system=None)


def console_output(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]
