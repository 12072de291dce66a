"""Encode command - turn an edited mirror document back into a save file."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from .. import envelope
from ..config import Settings
from ..saves import Game, output_stem


def run_encode(
    game: Game,
    slot: int,
    settings: Settings,
    *,
    console: Console | None = None,
) -> Path:
    """
    Encode `{game}-{slot}.json` into `{game}-{slot}.dat`.

    The encoded file is written next to the mirror, never into the game's
    save directory; placing it there is left to the user.

    Raises:
        FileNotFoundError: if the mirror document does not exist
    """
    console = console or Console()
    stem = output_stem(game, slot)
    source = settings.output_dir / f"{stem}.json"
    target = settings.output_dir / f"{stem}.dat"

    target.write_bytes(envelope.encode(source.read_bytes()))

    console.print(f"Save file {target} encoded!", markup=False, highlight=False, soft_wrap=True)
    return target
