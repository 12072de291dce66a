"""Watch command - mirror a save slot and log every change to it."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from ..changelog import ChangeLog
from ..config import Settings
from ..saves import Game, output_stem
from ..watcher import ChangeTracker, local_now, run_watch_loop, utc_now


def run_watch(
    save_path: Path,
    game: Game,
    slot: int,
    settings: Settings,
    *,
    console: Console | None = None,
) -> int:
    """
    Watch a save file until interrupted (Ctrl+C).

    The decoded save is mirrored to `{game}-{slot}.json` and every change
    batch is appended to `{game}-{slot}.log` in the output directory.

    Returns the number of change batches detected in this session.
    """
    console = console or Console()
    stem = output_stem(game, slot)
    mirror_path = settings.output_dir / f"{stem}.json"
    log_path = settings.output_dir / f"{stem}.log"

    console.print(f"Using save file {save_path}", markup=False, highlight=False, soft_wrap=True)

    with ChangeLog(log_path) as change_log:
        tracker = ChangeTracker(
            save_path=save_path,
            mirror_path=mirror_path,
            change_log=change_log,
            console=console,
            clock=utc_now if settings.utc_timestamps else local_now,
        )
        try:
            run_watch_loop(tracker, interval=settings.poll_interval)
        except KeyboardInterrupt:
            console.print()
            console.print(
                f"[bold]Stopped.[/bold] {tracker.state.change_counter} change batches logged."
            )

    return tracker.state.change_counter
