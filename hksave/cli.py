"""CLI entrypoint for hksave."""

from pathlib import Path

import click

from . import __version__
from .envelope import EnvelopeError
from .saves import Game, SaveDirectoryNotFound, game_names, savefile_path, slot_from_path
from .watcher import DocumentError


def _resolve_target(game_name: str | None, save: int | None, path: Path | None) -> tuple[Path, Game, int]:
    """Work out the save file, game and slot from the positional args or --path."""
    if path is not None:
        if game_name is not None or save is not None:
            raise click.UsageError("GAME and SAVE cannot be combined with --path.")
        try:
            slot = slot_from_path(path)
        except ValueError as e:
            raise click.UsageError(str(e)) from e
        return path, Game.from_path(path), slot

    if game_name is None or save is None:
        raise click.UsageError("GAME and SAVE are required unless --path is given.")

    game = Game.parse(game_name)
    try:
        return savefile_path(game, save), game, save
    except SaveDirectoryNotFound as e:
        raise click.ClickException(str(e)) from e
    except OSError as e:
        raise click.ClickException(f"Couldn't read save directory: {e}") from e


@click.command()
@click.version_option(__version__, prog_name="hksave")
@click.argument(
    "game_name",
    metavar="[GAME]",
    required=False,
    type=click.Choice(game_names(), case_sensitive=False),
)
@click.argument("save", metavar="[SAVE]", required=False, type=click.IntRange(1, 4))
@click.option(
    "--encode",
    is_flag=True,
    help=(
        "Encode GAME-SAVE.json into GAME-SAVE.dat instead of watching. The file is not "
        "placed for you: rename it to userN.dat and copy it into the save folder yourself."
    ),
)
@click.option(
    "--path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to save file (default: auto-detect from GAME and SAVE)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: ./hksave.toml if present)",
)
def cli(
    game_name: str | None,
    save: int | None,
    encode: bool,
    path: Path | None,
    config_path: Path | None,
) -> None:
    """hksave - decode, watch and re-encode Hollow Knight / Silksong saves.

    GAME is hollow-knight (hk) or silksong (ss), SAVE is the slot (1-4).

    By default the save is decoded to GAME-SAVE.json and watched: every time
    the game writes it, the differences are printed and appended to
    GAME-SAVE.log.

    Examples:

        hksave hk 1

        hksave --path ~/saves/user2.dat

        hksave silksong 3 --encode
    """
    from .config import load_settings

    try:
        settings = load_settings(config_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    save_path, game, slot = _resolve_target(game_name, save, path)

    if encode:
        from .commands.encode_cmd import run_encode

        try:
            run_encode(game, slot, settings)
        except FileNotFoundError as e:
            raise click.ClickException(f"Nothing to encode: {e.filename} does not exist") from e
        return

    from .commands.watch_cmd import run_watch

    try:
        run_watch(save_path, game, slot, settings)
    except (EnvelopeError, DocumentError) as e:
        raise click.ClickException(f"{save_path}: {type(e).__name__}: {e}") from e


def main() -> None:
    cli()
