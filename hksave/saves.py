"""Save slot discovery and naming for Hollow Knight and Silksong."""

from __future__ import annotations

import os
import re
import sys
from enum import Enum
from pathlib import Path
from typing import Mapping


class SaveDirectoryNotFound(LookupError):
    """The platform save directory cannot be determined."""


class Game(str, Enum):
    """Supported titles."""

    HOLLOW_KNIGHT = "hollow-knight"
    SILKSONG = "silksong"

    @classmethod
    def parse(cls, name: str) -> "Game":
        """Parse a game name or alias (hk, ss), case-insensitive."""
        key = name.strip().lower()
        for game in cls:
            if key == game.value or key in GAME_ALIASES[game]:
                return game
        raise ValueError(f"Unknown game: {name}")

    @classmethod
    def from_path(cls, path: Path) -> "Game":
        """Infer the game from a save file path."""
        if any("silksong" in part.lower() for part in path.parts):
            return cls.SILKSONG
        return cls.HOLLOW_KNIGHT


GAME_ALIASES: dict[Game, tuple[str, ...]] = {
    Game.HOLLOW_KNIGHT: ("hk",),
    Game.SILKSONG: ("ss",),
}

# Folder names under the Team Cherry directory (Windows, Linux)
_TEAM_CHERRY_DIRS = {
    Game.HOLLOW_KNIGHT: "Hollow Knight",
    Game.SILKSONG: "Hollow Knight Silksong",
}

# Unity application support folders on macOS
_MACOS_DIRS = {
    Game.HOLLOW_KNIGHT: "unity.Team Cherry.Hollow Knight",
    Game.SILKSONG: "unity.Team-Cherry.Silksong",
}

_SLOT_RE = re.compile(r"^user(\d+)\.dat$")


def game_names() -> list[str]:
    """All accepted spellings, for CLI choices."""
    names: list[str] = []
    for game in Game:
        names.append(game.value)
        names.extend(GAME_ALIASES[game])
    return names


def save_directory(
    game: Game,
    platform: str | None = None,
    env: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> Path:
    """
    Return the directory the game writes its saves to.

    Args:
        game: Which title
        platform: `sys.platform` value (defaults to the running platform)
        env: Environment variables (defaults to `os.environ`)
        home: Home directory (defaults to `Path.home()`)
    """
    platform = sys.platform if platform is None else platform
    env = os.environ if env is None else env

    if platform.startswith("win"):
        appdata = env.get("APPDATA")
        if not appdata:
            raise SaveDirectoryNotFound(
                "Couldn't get savefile directory on your system. "
                "Please specify the save file manually using the --path flag."
            )
        # Unity saves live in LocalLow, next to Roaming
        return Path(appdata).parent / "LocalLow" / "Team Cherry" / _TEAM_CHERRY_DIRS[game]

    home = Path.home() if home is None else home

    if platform == "darwin":
        return home / "Library" / "Application Support" / _MACOS_DIRS[game]

    config_home = env.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else home / ".config"
    return base / "unity3d" / "Team Cherry" / _TEAM_CHERRY_DIRS[game]


def find_steam_user_dir(directory: Path) -> Path | None:
    """
    Return the Steam user-id sub-folder of a save directory, if any.

    Steam builds keep saves in a folder named after the numeric user id;
    non-Steam builds write directly into the save directory.
    """
    for entry in sorted(directory.iterdir()):
        if entry.name.isascii() and entry.name.isdigit() and entry.is_dir():
            return entry
    return None


def savefile_path(
    game: Game,
    slot: int,
    platform: str | None = None,
    env: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> Path:
    """Locate `user{slot}.dat` for a game, preferring the Steam sub-folder."""
    directory = save_directory(game, platform=platform, env=env, home=home)
    file_name = f"user{slot}.dat"

    steam_dir = find_steam_user_dir(directory)
    if steam_dir is not None:
        return steam_dir / file_name
    return directory / file_name


def slot_from_path(path: Path) -> int:
    """Parse the slot number from a `userN.dat` file name."""
    match = _SLOT_RE.match(path.name)
    if not match:
        raise ValueError(f"Couldn't parse save number from '{path.name}' (expected userN.dat)")
    return int(match.group(1))


def output_stem(game: Game, slot: int) -> str:
    """Base name shared by the mirror, log and encoded files of a slot."""
    return f"{game.value}-{slot}"
