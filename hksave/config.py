"""
Settings for hksave, loaded from TOML.

Looked up from an explicit --config file, or `hksave.toml` in the working
directory. All keys live under an `[hksave]` table:

    [hksave]
    output_dir = "saves"
    poll_interval = 1.0
    utc_timestamps = false
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .watcher import DEFAULT_POLL_INTERVAL

CONFIG_FILENAME = "hksave.toml"


@dataclass(frozen=True)
class Settings:
    output_dir: Path = Path(".")
    poll_interval: float = DEFAULT_POLL_INTERVAL
    utc_timestamps: bool = False


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def parse_settings(data: dict[str, Any], base_dir: Path) -> Settings:
    """Build settings from a parsed TOML document. Relative paths resolve against `base_dir`."""
    table = _coerce_dict(data.get("hksave"))

    output_dir = table.get("output_dir", ".")
    if not isinstance(output_dir, str) or not output_dir.strip():
        raise ValueError("hksave.output_dir must be a non-empty string")

    poll_interval = table.get("poll_interval", DEFAULT_POLL_INTERVAL)
    if isinstance(poll_interval, bool) or not isinstance(poll_interval, (int, float)):
        raise ValueError("hksave.poll_interval must be a number")
    if poll_interval <= 0:
        raise ValueError("hksave.poll_interval must be positive")

    utc_timestamps = table.get("utc_timestamps", False)
    if not isinstance(utc_timestamps, bool):
        raise ValueError("hksave.utc_timestamps must be true or false")

    return Settings(
        output_dir=base_dir / output_dir,
        poll_interval=float(poll_interval),
        utc_timestamps=utc_timestamps,
    )


def load_settings(path: Path | None = None, cwd: Path | None = None) -> Settings:
    """
    Load settings from `path`, or from `hksave.toml` in `cwd` if it exists.

    An explicit path that does not exist raises FileNotFoundError; a missing
    default file yields the defaults.
    """
    import tomllib

    cwd = Path.cwd() if cwd is None else cwd
    if path is None:
        path = cwd / CONFIG_FILENAME
        if not path.is_file():
            return Settings(output_dir=cwd)

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid config file {path}: {e}") from e

    return parse_settings(data, path.parent)
