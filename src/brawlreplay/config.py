from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

REPLAY_DIR_NAME: Final[str] = "BrawlhallaReplays"
REPLAY_SUFFIX: Final[str] = ".replay"
OUTPUT_SUFFIX: Final[str] = ".json"


@dataclass(frozen=True, slots=True)
class DecodeOptions:
    # Suppresses checksum and version-check mismatches; structural errors still raise.
    ignore_checks: bool = False


def default_replay_dir() -> Path:
    """Folder the game client saves recordings into."""
    return Path.home() / REPLAY_DIR_NAME


def _with_suffix(path: Path) -> Path:
    if path.name.endswith(REPLAY_SUFFIX):
        return path
    return path.with_name(path.name + REPLAY_SUFFIX)


def resolve_replay_path(name: str | Path, *, replay_dir: Path | None = None) -> Path:
    """Find a replay given either a path or a bare recording name.

    Candidates, in order: the path as given, the path with `.replay`
    appended, then both forms inside the replay folder. When nothing exists
    the last candidate is returned so the caller reports a useful path.
    """

    path = Path(name)
    folder = replay_dir if replay_dir is not None else default_replay_dir()
    candidates = [path, _with_suffix(path)]
    if not path.is_absolute():
        candidates += [folder / path, _with_suffix(folder / path)]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return candidates[-1]


def default_output_path(replay_path: Path, *, out_dir: Path | None = None) -> Path:
    base = out_dir if out_dir is not None else Path.cwd()
    name = replay_path.name
    if name.endswith(REPLAY_SUFFIX):
        name = name[: -len(REPLAY_SUFFIX)]
    return base / f"{name}{OUTPUT_SUFFIX}"
