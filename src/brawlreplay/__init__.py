from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("brawlreplay")
except PackageNotFoundError:  # pragma: no cover
    # Allow running from source (e.g. `PYTHONPATH=src`) without installed package metadata.
    __version__ = "0.0.0+dev"

from .config import DecodeOptions
from .errors import (
    ChecksumMismatchError,
    CorruptReplayError,
    EndOfBufferError,
    InvalidEncodingError,
    InvalidReplayDataError,
    InvalidStateError,
    InvalidTerminalMarkerError,
    ReplayError,
    VersionMismatchError,
)
from .context import DecodeContext
from .reader import ReplayReader, read_replay, read_replay_file
from .types import (
    CustomGadgets,
    Death,
    Entity,
    GadgetSelection,
    GameModeFlags,
    GameSettings,
    Hero,
    Input,
    Player,
    Replay,
)

__all__ = [
    "ChecksumMismatchError",
    "CorruptReplayError",
    "CustomGadgets",
    "Death",
    "DecodeContext",
    "DecodeOptions",
    "EndOfBufferError",
    "Entity",
    "GadgetSelection",
    "GameModeFlags",
    "GameSettings",
    "Hero",
    "Input",
    "InvalidEncodingError",
    "InvalidReplayDataError",
    "InvalidStateError",
    "InvalidTerminalMarkerError",
    "Player",
    "Replay",
    "ReplayError",
    "ReplayReader",
    "VersionMismatchError",
    "read_replay",
    "read_replay_file",
]
