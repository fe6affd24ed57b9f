from __future__ import annotations

from typing import Any

import msgspec

from .types import Replay

_ENCODER = msgspec.json.Encoder()


def replay_to_builtins(replay: Replay) -> dict[str, Any]:
    """Plain dict/list/str/int tree of a decoded replay, shaped exactly like its JSON."""
    return msgspec.json.decode(_ENCODER.encode(replay))


def replay_to_json(replay: Replay, *, indent: int = 2) -> bytes:
    raw = _ENCODER.encode(replay)
    if indent <= 0:
        return raw
    return msgspec.json.format(raw, indent=indent)
