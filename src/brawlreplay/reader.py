from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import Callable, Final

from .bitstream import BitReader
from .checksum import calculate_checksum
from .cipher import decipher
from .config import DecodeOptions
from .context import DecodeContext
from .decoders import read_faces, read_header, read_inputs, read_player_data, read_results
from .dialect import resolve
from .errors import ChecksumMismatchError, InvalidReplayDataError, InvalidStateError, InvalidTerminalMarkerError
from .trace import DecodeTrace
from .types import Replay

RECORD_INPUTS: Final[int] = 1
RECORD_END: Final[int] = 2
RECORD_HEADER: Final[int] = 3
RECORD_PLAYER_DATA: Final[int] = 4
RECORD_KNOCKOUTS: Final[int] = 5
RECORD_RESULTS: Final[int] = 6
RECORD_FACES: Final[int] = 7

RecordHandler = Callable[[BitReader, DecodeContext], None]

_HANDLERS: Final[dict[int, RecordHandler]] = {
    RECORD_INPUTS: read_inputs,
    RECORD_HEADER: read_header,
    RECORD_PLAYER_DATA: read_player_data,
    RECORD_KNOCKOUTS: partial(read_faces, knockout=True),
    RECORD_RESULTS: read_results,
    RECORD_FACES: partial(read_faces, knockout=False),
}

_RECORD_NAMES: Final[dict[int, str]] = {
    RECORD_INPUTS: "inputs",
    RECORD_END: "end",
    RECORD_HEADER: "header",
    RECORD_PLAYER_DATA: "player_data",
    RECORD_KNOCKOUTS: "knockouts",
    RECORD_RESULTS: "results",
    RECORD_FACES: "faces",
}


class ReplayReader:
    """Decode replays with one fixed set of options.

    A reader holds no per-replay state, so one instance may decode any number
    of replays. Without a trace attached it may also be shared across threads;
    an attached trace belongs to one decode at a time.
    """

    def __init__(self, options: DecodeOptions | None = None, *, trace: DecodeTrace | None = None) -> None:
        self.options = options if options is not None else DecodeOptions()
        self.trace = trace

    def _log(self, event: str, **fields: object) -> None:
        if self.trace is not None:
            self.trace.log(event, **fields)

    def read(self, data: bytes) -> Replay:
        self._log("init", size=len(data), ignore_checks=self.options.ignore_checks)
        return self.read_plaintext(decipher(data))

    def read_plaintext(self, plaintext: bytes) -> Replay:
        if not plaintext:
            raise InvalidReplayDataError("replay contains no player data")
        reader = BitReader(plaintext)
        resolution = resolve(reader)
        rules = resolution.rules
        ctx = DecodeContext(rules=rules, ignore_checks=self.options.ignore_checks)
        self._log("dialect", dialect=rules.dialect.value, tag_bits=rules.tag_bits, version=resolution.version)
        if resolution.version is not None:
            ctx.set_version(resolution.version)

        pending = resolution.first_tag
        while pending is not None or reader.remaining_bytes > 0:
            offset = reader.bit_position
            if pending is not None:
                tag, pending = pending, None
            else:
                tag = reader.read_bits(rules.tag_bits)
            self._log("record", tag=tag, name=_RECORD_NAMES.get(tag, "unknown"), bit=offset)
            if tag == RECORD_END:
                break
            if rules.invalid_terminal_tag is not None and tag == rules.invalid_terminal_tag:
                raise InvalidTerminalMarkerError("reached the end marker of a replay the game flagged as invalid")
            handler = _HANDLERS.get(tag)
            if handler is None:
                raise InvalidStateError(f"invalid record tag {tag} at bit {offset}")
            handler(reader, ctx)

        replay = ctx.freeze()
        self._validate_checksum(replay)
        self._log("done", entities=len(replay.entities), checksum=replay.checksum, version=replay.version)
        return replay

    def _validate_checksum(self, replay: Replay) -> None:
        if self.options.ignore_checks:
            return
        computed = calculate_checksum(replay.entities, replay.level_id)
        if computed != replay.checksum:
            raise ChecksumMismatchError(
                f"calculated checksum {computed} does not match stored checksum {replay.checksum}"
            )


def read_replay(data: bytes, *, ignore_checks: bool = False, trace: DecodeTrace | None = None) -> Replay:
    return ReplayReader(DecodeOptions(ignore_checks=ignore_checks), trace=trace).read(data)


def read_replay_file(
    path: str | Path,
    *,
    ignore_checks: bool = False,
    trace: DecodeTrace | None = None,
) -> Replay:
    return read_replay(Path(path).read_bytes(), ignore_checks=ignore_checks, trace=trace)
