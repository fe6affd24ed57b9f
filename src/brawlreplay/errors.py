from __future__ import annotations


class ReplayError(ValueError):
    """Base class for every failure raised while decoding a replay."""


class CorruptReplayError(ReplayError):
    """The compressed container could not be inflated."""


class EndOfBufferError(ReplayError):
    """A read needed more bits than the plaintext buffer still holds."""


class InvalidStateError(ReplayError):
    """The dispatcher read a record tag it does not know."""


class InvalidTerminalMarkerError(ReplayError):
    """Legacy sentinel tag: the game itself marked the recording as invalid."""


class InvalidReplayDataError(ReplayError):
    """A field holds a value the format cannot represent (e.g. hero count 0)."""


class VersionMismatchError(ReplayError):
    pass


class ChecksumMismatchError(ReplayError):
    pass


class InvalidEncodingError(ReplayError):
    """A string field is not valid UTF-8."""
