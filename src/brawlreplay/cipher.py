from __future__ import annotations

"""
Replay container layout:

  - zlib stream (DEFLATE with zlib header/trailer), whole file
  - inflated payload XOR'd with a repeating 64-byte key

The XOR step is obfuscation only. It is self-inverse, so `apply_key` both
hides and reveals a payload. There is no integrity check at this stage; a
damaged payload surfaces later as a bad record tag or a checksum mismatch.
"""

import zlib
from typing import Final

from .errors import CorruptReplayError

KEY: Final[bytes] = bytes(
    (
        0x6B, 0x10, 0xDE, 0x3C, 0x44, 0x4B, 0xD1, 0x46, 0xA0, 0x10, 0x52, 0xC1, 0xB2, 0x31, 0xD3, 0x6A,
        0xFB, 0xAC, 0x11, 0xDE, 0x06, 0x68, 0x08, 0x78, 0x8C, 0xD5, 0xB3, 0xF9, 0x6A, 0x40, 0xD6, 0x13,
        0x0C, 0xAE, 0x9D, 0xC5, 0xD4, 0x6B, 0x54, 0x72, 0xFC, 0x57, 0x5D, 0x1A, 0x06, 0x73, 0xC2, 0x51,
        0x4B, 0xB0, 0xC9, 0x8C, 0x78, 0x04, 0x11, 0x7A, 0xEF, 0x74, 0x3E, 0x46, 0x39, 0xA0, 0xC7, 0xA6,
    )
)
KEY_SIZE: Final[int] = len(KEY)


def inflate(raw: bytes) -> bytes:
    try:
        return zlib.decompress(raw)
    except zlib.error as exc:
        raise CorruptReplayError(f"failed to inflate replay: {exc}") from exc


def apply_key(data: bytes) -> bytes:
    out = bytearray(data)
    for i in range(len(out)):
        out[i] ^= KEY[i % KEY_SIZE]
    return bytes(out)


def decipher(raw: bytes) -> bytes:
    return apply_key(inflate(raw))
