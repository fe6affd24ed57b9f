from __future__ import annotations

"""
Forward-only bit reader over the deciphered replay buffer.

Bits are consumed most-significant first within each byte. Every wider
primitive is a `read_bits` call followed by a reinterpretation of the raw
pattern:

  - short: 16 bits, two's complement
  - int:   32 bits, two's complement
  - float: 32 bits, IEEE-754 single (bit cast, not a numeric conversion)
  - string: 16-bit length (reinterpreted unsigned) + that many UTF-8 bytes
"""

from construct import Float32b, Int16sb, Int32sb

from .errors import EndOfBufferError, InvalidEncodingError


class BitReader:
    __slots__ = ("_data", "_byte_pos", "_bit_pos")

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._byte_pos = 0
        self._bit_pos = 0

    @property
    def remaining_bytes(self) -> int:
        return len(self._data) - self._byte_pos

    @property
    def remaining_bits(self) -> int:
        return len(self._data) * 8 - self.bit_position

    @property
    def bit_position(self) -> int:
        return self._byte_pos * 8 + self._bit_pos

    @property
    def is_byte_aligned(self) -> bool:
        return self._bit_pos == 0

    def read_bits(self, count: int) -> int:
        if count < 0:
            raise ValueError(f"bit count must be non-negative, got {count}")
        if count > self.remaining_bits:
            raise EndOfBufferError(
                f"read of {count} bits at bit {self.bit_position} runs past end of buffer "
                f"({self.remaining_bits} bits left)"
            )
        data = self._data
        result = 0
        while count:
            take = min(8 - self._bit_pos, count)
            shift = 8 - self._bit_pos - take
            chunk = (data[self._byte_pos] >> shift) & ((1 << take) - 1)
            result = (result << take) | chunk
            count -= take
            self._bit_pos += take
            if self._bit_pos == 8:
                self._byte_pos += 1
                self._bit_pos = 0
        return result

    def read_bool(self) -> bool:
        return self.read_bits(1) != 0

    def read_byte(self) -> int:
        return self.read_bits(8)

    def read_bytes(self, count: int) -> bytes:
        if count * 8 > self.remaining_bits:
            raise EndOfBufferError(
                f"read of {count} bytes at bit {self.bit_position} runs past end of buffer "
                f"({self.remaining_bits} bits left)"
            )
        if self.is_byte_aligned:
            start = self._byte_pos
            self._byte_pos += count
            return self._data[start : start + count]
        return bytes(self.read_byte() for _ in range(count))

    def read_ushort(self) -> int:
        return self.read_bits(16)

    def read_short(self) -> int:
        return Int16sb.parse(self.read_bits(16).to_bytes(2, "big"))

    def read_uint(self) -> int:
        return self.read_bits(32)

    def read_int(self) -> int:
        return Int32sb.parse(self.read_bits(32).to_bytes(4, "big"))

    def read_float(self) -> float:
        return Float32b.parse(self.read_bits(32).to_bytes(4, "big"))

    def read_string(self) -> str:
        length = self.read_ushort()
        raw = self.read_bytes(length)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidEncodingError(f"string field of {length} bytes is not valid UTF-8: {exc}") from exc
