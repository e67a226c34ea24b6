# byte_reader.py
import struct


class OutOfBoundsError(ValueError):
    pass


class ByteReader:
    """
    Forward-only reader over a received frame.
    Integers are little-endian; every read advances the offset by its width.
    """
    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.offset = 0

    def _take(self, n: int) -> int:
        if n < 0:
            raise ValueError("read size must be non-negative")
        start = self.offset
        if start + n > len(self.data):
            raise OutOfBoundsError(
                f"need {n} bytes at offset {start}, only {len(self.data) - start} left")
        self.offset += n
        return start

    def read_u8(self) -> int:
        return self.data[self._take(1)]

    def read_u16(self) -> int:
        return struct.unpack_from('<H', self.data, self._take(2))[0]

    def read_u32(self) -> int:
        return struct.unpack_from('<I', self.data, self._take(4))[0]

    def read_bytes(self, n: int) -> bytes:
        """Copy of the next n bytes."""
        start = self._take(n)
        return self.data[start:start + n]

    @property
    def bytes_left(self) -> int:
        return len(self.data) - self.offset
