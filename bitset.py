# bitset.py
import numpy as np


class BitSet:
    """
    Fixed-size bit view over a bytearray.
    Bit i lives in byte i // 8 under mask 1 << (i % 8).
    The buffer is mutated in place and may be shared with the owner
    (e.g. the subscribed chunk of a client session).
    """
    def __init__(self, data):
        if isinstance(data, int):
            data = bytearray(data)
        elif not isinstance(data, bytearray):
            data = bytearray(data)
        self.data = data

    def _locate(self, i: int):
        if not isinstance(i, int) or isinstance(i, bool):
            raise TypeError(f"bit index must be an int, got {type(i).__name__}")
        if i < 0 or i >= len(self.data) * 8:
            raise IndexError(f"bit index {i} out of range [0, {len(self.data) * 8})")
        return i >> 3, 1 << (i & 7)

    def get(self, i: int) -> int:
        byte_idx, mask = self._locate(i)
        return 1 if self.data[byte_idx] & mask else 0

    def set(self, i: int, value) -> None:
        byte_idx, mask = self._locate(i)
        if value:
            self.data[byte_idx] |= mask
        else:
            self.data[byte_idx] &= ~mask & 0xFF

    def invert(self, i: int) -> None:
        byte_idx, mask = self._locate(i)
        self.data[byte_idx] ^= mask

    def length(self) -> int:
        return len(self.data) * 8

    __len__ = length
    __getitem__ = get
    __setitem__ = set

    def bits(self):
        """Yield every bit value in order; each call starts a new pass."""
        for byte in self.data:
            for shift in range(8):
                yield (byte >> shift) & 1

    def __iter__(self):
        return self.bits()

    def count(self) -> int:
        """Number of set bits."""
        return int.from_bytes(self.data, 'little').bit_count() if self.data else 0

    def replace(self, data: bytes) -> None:
        """Overwrite the whole buffer in place (full resync)."""
        if len(data) != len(self.data):
            raise ValueError(f"expected {len(self.data)} bytes, got {len(data)}")
        self.data[:] = data

    def splice(self, byte_offset: int, data: bytes) -> None:
        """Overwrite len(data) bytes starting at byte_offset, leave the rest alone."""
        if byte_offset < 0 or byte_offset + len(data) > len(self.data):
            raise IndexError(
                f"window [{byte_offset}, {byte_offset + len(data)}) outside [0, {len(self.data)})")
        self.data[byte_offset:byte_offset + len(data)] = data

    def to_bytes(self) -> bytes:
        return bytes(self.data)

    def to_numpy(self) -> np.ndarray:
        """Bits as a boolean array, index i matching get(i)."""
        raw = np.frombuffer(bytes(self.data), dtype=np.uint8)
        return np.unpackbits(raw, bitorder='little').astype(bool)

    def __repr__(self):
        return f"BitSet({len(self.data)} bytes, {self.count()} set)"
