# chunk_utils.py
"""
Address arithmetic between chunk-local and bitmap-global positions.

Two explicit pairs are provided:
  bits:  to_global_index / to_local_index
  bytes: to_global_byte_offset / to_local_byte_offset
Partial updates carry a global *byte* offset, toggles a global *bit* index.
"""
from protocol_constants import CHUNK_BITS, CHUNK_BYTES, CHUNK_COUNT, BITMAP_BITS, BITMAP_BYTES


def check_index(name: str, value, limit: int) -> int:
    """Validate value is an int in [0, limit). Returns it unchanged."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value >= limit:
        raise IndexError(f"{name} {value} out of range [0, {limit})")
    return value


def check_chunk_index(chunk_index) -> int:
    return check_index("chunk index", chunk_index, CHUNK_COUNT)


def to_global_index(chunk_index: int, local_index: int) -> int:
    check_chunk_index(chunk_index)
    check_index("local bit index", local_index, CHUNK_BITS)
    return local_index + chunk_index * CHUNK_BITS


def to_local_index(chunk_index: int, global_index: int) -> int:
    check_chunk_index(chunk_index)
    check_index("global bit index", global_index, BITMAP_BITS)
    local = global_index - chunk_index * CHUNK_BITS
    if not 0 <= local < CHUNK_BITS:
        raise IndexError(f"bit {global_index} is not inside chunk {chunk_index}")
    return local


def to_global_byte_offset(chunk_index: int, local_offset: int) -> int:
    check_chunk_index(chunk_index)
    check_index("local byte offset", local_offset, CHUNK_BYTES)
    return local_offset + chunk_index * CHUNK_BYTES


def to_local_byte_offset(chunk_index: int, global_offset: int) -> int:
    check_chunk_index(chunk_index)
    check_index("global byte offset", global_offset, BITMAP_BYTES)
    local = global_offset - chunk_index * CHUNK_BYTES
    if not 0 <= local < CHUNK_BYTES:
        raise IndexError(f"byte {global_offset} is not inside chunk {chunk_index}")
    return local


def chunk_of_index(global_index: int) -> int:
    check_index("global bit index", global_index, BITMAP_BITS)
    return global_index // CHUNK_BITS
