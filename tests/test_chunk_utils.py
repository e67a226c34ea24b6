from __future__ import annotations

import pytest

from chunk_utils import (
    chunk_of_index, check_chunk_index,
    to_global_index, to_local_index, to_global_byte_offset, to_local_byte_offset,
)
from protocol_constants import CHUNK_BITS, CHUNK_BYTES, CHUNK_COUNT, BITMAP_BITS


def test_geometry():
    assert CHUNK_BITS == 262144
    assert CHUNK_COUNT == 4096
    assert CHUNK_BYTES == 32768


def test_to_global_index_scenario():
    assert to_global_index(5, 10) == 10 + 5 * 262144 == 1310730


@pytest.mark.parametrize("chunk", [0, 1, 5, 2047, CHUNK_COUNT - 1])
@pytest.mark.parametrize("local", [0, 1, 12345, CHUNK_BITS - 1])
def test_bit_pair_inverts(chunk, local):
    g = to_global_index(chunk, local)
    assert 0 <= g < BITMAP_BITS
    assert to_local_index(chunk, g) == local
    assert chunk_of_index(g) == chunk


@pytest.mark.parametrize("chunk", [0, 7, CHUNK_COUNT - 1])
@pytest.mark.parametrize("local", [0, 32, CHUNK_BYTES - 32])
def test_byte_pair_inverts(chunk, local):
    g = to_global_byte_offset(chunk, local)
    assert g == chunk * CHUNK_BYTES + local
    assert to_local_byte_offset(chunk, g) == local


def test_local_index_range():
    with pytest.raises(IndexError):
        to_global_index(0, CHUNK_BITS)
    with pytest.raises(IndexError):
        to_global_index(0, -1)
    with pytest.raises(IndexError):
        to_local_index(0, BITMAP_BITS)


def test_global_index_outside_chunk():
    with pytest.raises(IndexError):
        to_local_index(1, 5)
    with pytest.raises(IndexError):
        to_local_byte_offset(2, CHUNK_BYTES)


def test_chunk_index_validation():
    assert check_chunk_index(0) == 0
    with pytest.raises(IndexError):
        check_chunk_index(CHUNK_COUNT)
    with pytest.raises(TypeError):
        check_chunk_index("3")
    with pytest.raises(TypeError):
        to_global_index(True, 0)
