from __future__ import annotations

import struct

import pytest

from client_utils import (
    ProtocolError, TruncatedPacketError, TrailingDataError, UnknownPacketError,
    UnexpectedPacketError, parse_packet,
)
from protocol_constants import (
    MSG_HELLO, MSG_STATS, MSG_CHUNK_UPDATE_FULL, MSG_CHUNK_UPDATE_PARTIAL,
    MSG_CHUNK_REQUEST, MSG_TOGGLE, MSG_CHUNK_UPDATE_SUBSCRIBE, MSG_CHUNK_UPDATE_UNSUBSCRIBE,
    CHUNK_COUNT,
)
from tests._helpers import full_frame, hello_frame, partial_frame, patterned_chunk, stats_frame


def test_parse_hello():
    packet = parse_packet(bytes([0x00, 0x01, 0x00, 0x01, 0x00]))
    assert packet == {'msg_type': MSG_HELLO, 'major': 1, 'minor': 1}


def test_parse_hello_keeps_foreign_version():
    packet = parse_packet(hello_frame(2, 0))
    assert (packet['major'], packet['minor']) == (2, 0)


def test_parse_stats():
    assert parse_packet(stats_frame(70000)) == {'msg_type': MSG_STATS, 'clients_connected': 70000}


def test_parse_full_update():
    data = patterned_chunk()
    packet = parse_packet(full_frame(513, data))
    assert packet['msg_type'] == MSG_CHUNK_UPDATE_FULL
    assert packet['chunk_index'] == 513
    assert packet['data'] == data


def test_parse_partial_update():
    data = bytes(range(32))
    packet = parse_packet(partial_frame(0x01020304, data))
    assert packet == {'msg_type': MSG_CHUNK_UPDATE_PARTIAL, 'offset': 0x01020304, 'data': data}


@pytest.mark.parametrize("frame", [
    b"",
    b"\x00\x01\x00",
    b"\x01\x00\x00",
    full_frame(0)[:-1],
    partial_frame(0)[:-5],
])
def test_truncated_frames(frame):
    with pytest.raises(TruncatedPacketError):
        parse_packet(frame)


def test_trailing_bytes_rejected():
    with pytest.raises(TrailingDataError):
        parse_packet(stats_frame(1) + b"\x00")


@pytest.mark.parametrize("tag", [
    MSG_CHUNK_REQUEST, MSG_TOGGLE, MSG_CHUNK_UPDATE_SUBSCRIBE, MSG_CHUNK_UPDATE_UNSUBSCRIBE,
])
def test_client_bound_only_tags_rejected(tag):
    with pytest.raises(UnexpectedPacketError):
        parse_packet(bytes([tag, 0, 0, 0, 0]))


def test_unknown_tag_rejected():
    with pytest.raises(UnknownPacketError) as exc:
        parse_packet(b"\x7f")
    assert isinstance(exc.value, ProtocolError)


def test_full_update_chunk_out_of_range():
    frame = struct.pack('<BH', MSG_CHUNK_UPDATE_FULL, CHUNK_COUNT) + patterned_chunk()
    with pytest.raises(ProtocolError):
        parse_packet(frame)
