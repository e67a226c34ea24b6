from __future__ import annotations

from packet_utils import (
    PacketBuffers, build_chunk_request, build_subscribe, build_toggle, build_unsubscribe, send_packet,
)
from tests._helpers import FakeTransport


def test_fixed_sizes_and_layout():
    buffers = PacketBuffers()
    assert bytes(build_toggle(buffers, 1310730)) == b"\x13" + (1310730).to_bytes(4, "little")
    assert bytes(build_chunk_request(buffers, 0x0102)) == b"\x10\x02\x01"
    assert bytes(build_subscribe(buffers, 4095)) == b"\x14\xff\x0f"
    assert bytes(build_unsubscribe(buffers)) == b"\x15"


def test_buffers_are_reused_per_session_only():
    a = PacketBuffers()
    b = PacketBuffers()
    first = build_toggle(a, 1)
    second = build_toggle(a, 2)
    assert first is second
    assert build_toggle(b, 3) is not first
    assert bytes(first) == b"\x13\x02\x00\x00\x00"


def test_send_packet_writes_one_frame():
    ws = FakeTransport()
    buffers = PacketBuffers()
    assert send_packet(ws, buffers, build_subscribe, 9) == 3
    send_packet(ws, buffers, build_chunk_request, 10)
    assert ws.sent == [b"\x14\x09\x00", b"\x10\x0a\x00"]
