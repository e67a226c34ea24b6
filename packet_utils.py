# packet_utils.py
import struct
import threading

from protocol_constants import (
    MSG_CHUNK_REQUEST, MSG_TOGGLE, MSG_CHUNK_UPDATE_SUBSCRIBE, MSG_CHUNK_UPDATE_UNSUBSCRIBE,
    TOGGLE_FMT, CHUNK_CMD_FMT, UNSUBSCRIBE_FMT, TOGGLE_SIZE, CHUNK_CMD_SIZE, UNSUBSCRIBE_SIZE,
)


class PacketBuffers:
    """
    Pre-sized outbound buffers, one set per session.
    A buffer is overwritten by the next build of the same kind, so
    build + send must happen under `lock`.
    """
    def __init__(self):
        self.toggle = bytearray(TOGGLE_SIZE)
        self.chunk_cmd = bytearray(CHUNK_CMD_SIZE)
        self.unsubscribe = bytearray(UNSUBSCRIBE_SIZE)
        self.lock = threading.Lock()


def build_toggle(buffers: PacketBuffers, index: int) -> bytearray:
    struct.pack_into(TOGGLE_FMT, buffers.toggle, 0, MSG_TOGGLE, index)
    return buffers.toggle


def build_chunk_request(buffers: PacketBuffers, chunk_index: int) -> bytearray:
    struct.pack_into(CHUNK_CMD_FMT, buffers.chunk_cmd, 0, MSG_CHUNK_REQUEST, chunk_index)
    return buffers.chunk_cmd


def build_subscribe(buffers: PacketBuffers, chunk_index: int) -> bytearray:
    struct.pack_into(CHUNK_CMD_FMT, buffers.chunk_cmd, 0, MSG_CHUNK_UPDATE_SUBSCRIBE, chunk_index)
    return buffers.chunk_cmd


def build_unsubscribe(buffers: PacketBuffers) -> bytearray:
    struct.pack_into(UNSUBSCRIBE_FMT, buffers.unsubscribe, 0, MSG_CHUNK_UPDATE_UNSUBSCRIBE)
    return buffers.unsubscribe


def send_packet(ws, buffers: PacketBuffers, build, *args):
    """
    Build a command into the session's scratch buffer and send it as one
    binary frame. The transport copies the frame before send() returns.
    """
    with buffers.lock:
        packet = build(buffers, *args)
        ws.send(packet)
    return len(packet)
