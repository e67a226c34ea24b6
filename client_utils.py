# client_utils.py
import time

import protocol_constants
from protocol_constants import (
    MSG_HELLO, MSG_STATS, MSG_CHUNK_UPDATE_FULL, MSG_CHUNK_UPDATE_PARTIAL,
    OUTBOUND_TYPES, MSG_NAMES, CHUNK_BYTES, CHUNK_COUNT, UPDATE_CHUNK_SIZE,
)
from byte_reader import ByteReader, OutOfBoundsError


class ProtocolError(ValueError):
    pass


class TruncatedPacketError(ProtocolError):
    pass


class TrailingDataError(ProtocolError):
    pass


class UnknownPacketError(ProtocolError):
    pass


class UnexpectedPacketError(ProtocolError):
    pass


class UnsupportedVersionError(ProtocolError):
    pass


class SequenceError(ProtocolError):
    pass


class NonBinaryFrameError(ProtocolError):
    pass


def current_time_ms():
    return int(time.time() * 1000)


def log_message(msg, level="INFO"):
    """Print a tagged line; INFO lines are dropped unless VERBOSE is set."""
    if level == "INFO" and not protocol_constants.VERBOSE:
        return
    print(msg)


def msg_name(msg_type: int) -> str:
    return MSG_NAMES.get(msg_type, f"0x{msg_type:02x}")


def parse_packet(raw: bytes):
    """
    Decode one server frame into a dict tagged by 'msg_type':
      HELLO                {'major', 'minor'}
      STATS                {'clients_connected'}
      CHUNK_UPDATE_FULL    {'chunk_index', 'data'}   (CHUNK_BYTES bytes)
      CHUNK_UPDATE_PARTIAL {'offset', 'data'}        (global byte offset, UPDATE_CHUNK_SIZE bytes)
    Raises a ProtocolError subclass on anything else.
    The HELLO version is decoded but not checked here.
    """
    reader = ByteReader(raw)
    try:
        msg_type = reader.read_u8()
        if msg_type == MSG_HELLO:
            packet = {'msg_type': msg_type, 'major': reader.read_u16(), 'minor': reader.read_u16()}
        elif msg_type == MSG_STATS:
            packet = {'msg_type': msg_type, 'clients_connected': reader.read_u32()}
        elif msg_type == MSG_CHUNK_UPDATE_FULL:
            chunk_index = reader.read_u16()
            if chunk_index >= CHUNK_COUNT:
                raise ProtocolError(f"CHUNK_UPDATE_FULL for chunk {chunk_index} out of range [0, {CHUNK_COUNT})")
            packet = {'msg_type': msg_type, 'chunk_index': chunk_index, 'data': reader.read_bytes(CHUNK_BYTES)}
        elif msg_type == MSG_CHUNK_UPDATE_PARTIAL:
            packet = {'msg_type': msg_type, 'offset': reader.read_u32(), 'data': reader.read_bytes(UPDATE_CHUNK_SIZE)}
        elif msg_type in OUTBOUND_TYPES:
            raise UnexpectedPacketError(f"received client-to-server packet {msg_name(msg_type)}")
        else:
            raise UnknownPacketError(f"unknown packet type {msg_name(msg_type)}")
    except OutOfBoundsError as e:
        name = msg_name(raw[0]) if len(raw) else "empty frame"
        raise TruncatedPacketError(f"truncated {name}: {e}") from e

    if reader.bytes_left:
        raise TrailingDataError(f"{msg_name(msg_type)} has {reader.bytes_left} unexpected trailing bytes")
    return packet
