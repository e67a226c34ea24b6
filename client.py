# client.py
import threading
import traceback

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.sync.client import connect as ws_connect

from protocol_constants import (
    DEFAULT_SERVER_ADDR, PROTO_MAJOR, PROTO_MINOR,
    MSG_HELLO, MSG_STATS, MSG_CHUNK_UPDATE_FULL, MSG_CHUNK_UPDATE_PARTIAL,
    CHUNK_BYTES, BITMAP_BITS, UPDATE_CHUNK_SIZE, MAX_FRAME_BYTES, RECV_TIMEOUT_S,
)
from bitset import BitSet
from chunk_utils import check_index, check_chunk_index, to_local_byte_offset
from client_utils import (
    ProtocolError, NonBinaryFrameError, UnsupportedVersionError, SequenceError,
    parse_packet, current_time_ms, log_message,
)
from packet_utils import (
    PacketBuffers, send_packet,
    build_toggle, build_chunk_request, build_subscribe, build_unsubscribe,
)


class NotConnectedError(RuntimeError):
    pass


class ClientHandlers:
    """
    Optional callbacks, all called from the receive thread:
      on_hello(client)
      on_stats(client, clients_connected)
      on_chunk_update_full(client, chunk_index, bits)
      on_chunk_update_partial(client, chunk_index, local_bit_offset, bits)
      on_error(client, error)
    Full-update bits may be the live subscribed container; partial-update bits
    are a detached copy of the 32-byte patch.
    """
    def __init__(self, on_hello=None, on_stats=None, on_chunk_update_full=None,
                 on_chunk_update_partial=None, on_error=None):
        self.on_hello = on_hello
        self.on_stats = on_stats
        self.on_chunk_update_full = on_chunk_update_full
        self.on_chunk_update_partial = on_chunk_update_partial
        self.on_error = on_error


class SubscribedChunk:
    def __init__(self, chunk_index):
        self.chunk_index = chunk_index
        self.bits = BitSet(CHUNK_BYTES)


def default_connect(address):
    return ws_connect(address, max_size=MAX_FRAME_BYTES)


class BitmapClient:
    def __init__(self, handlers=None, connect_fn=default_connect, metrics=None):
        self.handlers = handlers or ClientHandlers()
        self.connect_fn = connect_fn
        self.metrics = metrics
        self.ws = None
        self.recv_thread = None
        self.subscription = None
        self.server_version = None
        self.clients_connected = None
        self.buffers = PacketBuffers()

    # --- Connection ---
    def connect(self, address=DEFAULT_SERVER_ADDR):
        """Open the transport and start the receive thread. Returns True on success."""
        try:
            ws = self.connect_fn(address)
        except (OSError, WebSocketException) as e:
            log_message(f"[CLIENT] Connection to {address} failed: {e}", "WARN")
            self.report_error(e)
            return False

        # a previous handle, if any, is dropped without closing
        self.ws = ws
        log_message(f"[CLIENT] Connected to {address}")
        self.recv_thread = threading.Thread(target=self.receive_loop, args=(ws,), daemon=True)
        self.recv_thread.start()
        return True

    def disconnect(self):
        ws = self.ws
        self.ws = None
        self.subscription = None
        if ws is None:
            return
        ws.close()
        thread = self.recv_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)
        log_message("[CLIENT] Disconnected")

    @property
    def connected(self):
        return self.ws is not None

    @property
    def subscribed_chunk(self):
        return self.subscription.chunk_index if self.subscription else None

    @property
    def subscribed_bits(self):
        return self.subscription.bits if self.subscription else None

    def receive_loop(self, ws):
        """Background thread - read frames until the transport closes or is replaced."""
        while self.ws is ws:
            try:
                message = ws.recv(timeout=RECV_TIMEOUT_S)
            except TimeoutError:
                continue
            except (ConnectionClosed, OSError) as e:
                if self.ws is ws:
                    self.ws = None
                    self.subscription = None
                    log_message(f"[CLIENT] Connection lost: {e}", "WARN")
                    try:
                        self.report_error(e)
                    except Exception as handler_error:
                        log_message(f"[ERROR] Handler failed: {handler_error}", "ERROR")
                        traceback.print_exc()
                return

            if self.ws is not ws:
                return
            try:
                self.handle_message(message)
            except Exception as e:
                log_message(f"[ERROR] Handler failed: {e}", "ERROR")
                traceback.print_exc()

    # --- Inbound dispatch ---
    def report_error(self, error):
        if isinstance(error, ProtocolError) and self.metrics is not None:
            self.metrics.log_error()
        if self.handlers.on_error:
            self.handlers.on_error(self, error)
        else:
            log_message(f"[ERROR] {type(error).__name__}: {error}", "ERROR")

    def handle_message(self, message):
        """Decode one frame and dispatch it. Protocol errors go to on_error, never raise."""
        if isinstance(message, str):
            self.report_error(NonBinaryFrameError(f"text frame of {len(message)} chars ignored"))
            return

        recv_ts = current_time_ms()
        try:
            packet = parse_packet(message)
        except ProtocolError as e:
            if self.metrics is not None:
                self.metrics.log(message[0] if message else None, len(message), recv_ts)
            self.report_error(e)
            return

        if self.metrics is not None:
            self.metrics.log(packet['msg_type'], len(message), recv_ts)

        msg_type = packet['msg_type']
        if msg_type == MSG_HELLO:
            self.handle_hello(packet)
        elif msg_type == MSG_STATS:
            self.clients_connected = packet['clients_connected']
            if self.handlers.on_stats:
                self.handlers.on_stats(self, packet['clients_connected'])
        elif msg_type == MSG_CHUNK_UPDATE_FULL:
            self.handle_chunk_full(packet)
        elif msg_type == MSG_CHUNK_UPDATE_PARTIAL:
            self.handle_chunk_partial(packet)

    def handle_hello(self, packet):
        version = (packet['major'], packet['minor'])
        if version != (PROTO_MAJOR, PROTO_MINOR):
            self.report_error(UnsupportedVersionError(
                f"server speaks {version[0]}.{version[1]}, client supports {PROTO_MAJOR}.{PROTO_MINOR}"))
            return
        self.server_version = version
        log_message(f"[CLIENT] HELLO, protocol {version[0]}.{version[1]}")
        if self.handlers.on_hello:
            self.handlers.on_hello(self)

    def handle_chunk_full(self, packet):
        chunk_index = packet['chunk_index']
        sub = self.subscription
        if sub is not None and sub.chunk_index == chunk_index:
            sub.bits.replace(packet['data'])
            bits = sub.bits
        else:
            bits = BitSet(packet['data'])
        if self.handlers.on_chunk_update_full:
            self.handlers.on_chunk_update_full(self, chunk_index, bits)

    def handle_chunk_partial(self, packet):
        sub = self.subscription
        if sub is None:
            self.report_error(SequenceError("CHUNK_UPDATE_PARTIAL received while not subscribed"))
            return

        offset = packet['offset']
        try:
            local_offset = to_local_byte_offset(sub.chunk_index, offset)
        except IndexError:
            local_offset = None
        if local_offset is None or local_offset + UPDATE_CHUNK_SIZE > CHUNK_BYTES:
            self.report_error(SequenceError(
                f"partial update at byte {offset} outside subscribed chunk {sub.chunk_index}"))
            return

        sub.bits.splice(local_offset, packet['data'])
        if self.handlers.on_chunk_update_partial:
            self.handlers.on_chunk_update_partial(self, sub.chunk_index, local_offset * 8, BitSet(packet['data']))

    # --- Outbound commands ---
    def send(self, build, *args):
        ws = self.ws
        if ws is None:
            raise NotConnectedError("not connected")
        send_packet(ws, self.buffers, build, *args)

    def chunk_request(self, chunk_index):
        """Ask for one full snapshot; the answer arrives as CHUNK_UPDATE_FULL."""
        check_chunk_index(chunk_index)
        self.send(build_chunk_request, chunk_index)

    def chunk_subscribe(self, chunk_index):
        """Subscribe to partial updates; replaces any previous subscription."""
        check_chunk_index(chunk_index)
        # record first: the reply may be dispatched before send() returns
        previous = self.subscription
        self.subscription = SubscribedChunk(chunk_index)
        try:
            self.send(build_subscribe, chunk_index)
        except Exception:
            self.subscription = previous
            raise

    def chunk_unsubscribe(self):
        previous = self.subscription
        self.subscription = None
        try:
            self.send(build_unsubscribe)
        except Exception:
            self.subscription = previous
            raise

    def toggle(self, index):
        """Flip one global bit on the server. The local cache waits for the server's update."""
        check_index("bit index", index, BITMAP_BITS)
        self.send(build_toggle, index)
