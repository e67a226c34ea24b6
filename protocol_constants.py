# protocol_constants.py
DEFAULT_SERVER_ADDR = "ws://127.0.0.1:9999/"

# Supported protocol version (HELLO must match exactly)
PROTO_MAJOR = 1
PROTO_MINOR = 1

# Message types (server -> client)
MSG_HELLO = 0x00
MSG_STATS = 0x01
MSG_CHUNK_UPDATE_FULL = 0x11
MSG_CHUNK_UPDATE_PARTIAL = 0x12

# Message types (client -> server)
MSG_CHUNK_REQUEST = 0x10
MSG_TOGGLE = 0x13
MSG_CHUNK_UPDATE_SUBSCRIBE = 0x14
MSG_CHUNK_UPDATE_UNSUBSCRIBE = 0x15

INBOUND_TYPES = (MSG_HELLO, MSG_STATS, MSG_CHUNK_UPDATE_FULL, MSG_CHUNK_UPDATE_PARTIAL)
OUTBOUND_TYPES = (MSG_CHUNK_REQUEST, MSG_TOGGLE, MSG_CHUNK_UPDATE_SUBSCRIBE, MSG_CHUNK_UPDATE_UNSUBSCRIBE)

MSG_NAMES = {
    MSG_HELLO: "HELLO",
    MSG_STATS: "STATS",
    MSG_CHUNK_REQUEST: "CHUNK_REQUEST",
    MSG_CHUNK_UPDATE_FULL: "CHUNK_UPDATE_FULL",
    MSG_CHUNK_UPDATE_PARTIAL: "CHUNK_UPDATE_PARTIAL",
    MSG_TOGGLE: "TOGGLE",
    MSG_CHUNK_UPDATE_SUBSCRIBE: "CHUNK_UPDATE_SUBSCRIBE",
    MSG_CHUNK_UPDATE_UNSUBSCRIBE: "CHUNK_UPDATE_UNSUBSCRIBE",
}

# Bitmap geometry
CHUNK_BITS = 64 * 64 * 64           # 262144
CHUNK_BYTES = CHUNK_BITS // 8       # 32768
CHUNK_COUNT = 64 * 64               # 4096
BITMAP_BITS = CHUNK_BITS * CHUNK_COUNT
BITMAP_BYTES = BITMAP_BITS // 8
UPDATE_CHUNK_SIZE = 32              # bytes per partial update

# Outbound formats (for struct.pack_into), little-endian
TOGGLE_FMT = '<BI'                  # 5 bytes
CHUNK_CMD_FMT = '<BH'               # 3 bytes (request / subscribe)
UNSUBSCRIBE_FMT = '<B'              # 1 byte

TOGGLE_SIZE = 5
CHUNK_CMD_SIZE = 3
UNSUBSCRIBE_SIZE = 1

# Inbound frame sizes, tag byte included
HELLO_SIZE = 5
STATS_SIZE = 5
CHUNK_UPDATE_FULL_SIZE = 3 + CHUNK_BYTES
CHUNK_UPDATE_PARTIAL_SIZE = 5 + UPDATE_CHUNK_SIZE

# Default behavior / limits
MAX_FRAME_BYTES = CHUNK_UPDATE_FULL_SIZE
RECV_TIMEOUT_S = 0.5
VERBOSE = True
