"""Protocol-wide constants shared by client and server."""

import struct

DEFAULT_PORT = 27015
ENCODING = "utf-8"
MAX_PACKET_SIZE = 4096  # bytes, including the size field itself
HEADER = struct.Struct("<iii")  # size, id, type
SIZE_FIELD = struct.Struct("<i")
TERMINATOR = b"\x00\x00"
AUTH_FAILED_ID = -1

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

# id + type + terminators
MIN_FRAME_SIZE = 4 + 4 + len(TERMINATOR)
MAX_FRAME_SIZE = MAX_PACKET_SIZE - SIZE_FIELD.size

__all__ = [
    "DEFAULT_PORT",
    "ENCODING",
    "MAX_PACKET_SIZE",
    "HEADER",
    "SIZE_FIELD",
    "TERMINATOR",
    "AUTH_FAILED_ID",
    "INT32_MIN",
    "INT32_MAX",
    "MIN_FRAME_SIZE",
    "MAX_FRAME_SIZE",
]
