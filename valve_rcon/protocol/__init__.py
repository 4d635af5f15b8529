"""
Protocol package: wire constants, packet model, framing helpers and the
error hierarchy shared by client and server.
"""

from .constants import AUTH_FAILED_ID, DEFAULT_PORT, ENCODING, MAX_PACKET_SIZE
from .errors import (
    AcceptError,
    AuthError,
    BindError,
    ConnectionClosed,
    FramingError,
    OversizeError,
    ProtocolViolation,
    RconError,
)
from .framing import decode_packet, encode_packet, read_packet
from .packets import Origin, Packet, PacketType

__all__ = [
    "AUTH_FAILED_ID",
    "DEFAULT_PORT",
    "ENCODING",
    "MAX_PACKET_SIZE",
    "RconError",
    "FramingError",
    "ConnectionClosed",
    "OversizeError",
    "AuthError",
    "ProtocolViolation",
    "BindError",
    "AcceptError",
    "encode_packet",
    "decode_packet",
    "read_packet",
    "Origin",
    "Packet",
    "PacketType",
]
