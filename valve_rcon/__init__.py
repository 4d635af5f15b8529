"""Source RCON protocol server, client and wire codec."""

from .protocol import DEFAULT_PORT, MAX_PACKET_SIZE, Origin, Packet, PacketType
from .server.core import RconServer, Session

__all__ = ["DEFAULT_PORT", "MAX_PACKET_SIZE", "Origin", "Packet", "PacketType", "RconServer", "Session"]
