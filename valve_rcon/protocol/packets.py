from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .constants import INT32_MAX, INT32_MIN
from .errors import FramingError


class Origin(Enum):
    """Which side of the conversation sent a packet."""

    CLIENT = "client"
    SERVER = "server"


class PacketType(Enum):
    """
    RCON packet kinds (``SERVERDATA_*``).
    AUTH_RESPONSE and EXEC_COMMAND share wire code 2; they are told apart by origin.
    """

    AUTH = "auth"
    AUTH_RESPONSE = "auth_response"
    EXEC_COMMAND = "exec_command"
    RESPONSE_VALUE = "response_value"

    @property
    def code(self) -> int:
        return WIRE_CODES[self]

    def describe(self) -> str:
        return f"{self.name} ({self.code})"


WIRE_CODES: Dict[PacketType, int] = {
    PacketType.AUTH: 3,
    PacketType.AUTH_RESPONSE: 2,
    PacketType.EXEC_COMMAND: 2,
    PacketType.RESPONSE_VALUE: 0,
}

# Wire code -> packet type, per sender
TYPES_BY_ORIGIN: Dict[Origin, Dict[int, PacketType]] = {
    Origin.CLIENT: {
        3: PacketType.AUTH,
        2: PacketType.EXEC_COMMAND,
        0: PacketType.RESPONSE_VALUE,
    },
    Origin.SERVER: {
        2: PacketType.AUTH_RESPONSE,
        0: PacketType.RESPONSE_VALUE,
    },
}


def resolve_type(code: int, origin: Origin) -> PacketType:
    """Map a wire type code to its packet type for the given sender."""
    try:
        return TYPES_BY_ORIGIN[origin][code]
    except KeyError:
        raise FramingError(f"unknown packet type {code} from {origin.value}") from None


class Packet(BaseModel):
    """One RCON frame. ``size`` is only set on decoded packets."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=INT32_MIN, le=INT32_MAX, description="Correlation id echoed in responses")
    type: PacketType
    body: str = ""
    size: Optional[int] = Field(default=None, ge=INT32_MIN, le=INT32_MAX, description="Size field as read from the wire")

    def __repr__(self) -> str:
        return f"<Packet {self.id} {self.type.name} {len(self.body)}ch>"


__all__ = ["Origin", "PacketType", "WIRE_CODES", "TYPES_BY_ORIGIN", "resolve_type", "Packet"]
