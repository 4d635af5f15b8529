from __future__ import annotations

from typing import Optional


class RconError(Exception):
    """Base class for every RCON failure, carrying an optional peer name."""

    def __init__(self, message: str = "", peer: Optional[str] = None) -> None:
        self.message = message
        self.peer = peer
        super().__init__(f"{peer}: {message}" if peer else message)


class FramingError(RconError):
    """A frame could not be read or decoded (short read, bad size, bad body).

    ``recoverable`` is False when the rest of the frame was left unread, so the
    stream is no longer positioned at a frame boundary.
    """

    def __init__(self, message: str = "", peer: Optional[str] = None, recoverable: bool = True) -> None:
        self.recoverable = recoverable
        super().__init__(message, peer)


class ConnectionClosed(RconError):
    """The peer closed the stream cleanly between two frames."""


class OversizeError(RconError):
    """Encoded packet exceeds the maximum packet size.

    The encoded bytes are kept on ``data`` for diagnostics only; they must
    never be written to a connection.
    """

    def __init__(self, size: int, limit: int, data: bytes = b"") -> None:
        self.size = size
        self.limit = limit
        self.data = data
        super().__init__(f"the packet exceeds the maximum size of {limit}, packet size {size}")


class AuthError(RconError):
    """Wrong password supplied during authentication."""


class ProtocolViolation(RconError):
    """Packet type not allowed in the current connection state, or auth refused."""


class BindError(RconError):
    """The listening socket could not be set up."""


class AcceptError(RconError):
    """An accepted connection could not be set up."""


__all__ = [
    "RconError",
    "FramingError",
    "ConnectionClosed",
    "OversizeError",
    "AuthError",
    "ProtocolViolation",
    "BindError",
    "AcceptError",
]
