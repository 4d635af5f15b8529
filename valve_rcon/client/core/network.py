from __future__ import annotations

import asyncio
import contextlib
import itertools
import logging
from typing import Optional

from valve_rcon.protocol import (
    AUTH_FAILED_ID,
    DEFAULT_PORT,
    AuthError,
    Origin,
    Packet,
    PacketType,
    ProtocolViolation,
    RconError,
    encode_packet,
    read_packet,
)

logger = logging.getLogger(__name__)


class NetworkError(RconError):
    """Network level error surfaced to higher layers."""

    pass


class RconClient:
    """TCP client that authenticates once and then runs commands one at a time."""

    def __init__(self, host: str, port: int = DEFAULT_PORT, password: str = "", timeout: float = 10.0) -> None:
        self.host = host
        self.port = port
        self.password = password
        self.timeout = timeout
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.authenticated: bool = False
        self._ids = itertools.count(1)

    @property
    def connected(self) -> bool:
        return self.writer is not None and not self.writer.is_closing()

    async def connect(self) -> None:
        if self.connected:
            return
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), self.timeout
            )
        except (OSError, asyncio.TimeoutError) as exc:
            raise NetworkError(f"could not connect to {self.host}:{self.port}: {exc}") from exc
        logger.info("Connected to %s:%s", self.host, self.port)

    async def close(self) -> None:
        self.authenticated = False
        if self.writer:
            self.writer.close()
            with contextlib.suppress(ConnectionError):
                await self.writer.wait_closed()
        self.reader = self.writer = None
        logger.info("RCON client closed")

    async def __aenter__(self) -> "RconClient":
        await self.connect()
        if self.password:
            await self.authenticate()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def send(self, packet: Packet) -> None:
        if not self.connected:
            raise NetworkError("not connected")
        self.writer.write(encode_packet(packet))
        await self.writer.drain()

    async def receive(self) -> Packet:
        if self.reader is None:
            raise NetworkError("not connected")
        try:
            return await asyncio.wait_for(read_packet(self.reader, Origin.SERVER), self.timeout)
        except asyncio.TimeoutError as exc:
            raise NetworkError(f"no response from {self.host}:{self.port} within {self.timeout}s") from exc

    async def authenticate(self, password: Optional[str] = None) -> int:
        """Authenticate and return the request id the server echoed back."""
        request_id = next(self._ids)
        await self.send(Packet(id=request_id, type=PacketType.AUTH, body=self.password if password is None else password))
        response = await self.receive()
        if response.type is not PacketType.AUTH_RESPONSE:
            raise ProtocolViolation(f"expected {PacketType.AUTH_RESPONSE.describe()}, got {response.type.describe()}")
        if response.id == AUTH_FAILED_ID:
            raise AuthError("wrong password", peer=f"{self.host}:{self.port}")
        if response.id != request_id:
            raise ProtocolViolation(f"auth response id {response.id} does not match request id {request_id}")
        self.authenticated = True
        return response.id

    async def execute(self, command: str) -> str:
        """Run a command and return the body of its (single) response packet."""
        if not self.authenticated:
            raise NetworkError("not authenticated")
        request_id = next(self._ids)
        await self.send(Packet(id=request_id, type=PacketType.EXEC_COMMAND, body=command))
        while True:
            response = await self.receive()
            if response.id == request_id and response.type is PacketType.RESPONSE_VALUE:
                return response.body
            logger.debug("Discarding unexpected packet %r", response)


__all__ = ["NetworkError", "RconClient"]
