from __future__ import annotations

import contextlib
import logging

from valve_rcon.protocol import Packet, PacketType, encode_packet

from .connection import ConnectionContext

logger = logging.getLogger(__name__)


class Session:
    """
    Write handle for one inbound command.

    Every response written through it carries the id of the command packet
    that created it, so a handler must not keep it around to answer later
    commands.
    """

    def __init__(self, ctx: ConnectionContext, request_id: int) -> None:
        self._ctx = ctx
        self._request_id = request_id

    @property
    def request_id(self) -> int:
        return self._request_id

    @property
    def peername(self) -> str:
        return self._ctx.peername

    @property
    def address(self) -> str:
        return self._ctx.address

    async def write(self, content: str) -> None:
        """Send ``content`` as a response value; OversizeError is raised before anything is sent."""
        data = encode_packet(Packet(id=self._request_id, type=PacketType.RESPONSE_VALUE, body=content))
        self._ctx.writer.write(data)
        await self._ctx.writer.drain()

    async def close(self) -> None:
        writer = self._ctx.writer
        if writer.is_closing():
            return
        writer.close()
        with contextlib.suppress(ConnectionError):
            await writer.wait_closed()
        logger.debug("Session closed connection %s", self._ctx.peername)

    def __repr__(self) -> str:
        return f"<Session {self._ctx.peername} id={self._request_id}>"
