from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import FrozenSet, Iterable, Optional, Tuple

from valve_rcon.protocol import (
    AUTH_FAILED_ID,
    DEFAULT_PORT,
    AcceptError,
    AuthError,
    BindError,
    ConnectionClosed,
    FramingError,
    Packet,
    PacketType,
    ProtocolViolation,
    encode_packet,
    read_packet,
)

from .connection import ConnectionContext
from .connection_manager import ConnectionManager
from .session import Session

logger = logging.getLogger(__name__)

CommandHandler = Callable[[str, Session], Awaitable[None]]

DEFAULT_MAX_FRAME_ERRORS = 3


class RconServer:
    """Source RCON server: password authentication, then commands to a single handler."""

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        password: str = "",
        idle_timeout: Optional[float] = None,
        max_frame_errors: int = DEFAULT_MAX_FRAME_ERRORS,
    ) -> None:
        self.host = host
        self.port = port
        self.password = password
        self.idle_timeout = idle_timeout
        self.max_frame_errors = max_frame_errors
        self.connection_manager = ConnectionManager()
        self._ban_list: FrozenSet[str] = frozenset()
        self._handler: Optional[CommandHandler] = None
        self._server: Optional[asyncio.AbstractServer] = None

    @property
    def ban_list(self) -> FrozenSet[str]:
        return self._ban_list

    def set_ban_list(self, addresses: Iterable[str]) -> None:
        """Replace the ban list; addresses are compared without their port."""
        self._ban_list = frozenset(addresses)

    def on_command(self, handler: Optional[CommandHandler]) -> None:
        """Register the command handler. Connections use the handler set when they were accepted."""
        self._handler = handler

    def is_banned(self, address: str) -> bool:
        return address in self._ban_list

    @property
    def address(self) -> Tuple[str, int]:
        """Address the listener is bound to."""
        if self._server is None or not self._server.sockets:
            raise RuntimeError("server is not listening")
        sockname = self._server.sockets[0].getsockname()
        return sockname[0], sockname[1]

    def is_serving(self) -> bool:
        return self._server is not None and self._server.is_serving()

    async def start(self) -> None:
        try:
            self._server = await asyncio.start_server(self._handle_client, self.host, self.port)
        except OSError as exc:
            raise BindError(f"could not listen on {self.host}:{self.port}: {exc}") from exc
        logger.info("Starting RCON server on %s:%s", *self.address)

    async def listen_and_serve(self) -> None:
        """Bind and serve until stop() is called or the task is cancelled."""
        await self.start()
        try:
            await self._server.serve_forever()
        except asyncio.CancelledError:
            # stop() clears _server before closing; anything else is a real cancellation
            if self._server is not None:
                raise
        finally:
            await self.stop()

    async def stop(self) -> None:
        server, self._server = self._server, None
        if server is None:
            return
        server.close()
        self.connection_manager.close_all()
        await server.wait_closed()
        logger.info("RCON server stopped")

    async def __aenter__(self) -> "RconServer":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            peername, address = _peer(writer)
        except AcceptError as exc:
            logger.warning("Could not accept connection: %s", exc)
            writer.close()
            return

        if self.is_banned(address):
            logger.warning("Address %s present in ban list, dropping", address)
            writer.close()
            return

        logger.info("New connection from %s", peername)
        ctx = ConnectionContext(reader=reader, writer=writer, peername=peername, address=address)
        handler = self._handler
        self.connection_manager.register(writer, ctx)
        try:
            while not ctx.is_closing():
                try:
                    packet = await self._next_packet(ctx)
                except FramingError as exc:
                    ctx.frame_errors += 1
                    logger.warning("%s: could not read packet, %s", peername, exc)
                    if not exc.recoverable:
                        raise ProtocolViolation(f"stream out of sync: {exc.message}") from exc
                    if ctx.frame_errors >= self.max_frame_errors:
                        raise ProtocolViolation(f"{ctx.frame_errors} consecutive malformed packets") from exc
                    continue
                ctx.frame_errors = 0
                await self._process(packet, ctx, handler)
        except ConnectionClosed:
            logger.info("%s: connection closed", peername)
        except asyncio.TimeoutError:
            logger.info("%s: idle for %ss, closing", peername, self.idle_timeout)
        except (AuthError, ProtocolViolation) as exc:
            logger.warning("%s: %s", peername, exc.message)
        except (ConnectionResetError, ConnectionAbortedError, BrokenPipeError, OSError) as exc:
            logger.info("%s: connection reset: %s", peername, exc)
        except Exception as exc:
            logger.exception("Unhandled error for %s: %s", peername, exc)
        finally:
            try:
                writer.close()
                await writer.wait_closed()
            except Exception as e:
                logger.debug("Error during writer cleanup: %s", e)
            finally:
                self.connection_manager.unregister(writer)

    async def _next_packet(self, ctx: ConnectionContext) -> Packet:
        if self.idle_timeout:
            return await asyncio.wait_for(read_packet(ctx.reader), self.idle_timeout)
        return await read_packet(ctx.reader)

    async def _process(self, packet: Packet, ctx: ConnectionContext, handler: Optional[CommandHandler]) -> None:
        if ctx.is_authenticated():
            if packet.type is PacketType.EXEC_COMMAND:
                await self._run_handler(packet, ctx, handler)
            else:
                logger.debug("%s: ignoring %s packet after authentication", ctx.peername, packet.type.describe())
            return

        if packet.type is not PacketType.AUTH:
            raise ProtocolViolation(f"got wrong packet type, expected {PacketType.AUTH.describe()}, got {packet.type.describe()}")

        if not self.password:
            raise ProtocolViolation("RCON password not set, refusing connection")

        correct = packet.body == self.password
        response = Packet(id=packet.id if correct else AUTH_FAILED_ID, type=PacketType.AUTH_RESPONSE)
        ctx.writer.write(encode_packet(response))
        await ctx.writer.drain()

        if not correct:
            raise AuthError("wrong password provided")
        ctx.mark_authenticated()
        logger.info("%s: connection authenticated with password", ctx.peername)

    async def _run_handler(self, packet: Packet, ctx: ConnectionContext, handler: Optional[CommandHandler]) -> None:
        if handler is None:
            logger.debug("%s: no command handler registered, dropping command", ctx.peername)
            return
        try:
            await handler(packet.body, Session(ctx, packet.id))
        except Exception as exc:
            logger.exception("%s: command handler failed: %s", ctx.peername, exc)


def _peer(writer: asyncio.StreamWriter) -> Tuple[str, str]:
    """Return the printable peer name and the peer address without its port."""
    peer = writer.get_extra_info("peername")
    if not peer:
        raise AcceptError("peer address unavailable")
    if isinstance(peer, (tuple, list)):
        host, port = peer[0], peer[1]
        return f"{host}:{port}", str(host)
    return str(peer), str(peer)


__all__ = ["CommandHandler", "DEFAULT_MAX_FRAME_ERRORS", "RconServer"]
