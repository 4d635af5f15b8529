from __future__ import annotations

import asyncio
import logging
from typing import Dict, List

from .connection import ConnectionContext

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks active connections so they can be listed and closed on shutdown."""

    def __init__(self) -> None:
        self._by_writer: Dict[asyncio.StreamWriter, ConnectionContext] = {}

    def register(self, writer: asyncio.StreamWriter, ctx: ConnectionContext) -> None:
        self._by_writer[writer] = ctx

    def unregister(self, writer: asyncio.StreamWriter) -> None:
        self._by_writer.pop(writer, None)

    def active(self) -> List[ConnectionContext]:
        return list(self._by_writer.values())

    def authenticated(self) -> List[ConnectionContext]:
        return [ctx for ctx in self._by_writer.values() if ctx.is_authenticated()]

    def __len__(self) -> int:
        return len(self._by_writer)

    def close_all(self) -> int:
        """Close every tracked connection; their tasks finish on their own."""
        count = 0
        for writer in list(self._by_writer):
            if not writer.is_closing():
                writer.close()
                count += 1
        if count:
            logger.info("Closed %s active connections", count)
        return count
