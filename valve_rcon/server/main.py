from __future__ import annotations

import asyncio
import logging

from valve_rcon.server.config import SERVER_CONFIG, load_server_config
from valve_rcon.server.core import RconServer, Session

logger = logging.getLogger(__name__)


async def echo(command: str, session: Session) -> None:
    logger.info("%s: command: %s", session.peername, command)
    await session.write("server: " + command)


async def run_server() -> None:
    load_server_config()
    logging.basicConfig(level=SERVER_CONFIG["log_level"])

    server = RconServer(
        SERVER_CONFIG["host"],
        SERVER_CONFIG["port"],
        SERVER_CONFIG["password"],
        idle_timeout=SERVER_CONFIG["idle_timeout"] or None,
        max_frame_errors=SERVER_CONFIG["max_frame_errors"],
    )
    server.set_ban_list(SERVER_CONFIG["ban_list"])
    server.on_command(echo)
    await server.listen_and_serve()


if __name__ == "__main__":
    asyncio.run(run_server())
