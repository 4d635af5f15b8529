from __future__ import annotations

import asyncio

import pytest

from valve_rcon.client import NetworkError, RconClient
from valve_rcon.protocol import AuthError
from valve_rcon.server.core import RconServer
from valve_rcon.server.main import echo


async def _start() -> RconServer:
    server = RconServer("127.0.0.1", 0, "test")
    server.on_command(echo)
    await server.start()
    return server


def test_client_executes_command():
    async def run():
        server = await _start()
        try:
            host, port = server.address
            async with RconClient(host, port, "test", timeout=2) as client:
                assert client.authenticated
                first = await client.execute("status")
                second = await client.execute("say hi")
            return first, second
        finally:
            await server.stop()

    assert asyncio.run(run()) == ("server: status", "server: say hi")


def test_client_wrong_password():
    async def run():
        server = await _start()
        try:
            host, port = server.address
            client = RconClient(host, port, "nope", timeout=2)
            await client.connect()
            with pytest.raises(AuthError):
                await client.authenticate()
            assert not client.authenticated
            await client.close()
        finally:
            await server.stop()

    asyncio.run(run())


def test_execute_requires_authentication():
    async def run():
        client = RconClient("127.0.0.1", 1, timeout=2)
        with pytest.raises(NetworkError):
            await client.execute("status")

    asyncio.run(run())


def test_connect_failure_raises_network_error():
    async def run():
        server = await _start()
        host, port = server.address
        await server.stop()
        with pytest.raises(NetworkError):
            await RconClient(host, port, timeout=2).connect()

    asyncio.run(run())


def test_missing_response_raises_network_error():
    async def silent(command, session):
        return None

    async def run():
        server = RconServer("127.0.0.1", 0, "test")
        server.on_command(silent)
        await server.start()
        try:
            host, port = server.address
            async with RconClient(host, port, "test", timeout=0.2) as client:
                with pytest.raises(NetworkError):
                    await client.execute("status")
        finally:
            await server.stop()

    asyncio.run(run())
