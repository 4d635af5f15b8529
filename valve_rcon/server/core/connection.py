from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ConnectionContext:
    reader: any  # asyncio.StreamReader
    writer: any  # asyncio.StreamWriter
    peername: str
    address: str
    authenticated: bool = False
    frame_errors: int = 0

    def mark_authenticated(self) -> None:
        self.authenticated = True

    def is_authenticated(self) -> bool:
        return self.authenticated

    def is_closing(self) -> bool:
        return self.writer.is_closing()
