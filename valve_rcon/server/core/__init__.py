from .connection import ConnectionContext
from .connection_manager import ConnectionManager
from .server import CommandHandler, RconServer
from .session import Session

__all__ = ["CommandHandler", "ConnectionContext", "ConnectionManager", "RconServer", "Session"]
