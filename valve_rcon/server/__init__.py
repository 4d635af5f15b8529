from .core import RconServer, Session

__all__ = ["RconServer", "Session"]
