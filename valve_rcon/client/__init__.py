from .core import NetworkError, RconClient

__all__ = ["NetworkError", "RconClient"]
