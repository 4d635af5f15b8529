from .network import NetworkError, RconClient

__all__ = ["NetworkError", "RconClient"]
