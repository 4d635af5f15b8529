from __future__ import annotations

import logging
import os
from typing import Any, Dict, List

from dotenv import load_dotenv

from valve_rcon.protocol import DEFAULT_PORT
from valve_rcon.server.core.server import DEFAULT_MAX_FRAME_ERRORS

DEFAULT_SERVER_CONFIG: Dict[str, Any] = {
    "host": "0.0.0.0",
    "port": DEFAULT_PORT,
    "password": "",
    "ban_list": [],
    "log_level": "INFO",
    "idle_timeout": 0.0,  # seconds, 0 disables
    "max_frame_errors": DEFAULT_MAX_FRAME_ERRORS,
}

SERVER_CONFIG: Dict[str, Any] = {key: (value.copy() if isinstance(value, list) else value) for key, value in DEFAULT_SERVER_CONFIG.items()}


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


def load_server_config(env_path: str = ".env") -> Dict[str, Any]:
    """Load server configuration from an env file and RCON_* environment variables."""
    if os.path.exists(env_path):
        load_dotenv(env_path)

    for key, default_value in DEFAULT_SERVER_CONFIG.items():
        env_key = f"RCON_{key.upper()}"
        value = os.getenv(env_key)
        if value is None:
            value = default_value
        SERVER_CONFIG[key] = _coerce_type(value, type(default_value))

    _validate_config()
    return SERVER_CONFIG


def _split_addresses(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _coerce_type(value: Any, target_type: type) -> Any:
    if target_type is list:
        return list(value) if isinstance(value, list) else _split_addresses(str(value))
    if isinstance(value, target_type):
        return value
    try:
        if target_type is bool:
            return str(value).lower() in ("1", "true", "yes", "on")
        return target_type(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Cannot convert {value} to {target_type}") from exc


def _validate_config() -> None:
    if not (1 <= SERVER_CONFIG["port"] <= 65535):
        raise ConfigError("port must be between 1 and 65535")
    if SERVER_CONFIG["idle_timeout"] < 0:
        raise ConfigError("idle_timeout must not be negative")
    if SERVER_CONFIG["max_frame_errors"] < 1:
        raise ConfigError("max_frame_errors must be at least 1")
    SERVER_CONFIG["log_level"] = SERVER_CONFIG["log_level"].upper()
    if not isinstance(logging.getLevelName(SERVER_CONFIG["log_level"]), int):
        raise ConfigError(f"unknown log_level {SERVER_CONFIG['log_level']}")


__all__ = ["SERVER_CONFIG", "DEFAULT_SERVER_CONFIG", "ConfigError", "load_server_config"]
