"""Server configuration from an optional YAML file and environment variables."""
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "RPC_"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class Settings:
    host: str = "127.0.0.1"
    port: int = 3000
    endpoint: str = "/api"
    log_level: str = "INFO"
    handler_timeout: Optional[float] = None
    decode_params: bool = False


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw YAML or environment value to the field's type."""
    if name == "port":
        return int(value)
    if name == "handler_timeout":
        if value is None or str(value).strip().lower() in ("", "none"):
            return None
        timeout = float(value)
        if timeout <= 0:
            raise ValueError(f"handler_timeout must be positive, got {timeout}")
        return timeout
    if name == "decode_params":
        return _parse_bool(value)
    if name == "log_level":
        level = str(value).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level
    return str(value)


def _load_yaml(config_path: Path) -> Dict[str, Any]:
    """Load configuration from a YAML file."""
    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")
    return data


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Build settings from defaults, then a YAML file, then the environment.

    The YAML path comes from ``config_path`` or the ``RPC_CONFIG`` variable.
    Environment variables are the field names upper-cased with an ``RPC_``
    prefix, e.g. ``RPC_PORT``.
    """
    values: Dict[str, Any] = {}
    known = {f.name for f in fields(Settings)}

    path = config_path or os.getenv("RPC_CONFIG")
    if path:
        for key, value in _load_yaml(Path(path)).items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            values[key] = _coerce(key, value)
        logger.info(f"Loaded configuration from {path}")

    for name in known:
        env_value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if env_value is not None:
            values[name] = _coerce(name, env_value)

    return Settings(**values)
