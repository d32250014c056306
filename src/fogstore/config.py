"""Configuration for the fogstore gateway.

Reads from config/fogstore.ini if present, environment variables override.
API keys never checked into version control.
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path

_CONFIG_FILE = Path(__file__).resolve().parent.parent.parent / "config" / "fogstore.ini"


@dataclass(frozen=True)
class FogConfig:
    """Gateway configuration. Immutable once loaded."""

    db_path: str = ""
    contract_address: str = ""
    chain_id: int = 0
    duration_days: int = 30
    sign_timeout: float = 120.0
    api_key: str = ""
    host: str = "127.0.0.1"
    port: int = 8000


_INI_KEYS = {
    "storage": [("path", "db_path")],
    "session": [
        ("contract_address", "contract_address"),
        ("chain_id", "chain_id"),
        ("duration_days", "duration_days"),
        ("sign_timeout", "sign_timeout"),
    ],
    "gateway": [("api_key", "api_key"), ("host", "host"), ("port", "port")],
}

_ENV_MAP = {
    "FOGSTORE_DB_PATH": "db_path",
    "FOGSTORE_CONTRACT_ADDRESS": "contract_address",
    "FOGSTORE_CHAIN_ID": "chain_id",
    "FOGSTORE_DURATION_DAYS": "duration_days",
    "FOGSTORE_SIGN_TIMEOUT": "sign_timeout",
    "FOGSTORE_API_KEY": "api_key",
    "FOGSTORE_HOST": "host",
    "FOGSTORE_PORT": "port",
}

_CASTS = {"chain_id": int, "duration_days": int, "port": int, "sign_timeout": float}


def load_config(config_path: Path | None = None) -> FogConfig:
    """Load config from INI file, then override with environment variables."""
    path = config_path or _CONFIG_FILE
    raw: dict[str, str] = {}

    if path.exists():
        parser = configparser.ConfigParser()
        parser.read(path)
        for section, keys in _INI_KEYS.items():
            if not parser.has_section(section):
                continue
            for ini_key, config_key in keys:
                val = parser.get(section, ini_key, fallback=None)
                if val is not None:
                    raw[config_key] = val

    for env_key, config_key in _ENV_MAP.items():
        val = os.getenv(env_key)
        if val is not None:
            raw[config_key] = val

    kwargs = {k: _CASTS.get(k, str)(v) for k, v in raw.items()}
    return FogConfig(**kwargs)
