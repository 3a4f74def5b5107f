"""
Store endpoint settings.

Precedence, lowest to highest: built-in defaults, JSON config file
(--config, MINTY_CONFIG, or /etc/minty/config.json if present),
MINTY_IPFS_* environment variables, CLI flags.
"""

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path

from minty.local_ipfs.errors import ConfigError

# --- Constants ---

DEFAULT_API_URL = "http://localhost:5001"
DEFAULT_GATEWAY_URL = "http://localhost:8080/ipfs"
DEFAULT_TIMEOUT = 60.0
DEFAULT_CONFIG_PATH = Path("/etc/minty/config.json")

ENV_CONFIG = "MINTY_CONFIG"
ENV_OVERRIDES = {
    "api_url": "MINTY_IPFS_API_URL",
    "gateway_url": "MINTY_IPFS_GATEWAY_URL",
    "timeout": "MINTY_IPFS_TIMEOUT",
}


@dataclass(frozen=True)
class StoreSettings:
    api_url: str = DEFAULT_API_URL
    gateway_url: str = DEFAULT_GATEWAY_URL
    timeout: float = DEFAULT_TIMEOUT

    def override(self, **changes) -> "StoreSettings":
        """Return a copy with the non-None ``changes`` applied and normalized."""
        changes = {k: v for k, v in changes.items() if v is not None}
        return _normalize(replace(self, **changes))


def _parse_timeout(value) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid timeout: {value!r}") from None
    if timeout <= 0:
        raise ConfigError(f"Timeout must be positive, got {value!r}")
    return timeout


def _normalize(settings: StoreSettings) -> StoreSettings:
    return StoreSettings(
        api_url=str(settings.api_url).rstrip("/"),
        gateway_url=str(settings.gateway_url).rstrip("/"),
        timeout=_parse_timeout(settings.timeout),
    )


def _read_config_file(path: Path) -> dict:
    try:
        data = json.loads(path.read_text())
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a JSON object")
    return {k: data[k] for k in ENV_OVERRIDES if k in data}


def load_settings(path=None, environ=None) -> StoreSettings:
    """Build settings from defaults, config file and environment.

    An explicitly requested file (argument or MINTY_CONFIG) must exist;
    DEFAULT_CONFIG_PATH is read only when present.
    """
    environ = os.environ if environ is None else environ
    values = {}

    config_path = path or environ.get(ENV_CONFIG)
    if config_path:
        values.update(_read_config_file(Path(config_path)))
    elif DEFAULT_CONFIG_PATH.is_file():
        values.update(_read_config_file(DEFAULT_CONFIG_PATH))

    for key, var in ENV_OVERRIDES.items():
        if environ.get(var):
            values[key] = environ[var]

    return StoreSettings().override(**values)

