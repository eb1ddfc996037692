"""Configuration management for pagetap.

Settings come from defaults, then a pagetap.toml found in the current or a parent
directory, then environment variables. Loaded once per process.

PUBLIC API:
  - Settings: Immutable runtime settings
  - load_settings: Build settings from config file and environment
  - get_settings: Process-wide cached settings
"""

import os
import tomllib
from dataclasses import dataclass, fields, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Optional

CONFIG_FILENAME = "pagetap.toml"

# Environment variable -> setting name
_ENV_VARS = {
    "PAGETAP_HOST": "host",
    "PORT": "port",
    "PAGETAP_CHROME_HOST": "chrome_host",
    "PAGETAP_CHROME_PORT": "chrome_port",
    "PAGETAP_NEW_TARGET": "new_target",
    "PAGETAP_COMMAND_TIMEOUT": "command_timeout",
    "PAGETAP_CONNECT_TIMEOUT": "connect_timeout",
    "PAGETAP_LOAD_TIMEOUT": "load_timeout",
    "PAGETAP_NETWORK_WAIT": "network_wait",
    "PAGETAP_CONSOLE_WAIT": "console_wait",
    "PAGETAP_STATIC_DIR": "static_dir",
    "PAGETAP_HAIKUS": "haikus_path",
}

# pagetap.toml table -> setting names it may hold
_TABLES = {
    "server": ("host", "port", "static_dir", "haikus_path"),
    "chrome": ("chrome_host", "chrome_port", "new_target", "command_timeout", "connect_timeout"),
    "capture": ("load_timeout", "network_wait", "console_wait"),
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the HTTP server and the Chrome connection.

    Attributes:
        host: Interface the HTTP server binds to.
        port: HTTP server port.
        chrome_host: Host of Chrome's remote-debugging endpoint.
        chrome_port: Chrome remote-debugging port.
        new_target: Open a dedicated tab per session instead of using the first page.
        command_timeout: Seconds to wait for each CDP command response.
        connect_timeout: Seconds to wait for the WebSocket to open.
        load_timeout: Seconds to wait for the load event, None waits forever.
        network_wait: Seconds to keep recording network requests after load.
        console_wait: Seconds to keep recording console messages after load.
        static_dir: Directory served at / when it exists.
        haikus_path: JSON file with the index page collection, None uses the packaged one.
    """

    host: str = "0.0.0.0"
    port: int = 3000
    chrome_host: str = "localhost"
    chrome_port: int = 9222
    new_target: bool = True
    command_timeout: float = 30.0
    connect_timeout: float = 5.0
    load_timeout: Optional[float] = None
    network_wait: float = 2.0
    console_wait: float = 1.0
    static_dir: Optional[str] = "public"
    haikus_path: Optional[str] = None

    @property
    def chrome_url(self) -> str:
        """HTTP base URL of Chrome's debugging endpoint."""
        return f"http://{self.chrome_host}:{self.chrome_port}"


def _find_config_file() -> Optional[Path]:
    """Find pagetap.toml in current or parent directories."""
    current = Path.cwd()

    for parent in [current] + list(current.parents):
        config_file = parent / CONFIG_FILENAME
        if config_file.exists():
            return config_file

    return None


def _load_config(path: Optional[Path] = None) -> dict:
    """Load raw configuration from file."""
    if path is None:
        path = _find_config_file()

    if path is None or not path.exists():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw config or environment value to the type of the named setting."""
    if name in ("port", "chrome_port"):
        return int(value)

    if name in ("command_timeout", "connect_timeout", "network_wait", "console_wait"):
        return float(value)

    if name == "load_timeout":
        if value is None or (isinstance(value, str) and value.strip().lower() in ("", "none")):
            return None
        return float(value)

    if name == "new_target":
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ValueError(f"Invalid boolean for {name}: {value!r}")

    if name in ("static_dir", "haikus_path"):
        return str(value) if value not in (None, "") else None

    return str(value)


def load_settings(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from pagetap.toml and the environment.

    Args:
        path: Explicit config file. Defaults to searching upward from cwd.
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        Settings with environment values taking precedence over the file.

    Raises:
        ValueError: If a value cannot be converted to its setting's type.
    """
    environ = os.environ if environ is None else environ
    data = _load_config(path)
    overrides: dict[str, Any] = {}

    for table, names in _TABLES.items():
        section = data.get(table, {})
        if not isinstance(section, dict):
            continue
        for name in names:
            if name in section:
                overrides[name] = _coerce(name, section[name])

    for env_var, name in _ENV_VARS.items():
        if env_var in environ:
            overrides[name] = _coerce(name, environ[env_var])

    known = {f.name for f in fields(Settings)}
    return replace(Settings(), **{k: v for k, v in overrides.items() if k in known})


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings for this process, loaded on first use."""
    return load_settings()


__all__ = ["Settings", "load_settings", "get_settings", "CONFIG_FILENAME"]
