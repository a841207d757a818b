"""Service configuration loaded from a YAML file and the environment."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

_UNITS = {"ns": 1e-9, "us": 1e-6, "µs": 1e-6, "ms": 1e-3, "s": 1.0, "m": 60.0, "h": 3600.0}
_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


class ConfigError(Exception):
    """Raised when the configuration cannot be located, read or validated."""


@dataclass(frozen=True)
class HTTPServerConfig:
    """Settings of the HTTP listener; timeouts are in seconds."""

    user: str
    password: str
    address: str = "localhost8080"
    timeout: float = 4.0
    idle_timeout: float = 60.0


@dataclass(frozen=True)
class Config:
    """Top-level service configuration."""

    storage_path: str
    http_server: HTTPServerConfig
    env: str = "development"


def parse_duration(text: Any) -> float:
    """Parse a duration such as ``4s`` or ``1h30m`` into seconds; bare numbers are nanoseconds."""
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return text / 1e9
    if not isinstance(text, str):
        raise ConfigError(f"invalid duration: {text!r}")
    sign = -1.0 if text.startswith("-") else 1.0
    rest = text.lstrip("+-") if text[:1] in "+-" else text
    if rest == "0":
        return 0.0
    parts = list(_PART.finditer(rest))
    if not rest or "".join(m.group(0) for m in parts) != rest or len(text) - len(rest) > 1:
        raise ConfigError(f"invalid duration: {text!r}")
    return sign * sum(float(m.group(1)) * _UNITS[m.group(2)] for m in parts)


def _pick(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    return None if value is None or value == "" else str(value)


def _require(value: str | None, name: str) -> str:
    if not value:
        raise ConfigError(f'field "{name}" is required but the value is not provided')
    return value


def load_config(path: str | os.PathLike[str], environ: Mapping[str, str] | None = None) -> Config:
    """Read the YAML file at ``path`` and apply environment overrides."""
    environ = os.environ if environ is None else environ
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"error reading config: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("error reading config: top level must be a mapping")
    server = data.get("http_server") or {}
    if not isinstance(server, dict):
        raise ConfigError("error reading config: http_server must be a mapping")

    env = environ["ENV"] if "ENV" in environ else _pick(data, "env")
    credential = environ.get("HTTP_SERVER_PASSWORD", _pick(server, "password"))
    password = _require(credential, "password")
    http_server = HTTPServerConfig(
        address=_pick(server, "address") or "localhost8080",
        timeout=parse_duration(_pick(server, "timeout") and server["timeout"] or "4s"),
        idle_timeout=parse_duration(_pick(server, "idle_timeout") and server["idle_timeout"] or "60s"),
        user=_require(_pick(server, "user"), "user"),
        password=password,
    )
    return Config(
        env=env or "development",
        storage_path=_require(_pick(data, "storage_path"), "storage_path"),
        http_server=http_server,
    )


def must_load(environ: Mapping[str, str] | None = None) -> Config:
    """Load the configuration named by the ``CONFIG_PATH`` variable."""
    environ = os.environ if environ is None else environ
    config_path = environ.get("CONFIG_PATH", "")
    if not config_path:
        raise ConfigError("CONFIG_PATH is not set")
    if not Path(config_path).exists():
        raise ConfigError(f"config file does not exist: {config_path}")
    return load_config(config_path, environ)