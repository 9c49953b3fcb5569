"""Application configuration and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from kube_migrator.core.errors import ConfigurationError

DEFAULT_PROXY_PORT = 8080


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def _default_proxy_manifest_url() -> str:
    return os.environ.get("KMIG_PROXY_MANIFEST_URL", "")


def _default_proxy_port() -> int:
    return _env_int("KMIG_PROXY_PORT", DEFAULT_PROXY_PORT)


def _default_max_workers() -> int:
    return _env_int("KMIG_MAX_WORKERS", 4)


@dataclass
class Settings:
    # Required unless cutover is skipped
    proxy_manifest_url: str = field(default_factory=_default_proxy_manifest_url)
    proxy_port: int = field(default_factory=_default_proxy_port)
    proxy_namespace: str = "proxy"
    proxy_config_name: str = "http-proxy-config"
    request_timeout: int = 30  # seconds, per API call
    manifest_timeout: float = 30.0
    max_workers: int = field(default_factory=_default_max_workers)


# Global singleton
settings = Settings()
