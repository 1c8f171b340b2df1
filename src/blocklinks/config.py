"""
Endpoint configuration.

The library never reads the environment; callers build an
``EndpointConfig`` (or pass a URL string to the client, which builds one).
Validation happens here so a bad endpoint fails at construction time.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import httpx

from .errors import ConfigError

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8545
DEFAULT_URL = f"http://{DEFAULT_HOST}:{DEFAULT_PORT}/"
DEFAULT_TIMEOUT = 30.0

_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class EndpointConfig:
    url: str = DEFAULT_URL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        _validate_url(self.url)
        _validate_timeout(self.timeout)

    @classmethod
    def from_host(
        cls,
        hostname: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        scheme: str = "http",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> "EndpointConfig":
        """Build ``scheme://hostname:port/`` the way a local node is addressed."""
        if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
            raise ConfigError(f"Invalid port: {port!r}")
        if not isinstance(hostname, str) or not hostname:
            raise ConfigError(f"Invalid hostname: {hostname!r}")
        return cls(url=f"{scheme}://{hostname}:{port}/", timeout=timeout)


def _validate_url(url: object) -> None:
    if not isinstance(url, str) or not url:
        raise ConfigError(f"Endpoint URL must be a non-empty string, got {url!r}")
    try:
        parsed = httpx.URL(url)
        port = parsed.port
    except (httpx.InvalidURL, ValueError) as exc:
        raise ConfigError(f"Malformed endpoint URL {url!r}: {exc}") from exc
    if parsed.scheme not in _SCHEMES:
        raise ConfigError(f"Endpoint URL must use http:// or https:// (got: {url!r})")
    if not parsed.host:
        raise ConfigError(f"Endpoint URL has no host: {url!r}")
    if port is not None and not 0 < port < 65536:
        raise ConfigError(f"Endpoint URL has an invalid port: {url!r}")


def _validate_timeout(timeout: object) -> None:
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise ConfigError(f"Timeout must be a number of seconds, got {timeout!r}")
    if not math.isfinite(timeout) or timeout <= 0:
        raise ConfigError(f"Timeout must be positive and finite, got {timeout!r}")
