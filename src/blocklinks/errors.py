"""
Error taxonomy for the blocklinks client.

Every failure raised by the library derives from ``BlocklinksError``.
httpx and json exceptions never escape: they are re-raised as one of the
classes below with the original exception chained as ``__cause__``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class BlocklinksError(Exception):
    """Base class for all client failures."""


class ConfigError(BlocklinksError, ValueError):
    """Bad endpoint URL, port or timeout."""


class CodecError(BlocklinksError, ValueError):
    """Malformed hex input or a value the encoder cannot represent."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class DecodeError(BlocklinksError):
    """A field of a typed response could not be decoded."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class TransportErrorKind(str, Enum):
    CONNECT = "connect"
    TIMEOUT = "timeout"
    CANCELED = "canceled"
    IO = "io"
    HTTP_STATUS = "http_status"


class TransportError(BlocklinksError):
    """Network layer failure: the node never produced a usable HTTP response."""

    def __init__(
        self,
        kind: TransportErrorKind,
        detail: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(f"{kind.value}: {detail}")
        self.kind = kind
        self.detail = detail
        self.status_code = status_code


class ProtocolError(BlocklinksError):
    """The HTTP body is not a valid JSON-RPC 2.0 response."""


class RpcError(BlocklinksError):
    """Error object returned by the node, surfaced verbatim."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data
