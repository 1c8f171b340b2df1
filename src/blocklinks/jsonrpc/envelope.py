"""
JSON-RPC 2.0 request framing and response parsing.

Kept separate from the HTTP transport so both the blocking and the asyncio
transport share one parser, and so a batch call only needs to frame a list
of requests and demultiplex the responses by id.
"""

from __future__ import annotations

from typing import Any, Sequence

import jsonschema

from ..errors import ProtocolError, RpcError

JSONRPC_VERSION = "2.0"

RESPONSE_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "jsonrpc": {"const": JSONRPC_VERSION},
        "id": {"type": ["integer", "string", "null"]},
        "error": {
            "type": "object",
            "required": ["code", "message"],
            "properties": {
                "code": {"type": "integer"},
                "message": {"type": "string"},
            },
        },
    },
    "oneOf": [
        {"required": ["result"], "not": {"required": ["error"]}},
        {"required": ["error"], "not": {"required": ["result"]}},
    ],
}

_VALIDATOR = jsonschema.Draft202012Validator(RESPONSE_SCHEMA)


def build_request(method: str, params: Sequence[Any], request_id: int) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "method": method,
        "params": list(params),
        "id": request_id,
    }


def _format_error(error: jsonschema.ValidationError) -> str:
    location = "/".join(str(part) for part in error.path) or "<root>"
    return f"{location}: {error.message}"


def validate_response(payload: Any) -> None:
    errors = sorted(_VALIDATOR.iter_errors(payload), key=lambda e: [str(part) for part in e.path])
    if errors:
        details = "; ".join(_format_error(err) for err in errors)
        raise ProtocolError(f"Invalid JSON-RPC response: {details}")


def parse_response(payload: Any, request_id: int) -> Any:
    """
    Return the ``result`` of a response envelope.

    Raises:
        ProtocolError: If the envelope is malformed or answers another request
        RpcError: If the node returned an error object
    """
    validate_response(payload)

    if "error" in payload:
        # Nodes answer unparseable requests with "id": null.
        if payload.get("id") not in (None, request_id):
            raise ProtocolError(
                f"Response id {payload.get('id')!r} does not match request id {request_id}"
            )
        error = payload["error"]
        raise RpcError(error["code"], error["message"], error.get("data"))

    if payload.get("id") != request_id:
        raise ProtocolError(
            f"Response id {payload.get('id')!r} does not match request id {request_id}"
        )
    return payload["result"]
