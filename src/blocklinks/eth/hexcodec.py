"""
Hex codec for the Ethereum JSON-RPC wire conventions.

Quantity: ``0x``-prefixed lowercase hex with no leading zeros (``0x0`` for zero).
Data: ``0x``-prefixed hex with an even number of digits (``0x`` when empty).

Decoders are strict about the prefix (``0x`` only, no whitespace) and the
digit alphabet. Quantities with leading zeros are accepted on decode
unless ``strict=True``; encoders always emit the minimal form.
"""

from __future__ import annotations

import re
from typing import Union

from ..errors import CodecError

ADDRESS_LENGTH = 42
HASH_LENGTH = 66

BLOCK_TAGS = frozenset({"latest", "pending", "earliest", "safe", "finalized"})

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")

BlockTag = Union[str, int]
BytesLike = Union[bytes, bytearray, memoryview]


def _digits(value: object, what: str) -> str:
    if not isinstance(value, str):
        raise CodecError(f"{what} must be a hex string, got {type(value).__name__}")
    if not value.startswith("0x"):
        raise CodecError(f"{what} must start with '0x': {value!r}")
    return value[2:]


def encode_quantity(value: int) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise CodecError(f"Quantity must be an int, got {type(value).__name__}")
    if value < 0:
        raise CodecError(f"Quantity must be non-negative, got {value}")
    return hex(value)


def decode_quantity(value: str, strict: bool = False) -> int:
    digits = _digits(value, "Quantity")
    if not digits:
        raise CodecError("Quantity has no digits: '0x'")
    if not _HEX_DIGITS.fullmatch(digits):
        raise CodecError(f"Quantity is not hex: {value!r}")
    if strict and len(digits) > 1 and digits[0] == "0":
        raise CodecError(f"Quantity has leading zeros: {value!r}")
    return int(digits, 16)


def encode_data(data: BytesLike) -> str:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise CodecError(f"Data must be bytes, got {type(data).__name__}")
    return "0x" + bytes(data).hex()


def decode_data(value: str) -> bytes:
    return bytes.fromhex(normalize_data(value)[2:])


def normalize_data(value: str) -> str:
    """Validate a Data hex string and return it lowercased."""
    digits = _digits(value, "Data")
    if len(digits) % 2:
        raise CodecError(f"Data has an odd number of hex digits: {value!r}")
    if digits and not _HEX_DIGITS.fullmatch(digits):
        raise CodecError(f"Data is not hex: {value!r}")
    return "0x" + digits.lower()


def to_data(value: Union[str, BytesLike]) -> str:
    """Accept either a Data hex string or raw bytes, return wire Data."""
    if isinstance(value, str):
        return normalize_data(value)
    return encode_data(value)


def _fixed_hex(value: object, length: int, what: str) -> str:
    digits = _digits(value, what)
    if len(digits) + 2 != length:
        raise CodecError(f"{what} must be {length} characters, got {len(digits) + 2}: {value!r}")
    if not _HEX_DIGITS.fullmatch(digits):
        raise CodecError(f"{what} is not hex: {value!r}")
    return "0x" + digits.lower()


def normalize_address(value: str) -> str:
    """Lowercase a 20-byte address. EIP-55 checksums are not verified."""
    return _fixed_hex(value, ADDRESS_LENGTH, "Address")


def normalize_hash(value: str) -> str:
    return _fixed_hex(value, HASH_LENGTH, "Hash")


def encode_block_tag(tag: BlockTag) -> str:
    """Encode a block parameter: a named tag or a block number."""
    if isinstance(tag, str):
        if tag not in BLOCK_TAGS:
            raise CodecError(f"Unknown block tag {tag!r}; expected one of {sorted(BLOCK_TAGS)} or a block number")
        return tag
    return encode_quantity(tag)
