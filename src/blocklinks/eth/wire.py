"""
Wire types for the Ethereum JSON-RPC payloads.

Each type maps Python snake_case attributes to the node's camelCase keys.
Numeric fields are ints, addresses and hashes are lowercase hex strings,
byte payloads stay as ``0x`` hex strings. Emission omits absent optional
fields instead of sending null; decoding ignores keys it does not know.

Any field that fails to decode raises ``DecodeError(field, reason)``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional, TypeVar, Union

from ..errors import CodecError, DecodeError
from .hexcodec import (
    decode_quantity,
    encode_quantity,
    normalize_address,
    normalize_data,
    normalize_hash,
    to_data,
)

T = TypeVar("T")


@dataclass(frozen=True)
class _Codec:
    encode: Callable[[Any], Any]
    decode: Callable[[Any], Any]


QUANTITY = _Codec(encode_quantity, decode_quantity)
ADDRESS = _Codec(normalize_address, normalize_address)
HASH = _Codec(normalize_hash, normalize_hash)
DATA = _Codec(to_data, normalize_data)


def _decode_field(
    payload: Mapping[str, Any],
    key: str,
    decoder: Callable[[Any], T],
    optional: bool = False,
) -> Optional[T]:
    value = payload.get(key)
    if value is None:
        if optional:
            return None
        raise DecodeError(key, "missing required field")
    try:
        return decoder(value)
    except CodecError as exc:
        raise DecodeError(key, exc.reason) from exc


def _decode_list(
    payload: Mapping[str, Any],
    key: str,
    decoder: Callable[[Any], T],
) -> tuple[T, ...]:
    value = payload.get(key)
    if value is None:
        return ()
    if not isinstance(value, list):
        raise DecodeError(key, f"expected a list, got {type(value).__name__}")
    items = []
    for index, item in enumerate(value):
        try:
            items.append(decoder(item))
        except CodecError as exc:
            raise DecodeError(f"{key}[{index}]", exc.reason) from exc
    return tuple(items)


def _require_mapping(payload: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise DecodeError(what, f"expected an object, got {type(payload).__name__}")
    return payload


# (attribute, wire key, codec) for the fields a caller may submit.
_CALL_FIELDS = (
    ("from_", "from", ADDRESS),
    ("to", "to", ADDRESS),
    ("gas", "gas", QUANTITY),
    ("gas_price", "gasPrice", QUANTITY),
    ("value", "value", QUANTITY),
    ("data", "data", DATA),
    ("nonce", "nonce", QUANTITY),
)


@dataclass(frozen=True)
class TransactionCall:
    """
    Read-only invocation shape for ``eth_call``; every field is optional.

    ``data`` may be given as raw bytes or as a ``0x`` hex string.
    """

    from_: str | None = None
    to: str | None = None
    gas: int | None = None
    gas_price: int | None = None
    value: int | None = None
    data: str | bytes | None = None
    nonce: int | None = None

    def to_dict(self) -> dict[str, str]:
        """Encode to the wire shape. Raises ``CodecError`` on bad input."""
        payload: dict[str, str] = {}
        for attr, key, codec in _CALL_FIELDS:
            value = getattr(self, attr)
            if value is not None:
                payload[key] = codec.encode(value)
        return payload

    @classmethod
    def _decode_call_fields(cls, payload: Mapping[str, Any]) -> dict[str, Any]:
        values = {
            attr: _decode_field(payload, key, codec.decode, optional=True)
            for attr, key, codec in _CALL_FIELDS
        }
        # Transactions read back from the node carry their payload in "input".
        if values["data"] is None:
            values["data"] = _decode_field(payload, "input", normalize_data, optional=True)
        return values

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TransactionCall":
        return cls(**cls._decode_call_fields(_require_mapping(payload, "transaction")))


@dataclass(frozen=True)
class Transaction(TransactionCall):
    """
    A transaction, either for submission or as returned by the node.

    The submission fields are those of ``TransactionCall``. ``hash``,
    ``block_hash``, ``block_number`` and ``transaction_index`` are only
    populated on transactions read back from the node and are never emitted.
    """

    hash: str | None = None
    block_hash: str | None = None
    block_number: int | None = None
    transaction_index: int | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Transaction":
        payload = _require_mapping(payload, "transaction")
        return cls(
            **cls._decode_call_fields(payload),
            hash=_decode_field(payload, "hash", normalize_hash, optional=True),
            block_hash=_decode_field(payload, "blockHash", normalize_hash, optional=True),
            block_number=_decode_field(payload, "blockNumber", decode_quantity, optional=True),
            transaction_index=_decode_field(payload, "transactionIndex", decode_quantity, optional=True),
        )


@dataclass(frozen=True)
class Log:
    address: str
    topics: tuple[str, ...]
    data: str
    block_number: int | None = None
    block_hash: str | None = None
    transaction_hash: str | None = None
    transaction_index: int | None = None
    log_index: int | None = None
    removed: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Log":
        payload = _require_mapping(payload, "log")
        return cls(
            address=_decode_field(payload, "address", normalize_address),
            topics=_decode_list(payload, "topics", normalize_hash),
            data=_decode_field(payload, "data", normalize_data),
            block_number=_decode_field(payload, "blockNumber", decode_quantity, optional=True),
            block_hash=_decode_field(payload, "blockHash", normalize_hash, optional=True),
            transaction_hash=_decode_field(payload, "transactionHash", normalize_hash, optional=True),
            transaction_index=_decode_field(payload, "transactionIndex", decode_quantity, optional=True),
            log_index=_decode_field(payload, "logIndex", decode_quantity, optional=True),
            removed=bool(payload.get("removed", False)),
        )


@dataclass(frozen=True)
class TransactionReceipt:
    transaction_hash: str
    transaction_index: int
    block_hash: str
    block_number: int
    cumulative_gas_used: int
    gas_used: int
    contract_address: str | None = None
    logs: tuple[Log, ...] = ()
    status: int | None = None
    from_: str | None = None
    to: str | None = None

    @property
    def succeeded(self) -> Optional[bool]:
        """True/False from ``status``; None for pre-Byzantium receipts without one."""
        if self.status is None:
            return None
        return self.status == 1

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TransactionReceipt":
        payload = _require_mapping(payload, "receipt")
        return cls(
            transaction_hash=_decode_field(payload, "transactionHash", normalize_hash),
            transaction_index=_decode_field(payload, "transactionIndex", decode_quantity),
            block_hash=_decode_field(payload, "blockHash", normalize_hash),
            block_number=_decode_field(payload, "blockNumber", decode_quantity),
            cumulative_gas_used=_decode_field(payload, "cumulativeGasUsed", decode_quantity),
            gas_used=_decode_field(payload, "gasUsed", decode_quantity),
            contract_address=_decode_field(payload, "contractAddress", normalize_address, optional=True),
            logs=cls._logs(payload),
            status=_decode_field(payload, "status", decode_quantity, optional=True),
            from_=_decode_field(payload, "from", normalize_address, optional=True),
            to=_decode_field(payload, "to", normalize_address, optional=True),
        )

    @staticmethod
    def _logs(payload: Mapping[str, Any]) -> tuple[Log, ...]:
        value = payload.get("logs") or []
        if not isinstance(value, list):
            raise DecodeError("logs", f"expected a list, got {type(value).__name__}")
        decoded = []
        for index, item in enumerate(value):
            if not isinstance(item, Mapping):
                raise DecodeError(f"logs[{index}]", f"expected an object, got {type(item).__name__}")
            try:
                decoded.append(Log.from_dict(item))
            except DecodeError as exc:
                raise DecodeError(f"logs[{index}].{exc.field}", exc.reason) from exc
        return tuple(decoded)


@dataclass(frozen=True)
class Block:
    """
    A block as returned by ``eth_getBlockByNumber``.

    ``full_transactions`` tags the shape of ``transactions``: when False it
    holds transaction hashes, when True it holds ``Transaction`` records.
    ``number``, ``hash``, ``nonce``, ``logs_bloom`` and ``miner`` are None
    for a pending block.
    """

    parent_hash: str
    gas_limit: int
    gas_used: int
    timestamp: int
    full_transactions: bool
    transactions: tuple[Union[str, Transaction], ...] = ()
    uncles: tuple[str, ...] = ()
    number: int | None = None
    hash: str | None = None
    nonce: str | None = None
    sha3_uncles: str | None = None
    logs_bloom: str | None = None
    transactions_root: str | None = None
    state_root: str | None = None
    receipts_root: str | None = None
    miner: str | None = None
    difficulty: int | None = None
    total_difficulty: int | None = None
    extra_data: str | None = None
    size: int | None = None

    @property
    def transaction_hashes(self) -> tuple[str, ...]:
        if not self.full_transactions:
            return self.transactions  # type: ignore[return-value]
        return tuple(tx.hash for tx in self.transactions if tx.hash)  # type: ignore[union-attr]

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], full_transactions: bool) -> "Block":
        payload = _require_mapping(payload, "block")
        if full_transactions:
            transactions = cls._full_transactions(payload)
        else:
            transactions = _decode_list(payload, "transactions", normalize_hash)
        return cls(
            parent_hash=_decode_field(payload, "parentHash", normalize_hash),
            gas_limit=_decode_field(payload, "gasLimit", decode_quantity),
            gas_used=_decode_field(payload, "gasUsed", decode_quantity),
            timestamp=_decode_field(payload, "timestamp", decode_quantity),
            full_transactions=full_transactions,
            transactions=transactions,
            uncles=_decode_list(payload, "uncles", normalize_hash),
            number=_decode_field(payload, "number", decode_quantity, optional=True),
            hash=_decode_field(payload, "hash", normalize_hash, optional=True),
            nonce=_decode_field(payload, "nonce", normalize_data, optional=True),
            sha3_uncles=_decode_field(payload, "sha3Uncles", normalize_hash, optional=True),
            logs_bloom=_decode_field(payload, "logsBloom", normalize_data, optional=True),
            transactions_root=_decode_field(payload, "transactionsRoot", normalize_hash, optional=True),
            state_root=_decode_field(payload, "stateRoot", normalize_hash, optional=True),
            receipts_root=_decode_field(payload, "receiptsRoot", normalize_hash, optional=True),
            miner=_decode_field(payload, "miner", normalize_address, optional=True),
            difficulty=_decode_field(payload, "difficulty", decode_quantity, optional=True),
            total_difficulty=_decode_field(payload, "totalDifficulty", decode_quantity, optional=True),
            extra_data=_decode_field(payload, "extraData", normalize_data, optional=True),
            size=_decode_field(payload, "size", decode_quantity, optional=True),
        )

    @staticmethod
    def _full_transactions(payload: Mapping[str, Any]) -> tuple[Transaction, ...]:
        value = payload.get("transactions")
        if value is None:
            return ()
        if not isinstance(value, list):
            raise DecodeError("transactions", f"expected a list, got {type(value).__name__}")
        decoded = []
        for index, item in enumerate(value):
            if not isinstance(item, Mapping):
                raise DecodeError(
                    f"transactions[{index}]",
                    "expected a transaction object; request full transactions only with full_objects=True",
                )
            try:
                decoded.append(Transaction.from_dict(item))
            except DecodeError as exc:
                raise DecodeError(f"transactions[{index}].{exc.field}", exc.reason) from exc
        return tuple(decoded)


@dataclass(frozen=True)
class CompiledContract:
    code: str
    abi: Any = None
    info: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, payload: Mapping[str, Any]) -> "CompiledContract":
        payload = _require_mapping(payload, name)
        info = payload.get("info") or {}
        if not isinstance(info, Mapping):
            raise DecodeError(f"{name}.info", f"expected an object, got {type(info).__name__}")
        try:
            code = _decode_field(payload, "code", normalize_data)
        except DecodeError as exc:
            raise DecodeError(f"{name}.{exc.field}", exc.reason) from exc
        return cls(code=code, abi=info.get("abiDefinition", payload.get("abi")), info=dict(info))


UNNAMED_CONTRACT = "<stdin>"


@dataclass(frozen=True)
class CompileOutput(Mapping[str, CompiledContract]):
    """Read-only mapping of contract name to its compiled code and ABI."""

    contracts: Mapping[str, CompiledContract] = field(default_factory=dict)

    def __getitem__(self, name: str) -> CompiledContract:
        return self.contracts[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.contracts)

    def __len__(self) -> int:
        return len(self.contracts)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CompileOutput":
        payload = _require_mapping(payload, "result")
        # Older nodes answer a single-contract source with the record itself.
        if "code" in payload:
            payload = {UNNAMED_CONTRACT: payload}
        return cls({name: CompiledContract.from_dict(name, record) for name, record in payload.items()})
