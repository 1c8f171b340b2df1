"""
The Ethereum JSON-RPC methods the client speaks.

Each entry pairs the exact method name with a params builder (caller
values -> wire params) and a result decoder (wire result -> Python value).
Both clients dispatch through these entries, so adding a method is one
entry here plus a thin wrapper on each client. ``METHODS`` indexes the
entries by wire name for callers that start from a method name, such as
tooling that replays recorded requests; the clients do not consult it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..errors import CodecError, DecodeError
from .hexcodec import (
    BlockTag,
    decode_quantity,
    encode_block_tag,
    encode_quantity,
    normalize_address,
    normalize_data,
    normalize_hash,
    to_data,
)
from .wire import Block, CompileOutput, Transaction, TransactionCall, TransactionReceipt


@dataclass(frozen=True)
class RpcMethod:
    name: str
    params: Callable[..., list]
    decode: Callable[[Any], Any]
    nullable: bool = False

    def parse(self, result: Any) -> Any:
        """Decode a ``result``; null is only legal for lookup methods."""
        if result is None:
            if self.nullable:
                return None
            raise DecodeError("result", f"{self.name} returned null")
        try:
            return self.decode(result)
        except CodecError as exc:
            raise DecodeError("result", exc.reason) from exc


def _no_params() -> list:
    return []


def _address_at(address: str, tag: BlockTag = "latest") -> list:
    return [normalize_address(address), encode_block_tag(tag)]


def _tx_hash(tx_hash: str) -> list:
    return [normalize_hash(tx_hash)]


def _send_params(tx: Transaction) -> list:
    if tx.from_ is None:
        raise ValueError("Transaction 'from' is required for node-signed submission")
    return [tx.to_dict()]


def _call_params(call: TransactionCall, tag: BlockTag = "latest") -> list:
    return [call.to_dict(), encode_block_tag(tag)]


def _block_params(number_or_tag: BlockTag, full_objects: bool) -> list:
    return [encode_block_tag(number_or_tag), bool(full_objects)]


def _unlock_params(address: str, passphrase: str, duration: Optional[int] = None) -> list:
    params: list = [normalize_address(address), passphrase]
    if duration is not None:
        params.append(encode_quantity(duration))
    return params


def _addresses(result: Any) -> list[str]:
    if not isinstance(result, list):
        raise CodecError(f"expected a list of addresses, got {type(result).__name__}")
    return [normalize_address(item) for item in result]


def _boolean(result: Any) -> bool:
    if not isinstance(result, bool):
        raise CodecError(f"expected a boolean, got {type(result).__name__}")
    return result


def _record(decoder: Callable[[Any], Any]) -> Callable[[Any], Any]:
    def decode(result: Any) -> Any:
        if not isinstance(result, dict):
            raise CodecError(f"expected an object, got {type(result).__name__}")
        return decoder(result)

    return decode


ETH_COINBASE = RpcMethod("eth_coinbase", _no_params, normalize_address)
ETH_ACCOUNTS = RpcMethod("eth_accounts", _no_params, _addresses)
ETH_GET_TRANSACTION_COUNT = RpcMethod("eth_getTransactionCount", _address_at, decode_quantity)
ETH_GET_BALANCE = RpcMethod("eth_getBalance", _address_at, decode_quantity)
ETH_SEND_TRANSACTION = RpcMethod("eth_sendTransaction", _send_params, normalize_hash)
ETH_SEND_RAW_TRANSACTION = RpcMethod(
    "eth_sendRawTransaction", lambda signed: [to_data(signed)], normalize_hash
)
ETH_GET_TRANSACTION_BY_HASH = RpcMethod(
    "eth_getTransactionByHash", _tx_hash, _record(Transaction.from_dict), nullable=True
)
ETH_GET_TRANSACTION_RECEIPT = RpcMethod(
    "eth_getTransactionReceipt", _tx_hash, _record(TransactionReceipt.from_dict), nullable=True
)
ETH_CALL = RpcMethod("eth_call", _call_params, normalize_data)
ETH_COMPILE_SOLIDITY = RpcMethod(
    "eth_compileSolidity", lambda source: [source], _record(CompileOutput.from_dict)
)
PERSONAL_UNLOCK_ACCOUNT = RpcMethod("personal_unlockAccount", _unlock_params, _boolean)


def eth_get_block_by_number(full_objects: bool) -> RpcMethod:
    """The block decoder depends on the requested transaction shape."""
    return RpcMethod(
        "eth_getBlockByNumber",
        _block_params,
        _record(lambda payload: Block.from_dict(payload, full_transactions=bool(full_objects))),
        nullable=True,
    )


# Index by wire name. eth_getBlockByNumber is listed with its hashes-only decoder.
METHODS = {
    method.name: method
    for method in (
        ETH_COINBASE,
        ETH_ACCOUNTS,
        ETH_GET_TRANSACTION_COUNT,
        ETH_GET_BALANCE,
        ETH_SEND_TRANSACTION,
        ETH_SEND_RAW_TRANSACTION,
        ETH_GET_TRANSACTION_BY_HASH,
        ETH_GET_TRANSACTION_RECEIPT,
        ETH_CALL,
        eth_get_block_by_number(False),
        ETH_COMPILE_SOLIDITY,
        PERSONAL_UNLOCK_ACCOUNT,
    )
}
