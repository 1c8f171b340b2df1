"""
Ethereum node client.

Wraps the JSON-RPC transport with the domain operations a wallet-less
application needs: account and balance queries, transaction submission,
block and receipt lookups, contract calls and Solidity compilation.

Quantities go in and come out as ints; hashes and addresses as lowercase
``0x`` strings. The only hex a caller handles is opaque payload data
(signed transactions, call data and call results).
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Optional, Union

import httpx

from ..config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_URL, EndpointConfig
from ..jsonrpc.transport import AsyncRpcTransport, RpcTransport
from .hexcodec import BlockTag, BytesLike
from .methods import (
    ETH_ACCOUNTS,
    ETH_CALL,
    ETH_COINBASE,
    ETH_COMPILE_SOLIDITY,
    ETH_GET_BALANCE,
    ETH_GET_TRANSACTION_BY_HASH,
    ETH_GET_TRANSACTION_COUNT,
    ETH_GET_TRANSACTION_RECEIPT,
    ETH_SEND_RAW_TRANSACTION,
    ETH_SEND_TRANSACTION,
    PERSONAL_UNLOCK_ACCOUNT,
    RpcMethod,
    eth_get_block_by_number,
)
from .wire import Block, CompileOutput, Transaction, TransactionCall, TransactionReceipt


class EthClient:
    """
    Blocking client for an Ethereum node.

    Safe for concurrent use from several threads. Construction validates
    the endpoint and raises ``ConfigError`` immediately when it is invalid.

    Args:
        endpoint: Node URL or an ``EndpointConfig`` (default: http://localhost:8545/)
        timeout: Overall request timeout in seconds (default: 30)
        headers: Extra HTTP headers, e.g. for an authenticating proxy
        verify: TLS verification, forwarded to httpx
        transport: Custom httpx transport (mocking, proxies, unix sockets)
    """

    def __init__(
        self,
        endpoint: Union[str, EndpointConfig] = DEFAULT_URL,
        timeout: Optional[float] = None,
        *,
        headers: Optional[dict[str, str]] = None,
        verify: Any = True,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc = RpcTransport(endpoint, timeout, headers=headers, verify=verify, transport=transport)

    @classmethod
    def from_host(
        cls,
        hostname: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        **kwargs: Any,
    ) -> "EthClient":
        return cls(EndpointConfig.from_host(hostname, port), **kwargs)

    def _invoke(self, method: RpcMethod, *args: Any) -> Any:
        return method.parse(self.rpc.call(method.name, method.params(*args)))

    def coinbase(self) -> str:
        return self._invoke(ETH_COINBASE)

    def accounts(self) -> list[str]:
        return self._invoke(ETH_ACCOUNTS)

    def nonce(self, address: str, tag: BlockTag = "latest") -> int:
        """Number of transactions sent from ``address`` as of block ``tag``."""
        return self._invoke(ETH_GET_TRANSACTION_COUNT, address, tag)

    def balance(self, address: str, tag: BlockTag = "latest") -> int:
        """Balance of ``address`` in wei."""
        return self._invoke(ETH_GET_BALANCE, address, tag)

    def send_transaction(self, tx: Transaction) -> str:
        """
        Submit a transaction for the node to sign with the ``from`` account.

        The account must already be unlocked on the node; if it is not, the
        node's error comes back as ``RpcError``.
        """
        return self._invoke(ETH_SEND_TRANSACTION, tx)

    def transfer(self, from_: str, to: str, value: int) -> str:
        """Send ``value`` wei from an unlocked node account."""
        return self.send_transaction(Transaction(from_=from_, to=to, value=value))

    def send_raw_transaction(self, signed: Union[str, BytesLike]) -> str:
        """Broadcast a transaction signed elsewhere; accepts hex or bytes."""
        return self._invoke(ETH_SEND_RAW_TRANSACTION, signed)

    def get_transaction_by_hash(self, tx_hash: str) -> Optional[Transaction]:
        return self._invoke(ETH_GET_TRANSACTION_BY_HASH, tx_hash)

    def get_transaction_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        """Receipt of a mined transaction, or None while it is still pending."""
        return self._invoke(ETH_GET_TRANSACTION_RECEIPT, tx_hash)

    def call_method(self, call: TransactionCall, tag: BlockTag = "latest") -> str:
        """Execute a read-only contract call and return the raw output data."""
        return self._invoke(ETH_CALL, call, tag)

    def get_block_by_number(self, number_or_tag: BlockTag, full_objects: bool = False) -> Optional[Block]:
        return self._invoke(eth_get_block_by_number(full_objects), number_or_tag, full_objects)

    def get_latest_block_gas_limit(self) -> Optional[int]:
        block = self.get_block_by_number("latest", True)
        if block is None:
            return None
        return block.gas_limit

    def compile_solidity(self, source: str) -> CompileOutput:
        """Compile on the node; nodes without a compiler answer with an RpcError."""
        return self._invoke(ETH_COMPILE_SOLIDITY, source)

    def unlock_account(self, address: str, passphrase: str, duration: Optional[int] = None) -> bool:
        """
        Ask the node to unlock ``address``.

        Node-dependent: many nodes disable the personal namespace. The
        boolean is returned exactly as the node reported it.
        """
        return self._invoke(PERSONAL_UNLOCK_ACCOUNT, address, passphrase, duration)

    def unlock_and_send(self, from_: str, passphrase: str, tx: Transaction) -> Optional[str]:
        """
        Unlock ``from_`` and submit ``tx`` from it.

        Returns None without submitting when the node refuses the unlock.
        """
        if not self.unlock_account(from_, passphrase):
            return None
        return self.send_transaction(replace(tx, from_=from_))

    def close(self) -> None:
        self.rpc.close()

    def __enter__(self) -> "EthClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class AsyncEthClient:
    """
    asyncio counterpart of ``EthClient``.

    Every operation accepts ``cancel``: setting that event aborts the
    in-flight request with ``TransportError`` of kind ``canceled``.
    """

    def __init__(
        self,
        endpoint: Union[str, EndpointConfig] = DEFAULT_URL,
        timeout: Optional[float] = None,
        *,
        headers: Optional[dict[str, str]] = None,
        verify: Any = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.rpc = AsyncRpcTransport(endpoint, timeout, headers=headers, verify=verify, transport=transport)

    @classmethod
    def from_host(
        cls,
        hostname: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        **kwargs: Any,
    ) -> "AsyncEthClient":
        return cls(EndpointConfig.from_host(hostname, port), **kwargs)

    async def _invoke(self, method: RpcMethod, *args: Any, cancel: Optional[asyncio.Event] = None) -> Any:
        result = await self.rpc.call(method.name, method.params(*args), cancel=cancel)
        return method.parse(result)

    async def coinbase(self, *, cancel: Optional[asyncio.Event] = None) -> str:
        return await self._invoke(ETH_COINBASE, cancel=cancel)

    async def accounts(self, *, cancel: Optional[asyncio.Event] = None) -> list[str]:
        return await self._invoke(ETH_ACCOUNTS, cancel=cancel)

    async def nonce(self, address: str, tag: BlockTag = "latest", *, cancel: Optional[asyncio.Event] = None) -> int:
        return await self._invoke(ETH_GET_TRANSACTION_COUNT, address, tag, cancel=cancel)

    async def balance(self, address: str, tag: BlockTag = "latest", *, cancel: Optional[asyncio.Event] = None) -> int:
        return await self._invoke(ETH_GET_BALANCE, address, tag, cancel=cancel)

    async def send_transaction(self, tx: Transaction, *, cancel: Optional[asyncio.Event] = None) -> str:
        return await self._invoke(ETH_SEND_TRANSACTION, tx, cancel=cancel)

    async def transfer(self, from_: str, to: str, value: int, *, cancel: Optional[asyncio.Event] = None) -> str:
        return await self.send_transaction(Transaction(from_=from_, to=to, value=value), cancel=cancel)

    async def send_raw_transaction(
        self, signed: Union[str, BytesLike], *, cancel: Optional[asyncio.Event] = None
    ) -> str:
        return await self._invoke(ETH_SEND_RAW_TRANSACTION, signed, cancel=cancel)

    async def get_transaction_by_hash(
        self, tx_hash: str, *, cancel: Optional[asyncio.Event] = None
    ) -> Optional[Transaction]:
        return await self._invoke(ETH_GET_TRANSACTION_BY_HASH, tx_hash, cancel=cancel)

    async def get_transaction_receipt(
        self, tx_hash: str, *, cancel: Optional[asyncio.Event] = None
    ) -> Optional[TransactionReceipt]:
        return await self._invoke(ETH_GET_TRANSACTION_RECEIPT, tx_hash, cancel=cancel)

    async def call_method(
        self, call: TransactionCall, tag: BlockTag = "latest", *, cancel: Optional[asyncio.Event] = None
    ) -> str:
        return await self._invoke(ETH_CALL, call, tag, cancel=cancel)

    async def get_block_by_number(
        self, number_or_tag: BlockTag, full_objects: bool = False, *, cancel: Optional[asyncio.Event] = None
    ) -> Optional[Block]:
        return await self._invoke(eth_get_block_by_number(full_objects), number_or_tag, full_objects, cancel=cancel)

    async def get_latest_block_gas_limit(self, *, cancel: Optional[asyncio.Event] = None) -> Optional[int]:
        block = await self.get_block_by_number("latest", True, cancel=cancel)
        if block is None:
            return None
        return block.gas_limit

    async def compile_solidity(self, source: str, *, cancel: Optional[asyncio.Event] = None) -> CompileOutput:
        return await self._invoke(ETH_COMPILE_SOLIDITY, source, cancel=cancel)

    async def unlock_account(
        self,
        address: str,
        passphrase: str,
        duration: Optional[int] = None,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> bool:
        return await self._invoke(PERSONAL_UNLOCK_ACCOUNT, address, passphrase, duration, cancel=cancel)

    async def unlock_and_send(
        self,
        from_: str,
        passphrase: str,
        tx: Transaction,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> Optional[str]:
        if not await self.unlock_account(from_, passphrase, cancel=cancel):
            return None
        return await self.send_transaction(replace(tx, from_=from_), cancel=cancel)

    async def aclose(self) -> None:
        await self.rpc.aclose()

    async def __aenter__(self) -> "AsyncEthClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
