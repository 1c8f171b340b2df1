"""Shared fixtures: an in-process fake node behind httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any, Callable, Iterator, Optional

import httpx
import pytest

from blocklinks import AsyncEthClient, EthClient

NODE_URL = "http://localhost:8545/"

ADDRESS = "0xabc0000000000000000000000000000000000001"
OTHER_ADDRESS = "0xdef0000000000000000000000000000000000002"
TX_HASH = "0x88df016429689c079f3b2f6ad39fa052532c56795b733da78a91ebe6a713944b"
BLOCK_HASH = "0x" + "b1" * 32
PARENT_HASH = "0x" + "a0" * 32
ZERO_HASH = "0x" + "00" * 32


class MockNode:
    """
    Answers JSON-RPC requests by method name and keeps a call log.

    ``respond`` registers either a fixed ``result`` / ``error`` member or a
    callable that receives the request envelope and returns an
    ``httpx.Response``.
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.headers: list[httpx.Headers] = []
        self._answers: dict[str, Any] = {}

    def respond(
        self,
        method: str,
        result: Any = None,
        error: Optional[dict[str, Any]] = None,
        handler: Optional[Callable[[dict[str, Any]], httpx.Response]] = None,
    ) -> None:
        if handler is not None:
            self._answers[method] = handler
        elif error is not None:
            self._answers[method] = {"error": error}
        else:
            self._answers[method] = {"result": result}

    @property
    def methods(self) -> list[str]:
        return [call["method"] for call in self.calls]

    def handle(self, request: httpx.Request) -> httpx.Response:
        envelope = json.loads(request.content)
        self.calls.append(envelope)
        self.headers.append(request.headers)
        answer = self._answers.get(envelope["method"])
        if callable(answer):
            return answer(envelope)
        if answer is None:
            answer = {"error": {"code": -32601, "message": f"the method {envelope['method']} does not exist"}}
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": envelope["id"], **answer})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture()
def node() -> MockNode:
    return MockNode()


@pytest.fixture()
def client(node: MockNode) -> Iterator[EthClient]:
    eth = EthClient(NODE_URL, transport=node.transport())
    yield eth
    eth.close()


@pytest.fixture()
def async_client_factory(node: MockNode) -> Callable[..., AsyncEthClient]:
    def make(**kwargs: Any) -> AsyncEthClient:
        return AsyncEthClient(NODE_URL, transport=node.transport(), **kwargs)

    return make


def block_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "number": "0x10d4f",
        "hash": BLOCK_HASH,
        "parentHash": PARENT_HASH,
        "nonce": "0x0000000000000000",
        "sha3Uncles": "0x1dcc4de8dec75d7aab85b567b6ccd41ad312451b948a7413f0a142fd40d49347",
        "logsBloom": "0x" + "00" * 256,
        "transactionsRoot": ZERO_HASH,
        "stateRoot": ZERO_HASH,
        "receiptsRoot": ZERO_HASH,
        "miner": "0x4e65fda2159562a496f9f3522f89122a3088497a",
        "difficulty": "0x0",
        "totalDifficulty": "0xc70d815d562d3cfa955",
        "extraData": "0x",
        "size": "0x220",
        "gasLimit": "0x1c9c380",
        "gasUsed": "0x5208",
        "timestamp": "0x6553f100",
        "transactions": [TX_HASH],
        "uncles": [],
        "baseFeePerGas": "0x7",
    }
    payload.update(overrides)
    return payload


def transaction_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "hash": TX_HASH,
        "blockHash": BLOCK_HASH,
        "blockNumber": "0x10d4f",
        "transactionIndex": "0x0",
        "from": ADDRESS,
        "to": OTHER_ADDRESS,
        "gas": "0x5208",
        "gasPrice": "0x4a817c800",
        "value": "0xde0b6b3a7640000",
        "input": "0x",
        "nonce": "0x2a",
        "v": "0x1b",
        "r": "0x" + "11" * 32,
        "s": "0x" + "22" * 32,
    }
    payload.update(overrides)
    return payload


def receipt_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "transactionHash": TX_HASH,
        "transactionIndex": "0x0",
        "blockHash": BLOCK_HASH,
        "blockNumber": "0x10d4f",
        "from": ADDRESS,
        "to": OTHER_ADDRESS,
        "cumulativeGasUsed": "0x5208",
        "gasUsed": "0x5208",
        "effectiveGasPrice": "0x4a817c800",
        "contractAddress": None,
        "logs": [],
        "logsBloom": "0x" + "00" * 256,
        "status": "0x1",
        "type": "0x0",
    }
    payload.update(overrides)
    return payload
