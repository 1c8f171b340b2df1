"""Tests for wire type encoding and decoding."""

from __future__ import annotations

import pytest

from blocklinks.errors import CodecError, DecodeError
from blocklinks.eth.wire import (
    UNNAMED_CONTRACT,
    Block,
    CompileOutput,
    Log,
    Transaction,
    TransactionCall,
    TransactionReceipt,
)
from conftest import (
    ADDRESS,
    BLOCK_HASH,
    OTHER_ADDRESS,
    TX_HASH,
    block_payload,
    receipt_payload,
    transaction_payload,
)


class TestTransactionEmission:
    """Submission shape: camelCase keys, absent fields omitted."""

    def test_value_transfer(self) -> None:
        tx = Transaction(from_=ADDRESS, to=OTHER_ADDRESS, value=10**18)
        assert tx.to_dict() == {
            "from": ADDRESS,
            "to": OTHER_ADDRESS,
            "value": "0xde0b6b3a7640000",
        }

    def test_all_fields(self) -> None:
        tx = Transaction(
            from_=ADDRESS.upper().replace("0X", "0x"),
            to=OTHER_ADDRESS,
            gas=21000,
            gas_price=20 * 10**9,
            value=0,
            data=b"\xa9\x05\x9c\xbb",
            nonce=0,
        )
        assert tx.to_dict() == {
            "from": ADDRESS,
            "to": OTHER_ADDRESS,
            "gas": "0x5208",
            "gasPrice": "0x4a817c800",
            "value": "0x0",
            "data": "0xa9059cbb",
            "nonce": "0x0",
        }

    def test_contract_creation_omits_to(self) -> None:
        payload = Transaction(from_=ADDRESS, data="0x6080").to_dict()
        assert "to" not in payload
        assert payload["data"] == "0x6080"

    def test_read_back_fields_not_emitted(self) -> None:
        tx = Transaction(from_=ADDRESS, hash=TX_HASH, block_number=5)
        assert tx.to_dict() == {"from": ADDRESS}

    def test_call_empty(self) -> None:
        assert TransactionCall().to_dict() == {}

    def test_negative_value_rejected(self) -> None:
        with pytest.raises(CodecError):
            Transaction(from_=ADDRESS, value=-1).to_dict()

    def test_bad_address_rejected(self) -> None:
        with pytest.raises(CodecError):
            TransactionCall(to="0x1234").to_dict()


class TestTransactionDecoding:
    """Transactions read back from eth_getTransactionByHash."""

    def test_decode(self) -> None:
        tx = Transaction.from_dict(transaction_payload())
        assert tx.hash == TX_HASH
        assert tx.from_ == ADDRESS
        assert tx.to == OTHER_ADDRESS
        assert tx.value == 10**18
        assert tx.nonce == 42
        assert tx.gas == 21000
        assert tx.block_number == 68943
        assert tx.transaction_index == 0
        assert tx.data == "0x"

    def test_input_mapped_to_data(self) -> None:
        tx = Transaction.from_dict(transaction_payload(input="0xA9059CBB"))
        assert tx.data == "0xa9059cbb"

    def test_pending_transaction(self) -> None:
        tx = Transaction.from_dict(transaction_payload(blockHash=None, blockNumber=None, transactionIndex=None))
        assert tx.block_hash is None
        assert tx.block_number is None

    def test_contract_creation_to_null(self) -> None:
        assert Transaction.from_dict(transaction_payload(to=None)).to is None

    def test_bad_quantity_names_field(self) -> None:
        with pytest.raises(DecodeError) as excinfo:
            Transaction.from_dict(transaction_payload(gasPrice="0xzz"))
        assert excinfo.value.field == "gasPrice"
        assert isinstance(excinfo.value.__cause__, CodecError)


class TestReceipt:
    """Tests for TransactionReceipt decoding."""

    def test_decode(self) -> None:
        receipt = TransactionReceipt.from_dict(receipt_payload())
        assert receipt.transaction_hash == TX_HASH
        assert receipt.block_hash == BLOCK_HASH
        assert receipt.block_number == 68943
        assert receipt.gas_used == 21000
        assert receipt.cumulative_gas_used == 21000
        assert receipt.contract_address is None
        assert receipt.logs == ()
        assert receipt.status == 1
        assert receipt.succeeded is True

    def test_without_status(self) -> None:
        payload = receipt_payload()
        del payload["status"]
        receipt = TransactionReceipt.from_dict(payload)
        assert receipt.status is None
        assert receipt.succeeded is None

    def test_failed(self) -> None:
        assert TransactionReceipt.from_dict(receipt_payload(status="0x0")).succeeded is False

    def test_contract_address_normalized(self) -> None:
        receipt = TransactionReceipt.from_dict(
            receipt_payload(contractAddress="0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed")
        )
        assert receipt.contract_address == "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"

    def test_logs(self) -> None:
        log = {
            "address": OTHER_ADDRESS,
            "topics": ["0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"],
            "data": "0x" + "00" * 31 + "01",
            "blockNumber": "0x10d4f",
            "transactionHash": TX_HASH,
            "transactionIndex": "0x0",
            "blockHash": BLOCK_HASH,
            "logIndex": "0x3",
            "removed": False,
        }
        receipt = TransactionReceipt.from_dict(receipt_payload(logs=[log]))
        assert len(receipt.logs) == 1
        decoded = receipt.logs[0]
        assert isinstance(decoded, Log)
        assert decoded.log_index == 3
        assert decoded.topics[0].startswith("0xddf252ad")

    def test_missing_required_field(self) -> None:
        payload = receipt_payload()
        del payload["gasUsed"]
        with pytest.raises(DecodeError) as excinfo:
            TransactionReceipt.from_dict(payload)
        assert excinfo.value.field == "gasUsed"

    def test_bad_log_topic(self) -> None:
        log = {"address": OTHER_ADDRESS, "topics": ["0x12"], "data": "0x"}
        with pytest.raises(DecodeError) as excinfo:
            TransactionReceipt.from_dict(receipt_payload(logs=[log]))
        assert excinfo.value.field == "logs[0].topics[0]"

    def test_bad_log_address(self) -> None:
        good = {"address": OTHER_ADDRESS, "topics": [], "data": "0x"}
        bad = {"address": "0x12", "topics": [], "data": "0x"}
        with pytest.raises(DecodeError) as excinfo:
            TransactionReceipt.from_dict(receipt_payload(logs=[good, bad]))
        assert excinfo.value.field == "logs[1].address"

    def test_log_not_an_object(self) -> None:
        with pytest.raises(DecodeError) as excinfo:
            TransactionReceipt.from_dict(receipt_payload(logs=["0x12"]))
        assert excinfo.value.field == "logs[0]"


class TestBlock:
    """Tests for Block decoding and the transactions variant."""

    def test_hashes_variant(self) -> None:
        block = Block.from_dict(block_payload(), full_transactions=False)
        assert block.full_transactions is False
        assert block.transactions == (TX_HASH,)
        assert block.transaction_hashes == (TX_HASH,)
        assert block.gas_limit == 30_000_000
        assert block.number == 68943
        assert block.extra_data == "0x"
        assert block.uncles == ()

    def test_full_variant(self) -> None:
        block = Block.from_dict(block_payload(transactions=[transaction_payload()]), full_transactions=True)
        assert block.full_transactions is True
        assert isinstance(block.transactions[0], Transaction)
        assert block.transaction_hashes == (TX_HASH,)

    def test_full_requested_but_hashes_returned(self) -> None:
        with pytest.raises(DecodeError) as excinfo:
            Block.from_dict(block_payload(), full_transactions=True)
        assert excinfo.value.field == "transactions[0]"

    def test_nested_transaction_field(self) -> None:
        bad = transaction_payload(value="0x")
        with pytest.raises(DecodeError) as excinfo:
            Block.from_dict(block_payload(transactions=[bad]), full_transactions=True)
        assert excinfo.value.field == "transactions[0].value"

    def test_pending_block(self) -> None:
        block = Block.from_dict(
            block_payload(number=None, hash=None, nonce=None, logsBloom=None, miner=None),
            full_transactions=False,
        )
        assert block.number is None
        assert block.hash is None

    def test_post_merge_block_without_total_difficulty(self) -> None:
        payload = block_payload()
        del payload["totalDifficulty"]
        assert Block.from_dict(payload, full_transactions=False).total_difficulty is None

    def test_bad_gas_limit(self) -> None:
        with pytest.raises(DecodeError) as excinfo:
            Block.from_dict(block_payload(gasLimit="30000000"), full_transactions=False)
        assert excinfo.value.field == "gasLimit"

    def test_not_an_object(self) -> None:
        with pytest.raises(DecodeError):
            Block.from_dict(["not", "a", "block"], full_transactions=False)  # type: ignore[arg-type]


class TestCompileOutput:
    """Tests for CompileOutput decoding."""

    def test_named_contracts(self) -> None:
        abi = [{"type": "function", "name": "multiply", "inputs": [{"name": "a", "type": "uint256"}]}]
        output = CompileOutput.from_dict(
            {
                "test": {
                    "code": "0x6060604052",
                    "info": {"language": "Solidity", "abiDefinition": abi, "compilerVersion": "0.4.24"},
                }
            }
        )
        assert list(output) == ["test"]
        assert len(output) == 1
        assert output["test"].code == "0x6060604052"
        assert output["test"].abi == abi
        assert output["test"].info["language"] == "Solidity"

    def test_single_unnamed_contract(self) -> None:
        output = CompileOutput.from_dict({"code": "0x60", "info": {"abiDefinition": []}})
        assert output[UNNAMED_CONTRACT].code == "0x60"

    def test_bad_code_names_contract(self) -> None:
        with pytest.raises(DecodeError) as excinfo:
            CompileOutput.from_dict({"test": {"code": "0x606", "info": {}}})
        assert excinfo.value.field == "test.code"
