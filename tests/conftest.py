"""
Pytest fixtures for the txsubmit SDK tests.
"""
import time
from typing import Dict, Optional
from unittest.mock import MagicMock

import pytest
from web3 import Web3
from web3.datastructures import AttributeDict
from web3.exceptions import TransactionNotFound
from web3.providers.rpc import HTTPProvider

from txsubmit_sdk._rate_limited_log import reset_rate_limits
from txsubmit_sdk.config import NetworkConfig

from tests.test_helpers import TEST_CHAIN_ID, TEST_SENDER


@pytest.fixture(autouse=True)
def _fast_sleep(monkeypatch):
    """Make time.sleep instantaneous so receipt polling doesn't slow the suite down"""
    monkeypatch.setattr(time, "sleep", lambda *_a, **_kw: None)


@pytest.fixture(autouse=True)
def _patch_http_provider(monkeypatch):
    """
    Stub every Web3 HTTP call so no DNS / network traffic is triggered.
    """
    def _dummy(self, method, params=None, _=None):
        if method == "eth_chainId":
            return {"jsonrpc": "2.0", "id": 1, "result": hex(TEST_CHAIN_ID)}
        if method == "eth_gasPrice":
            return {"jsonrpc": "2.0", "id": 1, "result": "0x3b9aca00"}  # 1 gwei
        return {"jsonrpc": "2.0", "id": 1, "result": "0x0"}

    monkeypatch.setattr(HTTPProvider, "make_request", _dummy, raising=True)


@pytest.fixture(autouse=True)
def _reset_caches():
    reset_rate_limits()
    NetworkConfig._networks_cache = None
    yield
    reset_rate_limits()
    NetworkConfig._networks_cache = None


def make_web3_receipt(tx_hash: bytes, status: int = 1, block_number: int = 12345) -> AttributeDict:
    """Receipt shaped like the AttributeDict web3 returns"""
    return AttributeDict({
        "transactionHash": tx_hash,
        "blockNumber": block_number,
        "blockHash": bytes.fromhex("abcdef1234567890" * 4),
        "status": status,
        "gasUsed": 85000,
        "cumulativeGasUsed": 85000,
        "effectiveGasPrice": 1100000000,
        "from": TEST_SENDER,
        "to": "0x0000000000000000000000000000000000000804",
        "logs": [AttributeDict({
            "address": "0x0000000000000000000000000000000000000804",
            "topics": [bytes.fromhex("11" * 32)],
            "data": b"\x00\x01",
        })],
        "type": 2,
    })


class FakeNode:
    """
    Drives a MagicMock'd ``w3.eth`` like a tiny dev chain.

    Sent transactions get their keccak as hash and stay pending until
    ``mine`` is called. Nonces advance with every accepted transaction.
    """

    def __init__(self, base_fee: Optional[int] = 10**9):
        self.nonce = 12
        self.block = 100
        self.sent: Dict[str, bytes] = {}
        self.receipts: Dict[str, AttributeDict] = {}

        eth = MagicMock()
        eth.chain_id = TEST_CHAIN_ID
        eth.block_number = self.block
        eth.gas_price = 2 * 10**9
        eth.max_priority_fee = 10**8
        eth.get_transaction_count = MagicMock(side_effect=lambda address, block="latest": self.nonce)
        eth.estimate_gas = MagicMock(return_value=50000)
        eth.get_block = MagicMock(return_value=AttributeDict(
            {"number": self.block, "baseFeePerGas": base_fee} if base_fee is not None else {"number": self.block}
        ))
        eth.send_raw_transaction = MagicMock(side_effect=self._send)
        eth.get_transaction_receipt = MagicMock(side_effect=self._receipt)
        self.eth = eth

        self.w3 = MagicMock(spec=Web3)
        self.w3.eth = eth

    def _send(self, raw_tx: bytes) -> bytes:
        tx_hash = bytes(Web3.keccak(raw_tx))
        self.sent[Web3.to_hex(tx_hash)] = raw_tx
        self.nonce += 1
        return tx_hash

    def _receipt(self, tx_hash):
        key = Web3.to_hex(tx_hash) if isinstance(tx_hash, bytes) else tx_hash
        if key not in self.receipts:
            raise TransactionNotFound(f"Transaction with hash: '{key}' not found.")
        return self.receipts[key]

    def mine(self, tx_hash: str, status: int = 1) -> None:
        self.block += 1
        self.receipts[tx_hash] = make_web3_receipt(Web3.to_bytes(hexstr=tx_hash), status, self.block)

    def mine_all(self, status: int = 1) -> None:
        for tx_hash in list(self.sent):
            if tx_hash not in self.receipts:
                self.mine(tx_hash, status)


@pytest.fixture
def fake_node():
    return FakeNode()


@pytest.fixture
def legacy_node():
    """Node without EIP-1559 base fee"""
    return FakeNode(base_fee=None)
