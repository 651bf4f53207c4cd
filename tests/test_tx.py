"""
Tests for transaction assembly helpers.
"""
from itertools import islice
from types import SimpleNamespace

import pytest
from web3.datastructures import AttributeDict

from txsubmit_sdk.models import TransactionRequest
from txsubmit_sdk.tx import (
    backoff_delays,
    buffered_gas,
    build_transaction,
    convert_receipt,
    fee_fields,
    raw_bytes,
    to_hex_hash,
)
from tests.conftest import make_web3_receipt
from tests.test_helpers import TEST_SENDER, TEST_TX_HASH

REQUEST = TransactionRequest(to="0x0000000000000000000000000000000000000804", data="0xabcd")


def test_build_transaction_eip1559():
    tx = build_transaction(REQUEST, TEST_SENDER, 4, 9000, 60000, fee_fields(100, 7, None))

    assert tx == {
        "from": TEST_SENDER,
        "to": REQUEST.to,
        "value": 0,
        "data": "0xabcd",
        "nonce": 4,
        "chainId": 9000,
        "gas": 60000,
        "maxPriorityFeePerGas": 7,
        "maxFeePerGas": 207,
    }


def test_fee_fields_legacy():
    assert fee_fields(None, None, 50) == {"gasPrice": 50}
    assert fee_fields(100, None, 50) == {"gasPrice": 50}


def test_fee_fields_requires_some_price():
    with pytest.raises(ValueError):
        fee_fields(None, None, None)


def test_buffered_gas():
    assert buffered_gas(100000) == 110000


def test_raw_bytes():
    assert raw_bytes(SimpleNamespace(raw_transaction=b"\x02\x01")) == b"\x02\x01"
    with pytest.raises(ValueError, match="raw_transaction"):
        raw_bytes(SimpleNamespace(rawTransaction=b"\x02"))


@pytest.mark.parametrize("value", [
    bytes.fromhex(TEST_TX_HASH[2:]),
    TEST_TX_HASH[2:],
    TEST_TX_HASH.upper().replace("0X", "0x"),
])
def test_to_hex_hash(value):
    assert to_hex_hash(value) == TEST_TX_HASH


def test_convert_receipt_hexlifies_bytes():
    receipt = convert_receipt(make_web3_receipt(bytes.fromhex(TEST_TX_HASH[2:])))

    assert receipt.tx_hash == TEST_TX_HASH
    assert receipt.logs == [{
        "address": "0x0000000000000000000000000000000000000804",
        "topics": ["0x" + "11" * 32],
        "data": "0x0001",
    }]


def test_convert_receipt_contract_creation():
    raw = dict(make_web3_receipt(bytes.fromhex(TEST_TX_HASH[2:])))
    raw["to"] = None
    raw["contractAddress"] = "0x0000000000000000000000000000000000000099"
    assert convert_receipt(AttributeDict(raw)).to_address is None


def test_backoff_delays():
    assert list(islice(backoff_delays(0.5, 2, 5), 6)) == [0.5, 1.0, 2.0, 4.0, 5, 5]


def test_backoff_constant_when_factor_is_one():
    assert list(islice(backoff_delays(1, 1, 10), 3)) == [1, 1, 1]


@pytest.mark.parametrize("initial, factor", [(0, 2), (-1, 2), (1, 0.5)])
def test_backoff_rejects_bad_arguments(initial, factor):
    with pytest.raises(ValueError):
        next(backoff_delays(initial, factor))
