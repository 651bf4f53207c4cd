"""
Transaction assembly and receipt conversion shared by the blocking and async clients.
"""
import logging
from typing import Dict, Any, Optional, Iterator, Mapping

from web3 import Web3

from .models import TransactionRequest, TxReceipt

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 300000
GAS_BUFFER = 1.1


def estimate_call(request: TransactionRequest, sender: str) -> Dict[str, Any]:
    """Parameters used for eth_estimateGas"""
    return {
        "from": sender,
        "to": request.to,
        "value": request.value,
        "data": request.data,
    }


def buffered_gas(estimate: int) -> int:
    return int(estimate * GAS_BUFFER)


def fee_fields(
    base_fee: Optional[int],
    priority_fee: Optional[int],
    gas_price: Optional[int],
) -> Dict[str, int]:
    """
    Pick fee fields for the transaction.

    EIP-1559 fields are used when the latest block reports a base fee and a
    priority fee is known; the max fee leaves room for the base fee to double.
    Otherwise a legacy gas price is used.
    """
    if base_fee is not None and priority_fee is not None:
        return {
            "maxPriorityFeePerGas": priority_fee,
            "maxFeePerGas": 2 * base_fee + priority_fee,
        }
    if gas_price is None:
        raise ValueError("Either a base fee with a priority fee or a gas price is required")
    return {"gasPrice": gas_price}


def build_transaction(
    request: TransactionRequest,
    sender: str,
    nonce: int,
    chain_id: int,
    gas: int,
    fees: Mapping[str, int],
) -> Dict[str, Any]:
    """Assemble the transaction dict handed to the signer"""
    tx = {
        "from": sender,
        "to": request.to,
        "value": request.value,
        "data": request.data,
        "nonce": nonce,
        "chainId": chain_id,
        "gas": gas,
    }
    tx.update(fees)
    return tx


def raw_bytes(signed_tx: Any) -> bytes:
    """Raw signed payload from an eth_account SignedTransaction or look-alike"""
    raw = getattr(signed_tx, "raw_transaction", None)
    if raw is None:
        raise ValueError(f"Signed transaction {type(signed_tx).__name__} has no raw_transaction")
    return bytes(raw)


def to_hex_hash(tx_hash: Any) -> str:
    """Normalize a hash given as bytes or hex (with or without 0x) to 0x-lowercase hex"""
    if isinstance(tx_hash, (bytes, bytearray)):
        return Web3.to_hex(tx_hash)
    value = str(tx_hash).lower()
    return value if value.startswith("0x") else "0x" + value


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(value)
    if isinstance(value, Mapping):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def convert_receipt(web3_receipt: Mapping[str, Any]) -> TxReceipt:
    """
    Convert a web3 receipt (AttributeDict with HexBytes values) to TxReceipt.
    """
    return TxReceipt.model_validate(_jsonable(dict(web3_receipt)))


def backoff_delays(
    initial: float,
    factor: float = 2.0,
    max_interval: float = 8.0,
) -> Iterator[float]:
    """
    Endless exponential backoff schedule: initial, initial*factor, ... capped at max_interval.
    """
    if initial <= 0:
        raise ValueError("initial poll interval must be positive")
    if factor < 1:
        raise ValueError("backoff factor must be >= 1")
    delay = initial
    while True:
        yield min(delay, max_interval)
        delay = min(delay * factor, max_interval)
