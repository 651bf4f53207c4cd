"""
Data models for the txsubmit SDK.
"""
import re
from typing import Dict, Any, Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from web3 import Web3

TX_HASH_RE = re.compile(r"^0x[0-9a-f]{64}$")
HEX_DATA_RE = re.compile(r"^0x([0-9a-fA-F]{2})*$")


class TransactionRequest(BaseModel):
    """Contract call to submit: recipient, value and opaque calldata"""
    model_config = ConfigDict(frozen=True)

    to: str
    value: int = Field(0, ge=0)
    data: str = "0x"

    @field_validator("to")
    @classmethod
    def _checksum_to(cls, value: str) -> str:
        if not Web3.is_address(value):
            raise ValueError(f"Invalid recipient address: {value}")
        return Web3.to_checksum_address(value)

    @field_validator("data")
    @classmethod
    def _hex_data(cls, value: str) -> str:
        if not value.startswith("0x"):
            value = "0x" + value
        if not HEX_DATA_RE.match(value):
            raise ValueError("Calldata must be an even-length hex string")
        return value.lower()


class TxHandle(BaseModel):
    """Identifies a submitted, possibly still pending, transaction"""
    model_config = ConfigDict(frozen=True)

    tx_hash: str
    nonce: int
    sender: str
    to: str

    @field_validator("tx_hash")
    @classmethod
    def _normalize_hash(cls, value: str) -> str:
        value = value.lower()
        if not value.startswith("0x"):
            value = "0x" + value
        if not TX_HASH_RE.match(value):
            raise ValueError(f"Invalid transaction hash: {value}")
        return value

    def __str__(self) -> str:
        return self.tx_hash


class TxReceipt(BaseModel):
    """Transaction receipt from the blockchain"""
    model_config = ConfigDict(populate_by_name=True)

    tx_hash: str = Field(..., alias="transactionHash")
    block_number: int = Field(..., alias="blockNumber")
    block_hash: str = Field(..., alias="blockHash")
    status: int
    gas_used: int = Field(..., alias="gasUsed")
    from_address: str = Field(..., alias="from")
    to_address: Optional[str] = Field(None, alias="to")
    logs: List[Dict[str, Any]]

    @property
    def succeeded(self) -> bool:
        return self.status == 1


class SubmissionResult(BaseModel):
    """Outcome of one submit-and-confirm cycle"""
    name: str
    handle: TxHandle
    receipt: Optional[TxReceipt] = None

    @property
    def confirmed(self) -> bool:
        return self.receipt is not None
