"""
Exceptions for the txsubmit SDK.
"""
from typing import Optional


class TxSubmitError(Exception):
    """Base exception for all SDK errors."""
    pass


class ConfigError(TxSubmitError):
    """Raised when a network, key or payload cannot be resolved."""
    pass


class NetworkError(TxSubmitError):
    """Raised when the node is unreachable or is not the expected chain."""
    pass


class TransactionError(TxSubmitError):
    """Raised when a transaction cannot be signed or submission fails unexpectedly."""
    pass


class ReceiptTimeoutError(TxSubmitError):
    """Raised when a receipt does not show up before the deadline."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message)
