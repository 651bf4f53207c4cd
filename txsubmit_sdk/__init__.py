"""
txsubmit SDK - submit pre-encoded contract calls to an EVM node and track their receipts.
"""
from .version import __version__
from .client import SubmitterClient
from .async_client import AsyncSubmitterClient
from .config import NetworkConfig, resolve_private_key
from .exceptions import (
    TxSubmitError,
    ConfigError,
    NetworkError,
    TransactionError,
    ReceiptTimeoutError,
)
from .models import TransactionRequest, TxHandle, TxReceipt, SubmissionResult
from .payloads import PRESETS, DEFAULT_SEQUENCE, PayloadPreset, get_preset, load_payload_file
from .sequence import run_sequence, run_sequence_async
from .signer import Signer, LocalSigner

__all__ = [
    "SubmitterClient",
    "AsyncSubmitterClient",
    "NetworkConfig",
    "resolve_private_key",
    "TxSubmitError",
    "ConfigError",
    "NetworkError",
    "TransactionError",
    "ReceiptTimeoutError",
    "TransactionRequest",
    "TxHandle",
    "TxReceipt",
    "SubmissionResult",
    "PRESETS",
    "DEFAULT_SEQUENCE",
    "PayloadPreset",
    "get_preset",
    "load_payload_file",
    "run_sequence",
    "run_sequence_async",
    "Signer",
    "LocalSigner",
    "__version__",
]
