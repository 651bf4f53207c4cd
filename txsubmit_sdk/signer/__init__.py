"""
Signer protocol for the txsubmit SDK.
"""
from typing import Any, Dict, Protocol, runtime_checkable

from .local import LocalSigner

__all__ = ["Signer", "LocalSigner"]


@runtime_checkable
class Signer(Protocol):
    """Protocol for objects that can sign outgoing transactions"""
    address: str

    def sign_transaction(self, transaction_dict: Dict[str, Any]) -> Any:
        """Sign transaction and return an object exposing raw_transaction"""
        ...
