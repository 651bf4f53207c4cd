"""
Local private-key signer.
"""
import logging
from typing import Any, Dict

from eth_account import Account
from eth_account.signers.local import LocalAccount

logger = logging.getLogger(__name__)


class LocalSigner:
    """
    Signer backed by an in-memory secp256k1 private key.

    The key never leaves this object; only the derived address is exposed.
    """

    def __init__(self, private_key: str):
        """
        Args:
            private_key: Hex private key, with or without 0x prefix

        Raises:
            ValueError: If the key is not a valid secp256k1 private key
        """
        if not private_key:
            raise ValueError("private_key must not be empty")
        try:
            self._account: LocalAccount = Account.from_key(private_key)
        except (ValueError, TypeError) as e:
            # Do not echo the key back in the error message
            raise ValueError(f"Invalid private key: {type(e).__name__}") from None
        self.address: str = self._account.address
        logger.debug(f"Loaded local signer for {self.address}")

    def sign_transaction(self, transaction_dict: Dict[str, Any]) -> Any:
        return self._account.sign_transaction(transaction_dict)

    def __repr__(self) -> str:
        return f"LocalSigner(address={self.address!r})"
