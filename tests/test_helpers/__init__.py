"""
Shared constants and helpers for creating test clients.
"""
from typing import Optional

from eth_account import Account

from txsubmit_sdk.client import SubmitterClient
from txsubmit_sdk.signer.local import LocalSigner

# Test constants used throughout tests
TEST_RPC_URL = "https://rpc.example.com"
TEST_LOCAL_RPC_URL = "http://127.0.0.1:8545"
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_SENDER = Account.from_key(TEST_PRIV_KEY).address
TEST_CHAIN_ID = 9000
TEST_TX_HASH = "0x" + "1234567890abcdef" * 4


def create_test_client(
    rpc_url: str = TEST_RPC_URL,
    priv_key: Optional[str] = TEST_PRIV_KEY,
    signer=None,
    expected_chain_id: Optional[int] = None,
    w3=None,
    **kwargs
) -> SubmitterClient:
    """
    Create a client for testing with consistent defaults.

    Args:
        rpc_url: RPC URL for the node
        priv_key: Private key used for a LocalSigner when no signer is given
        signer: Signer instance
        expected_chain_id: Chain ID for validation
        w3: Web3 double to install in place of the real instance
        **kwargs: Additional constructor parameters

    Returns:
        Configured SubmitterClient instance
    """
    if signer is None and priv_key:
        signer = LocalSigner(priv_key)

    client = SubmitterClient(
        rpc_url=rpc_url,
        signer=signer,
        expected_chain_id=expected_chain_id,
        **kwargs
    )
    if w3 is not None:
        client.w3 = w3
    return client
