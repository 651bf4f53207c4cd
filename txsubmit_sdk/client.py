"""
SubmitterClient - signs pre-encoded contract calls, submits them and fetches receipts.
"""
import logging
import time
import urllib.parse
from typing import Dict, Any, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from web3 import Web3
from web3.exceptions import MethodUnavailable, TransactionNotFound, Web3Exception

from .config import NetworkConfig
from .exceptions import TxSubmitError, NetworkError, TransactionError, ReceiptTimeoutError
from .models import TransactionRequest, TxHandle, TxReceipt
from .signer import Signer, LocalSigner
from .tx import (
    DEFAULT_GAS_LIMIT,
    backoff_delays,
    buffered_gas,
    build_transaction,
    convert_receipt,
    estimate_call,
    fee_fields,
    raw_bytes,
    to_hex_hash,
)
from ._rate_limited_log import rate_limited_log

HandleLike = Union[TxHandle, str, bytes]


def validate_rpc_url(rpc_url: str) -> None:
    """
    Require https for remote endpoints; plain http is accepted for local nodes.

    Raises:
        ValueError: If the URL is remote and not https
    """
    parsed = urllib.parse.urlparse(rpc_url)
    host = parsed.hostname or ''
    is_local = host in ('localhost', '127.0.0.1', '::1')
    if parsed.scheme not in ('http', 'https') or (parsed.scheme != 'https' and not is_local):
        raise ValueError(f"rpc_url must use https:// for remote nodes (got: {parsed.scheme}://{host})")


def hash_of(handle: HandleLike) -> str:
    if isinstance(handle, TxHandle):
        return handle.tx_hash
    return to_hex_hash(handle)


class SubmitterClient:
    """
    Client that submits signed transactions to an EVM JSON-RPC node.

    This client handles:
    1. Signing a TransactionRequest with the configured identity
    2. Submitting it and returning a TxHandle
    3. Looking up the receipt once, after a fixed delay, or with bounded polling
    """

    def __init__(
        self,
        rpc_url: str,
        signer: Optional[Signer] = None,
        priv_key: Optional[str] = None,
        expected_chain_id: Optional[int] = None,
        retry_count: int = 0,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the SubmitterClient

        Args:
            rpc_url: JSON-RPC endpoint URL (e.g., "http://127.0.0.1:8545")
            signer: Signer used for outgoing transactions
            priv_key: Private key, used to build a LocalSigner when no signer is given
            expected_chain_id: Chain ID the node must report (None skips the check)
            retry_count: Retries on 5xx responses from the node. Connection
                failures are never retried so an unreachable node fails fast.
            timeout: Timeout for each RPC request in seconds
            logger: Optional logger instance

        Raises:
            ValueError: If neither signer nor priv_key is provided
            ValueError: If a remote rpc_url does not use https
        """
        if signer is None and not priv_key:
            raise ValueError("Either signer or priv_key must be provided")
        validate_rpc_url(rpc_url)

        self.rpc_url = rpc_url
        self.signer: Signer = signer if signer is not None else LocalSigner(priv_key)
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._expected_chain_id = expected_chain_id
        self._network_name: Optional[str] = None

        self.session = requests.Session()
        retries = Retry(
            total=retry_count,
            connect=0,
            read=0,
            status=retry_count,
            backoff_factor=0.5,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=["POST"],
            raise_on_status=False,
        )
        self.session.mount("http://", HTTPAdapter(max_retries=retries))
        self.session.mount("https://", HTTPAdapter(max_retries=retries))

        self.w3 = Web3(Web3.HTTPProvider(
            rpc_url,
            request_kwargs={"timeout": timeout},
            session=self.session,
            exception_retry_configuration=None,
        ))

    @classmethod
    def from_network(
        cls,
        network: str,
        signer: Optional[Signer] = None,
        priv_key: Optional[str] = None,
        rpc_url: Optional[str] = None,
        **kwargs
    ) -> "SubmitterClient":
        """
        Create a client from a packaged network definition.

        Args:
            network: Network name from networks.json (e.g., "localnet")
            signer: Signer used for outgoing transactions
            priv_key: Private key, alternative to signer
            rpc_url: Explicit RPC URL overriding the network default
            **kwargs: Passed through to the constructor
        """
        resolved_url = NetworkConfig.get_rpc_url(network, override=rpc_url)
        kwargs.setdefault("expected_chain_id", NetworkConfig.get_chain_id(network))
        client = cls(rpc_url=resolved_url, signer=signer, priv_key=priv_key, **kwargs)
        client._network_name = network
        return client

    @property
    def address(self) -> str:
        """
        Address of the signing identity

        Raises:
            ValueError: If no signer is available
        """
        if self.signer is None:
            raise ValueError("No signer available")
        return self.signer.address

    def block_number(self) -> int:
        """Current block height reported by the node"""
        try:
            return self.w3.eth.block_number
        except requests.RequestException as e:
            raise NetworkError(f"Failed to reach node at {self.rpc_url}: {e}") from e

    def chain_id(self) -> int:
        """Chain ID reported by the node"""
        try:
            return self.w3.eth.chain_id
        except requests.RequestException as e:
            raise NetworkError(f"Failed to reach node at {self.rpc_url}: {e}") from e

    def assert_chain_id(self) -> None:
        """
        Check that the node reports the expected chain ID.

        Raises:
            NetworkError: On mismatch or when the chain ID cannot be read
        """
        if self._expected_chain_id is None:
            self.logger.warning("No expected chain ID set, skipping chain ID validation")
            return

        try:
            actual = self.w3.eth.chain_id
        except Exception as e:
            raise NetworkError(f"Failed to validate chain ID: {e}") from e

        if actual != self._expected_chain_id:
            network = f" for network '{self._network_name}'" if self._network_name else ""
            raise NetworkError(
                f"Chain ID mismatch{network}: expected {self._expected_chain_id}, got {actual}"
            )

    def submit(
        self,
        request: TransactionRequest,
        gas: Optional[int] = None,
        gas_price_override: Optional[int] = None,
    ) -> TxHandle:
        """
        Sign a request and submit it to the node.

        Args:
            request: Recipient, value and calldata
            gas: Gas limit to use (if None, estimated with a 10% buffer)
            gas_price_override: Legacy gas price to use instead of the node's fee data

        Returns:
            Handle of the pending transaction

        Raises:
            NetworkError: If the node cannot be reached
            TransactionError: If signing fails or submission fails unexpectedly
            Web3Exception: If the node rejects the transaction
        """
        sender = self.address
        try:
            nonce = self.w3.eth.get_transaction_count(sender, "pending")
            chain_id = self.w3.eth.chain_id
            if gas is None:
                gas = self._estimate_gas(request, sender)
            fees = self._fee_fields(gas_price_override)

            tx = build_transaction(request, sender, nonce, chain_id, gas, fees)
            self.logger.debug(f"Built transaction: nonce={nonce} chainId={chain_id} gas={gas} fees={fees}")

            try:
                signed_tx = self.signer.sign_transaction(tx)
                raw_tx = raw_bytes(signed_tx)
            except Exception as e:
                self.logger.error(f"Transaction signing failed: {e}")
                raise TransactionError(f"Failed to sign transaction: {str(e)}")

            tx_hash = self.w3.eth.send_raw_transaction(raw_tx)
            handle = TxHandle(tx_hash=to_hex_hash(tx_hash), nonce=nonce, sender=sender, to=request.to)
            self.logger.info(f"Transaction sent: {handle.tx_hash} (nonce {nonce}, to {request.to})")
            return handle

        except TxSubmitError:
            raise
        except requests.RequestException as e:
            self.logger.error(f"Node unreachable at {self.rpc_url}: {e}")
            raise NetworkError(f"Failed to reach node at {self.rpc_url}: {e}") from e
        except Web3Exception as e:
            self.logger.error(f"Web3 error: {e}")
            raise
        except Exception as e:
            self.logger.error(f"Unexpected error during submit: {e}")
            raise TransactionError(f"Transaction failed: {str(e)}") from e

    def get_receipt(self, handle: HandleLike) -> Optional[TxReceipt]:
        """
        Look up a receipt once.

        Returns:
            The receipt, or None if the transaction is not mined (or unknown) yet

        Raises:
            NetworkError: If the node cannot be reached
        """
        tx_hash = hash_of(handle)
        try:
            receipt = self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        except requests.RequestException as e:
            raise NetworkError(f"Failed to reach node at {self.rpc_url}: {e}") from e
        if receipt is None:
            return None
        return convert_receipt(receipt)

    def await_receipt(self, handle: HandleLike, delay: float = 5.0) -> Optional[TxReceipt]:
        """
        Wait a fixed delay, then look the receipt up exactly once.

        Returns:
            The receipt, or None if it is not available after the delay
        """
        time.sleep(delay)
        receipt = self.get_receipt(handle)
        if receipt is None:
            self.logger.warning(f"No receipt for {hash_of(handle)} after {delay}s")
        return receipt

    def wait_for_receipt(
        self,
        handle: HandleLike,
        timeout: float = 120.0,
        poll_interval: float = 0.5,
        backoff_factor: float = 2.0,
        max_interval: float = 8.0,
    ) -> TxReceipt:
        """
        Poll for a receipt with exponential backoff until it appears or the deadline passes.

        Args:
            handle: Transaction handle or hash
            timeout: Overall deadline in seconds
            poll_interval: First delay between lookups
            backoff_factor: Multiplier applied to the delay after each miss
            max_interval: Upper bound on a single delay

        Returns:
            The receipt

        Raises:
            ReceiptTimeoutError: If no receipt appears before the deadline
            NetworkError: If the node cannot be reached
        """
        tx_hash = hash_of(handle)
        deadline = time.monotonic() + timeout
        for delay in backoff_delays(poll_interval, backoff_factor, max_interval):
            receipt = self.get_receipt(tx_hash)
            if receipt is not None:
                self.logger.info(f"Receipt for {tx_hash}: status={receipt.status} block={receipt.block_number}")
                return receipt

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            rate_limited_log(
                f"Transaction {tx_hash} still pending",
                level="info",
                interval=30,
                logger_instance=self.logger,
            )
            time.sleep(min(delay, remaining))

        raise ReceiptTimeoutError(f"Transaction {tx_hash} not confirmed within {timeout}s", tx_hash=tx_hash)

    def _estimate_gas(self, request: TransactionRequest, sender: str) -> int:
        try:
            estimate = self.w3.eth.estimate_gas(estimate_call(request, sender))
        except MethodUnavailable as e:
            self.logger.warning(f"Gas estimation unavailable, using default: {DEFAULT_GAS_LIMIT}. Error: {e}")
            return DEFAULT_GAS_LIMIT
        gas = buffered_gas(estimate)
        self.logger.debug(f"Estimated gas: {gas}")
        return gas

    def _fee_fields(self, gas_price_override: Optional[int]) -> Dict[str, int]:
        if gas_price_override is not None:
            return fee_fields(None, None, gas_price_override)

        latest = self.w3.eth.get_block("latest")
        base_fee = latest.get("baseFeePerGas")
        if base_fee is not None:
            try:
                return fee_fields(base_fee, self.w3.eth.max_priority_fee, None)
            except Web3Exception as e:
                self.logger.warning(f"Priority fee unavailable, falling back to gas price. Error: {e}")
        return fee_fields(None, None, self.w3.eth.gas_price)
