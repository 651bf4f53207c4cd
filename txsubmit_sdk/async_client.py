"""
AsyncSubmitterClient - asyncio counterpart of SubmitterClient.

Every wait in this client is an ``await`` point, so callers can bound it with
``asyncio.wait_for`` or cancel the task that runs it.
"""
import asyncio
import logging
from typing import Dict, Optional

import aiohttp
from web3 import AsyncWeb3
from web3.exceptions import MethodUnavailable, TransactionNotFound, Web3Exception

from .client import HandleLike, hash_of, validate_rpc_url
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

_CONNECTION_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


class AsyncSubmitterClient:
    """Submits signed transactions through web3's AsyncHTTPProvider."""

    def __init__(
        self,
        rpc_url: str,
        signer: Optional[Signer] = None,
        priv_key: Optional[str] = None,
        expected_chain_id: Optional[int] = None,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ):
        if signer is None and not priv_key:
            raise ValueError("Either signer or priv_key must be provided")
        validate_rpc_url(rpc_url)

        self.rpc_url = rpc_url
        self.signer: Signer = signer if signer is not None else LocalSigner(priv_key)
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._expected_chain_id = expected_chain_id
        self._network_name: Optional[str] = None

        self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(
            rpc_url,
            request_kwargs={"timeout": aiohttp.ClientTimeout(total=timeout)},
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
    ) -> "AsyncSubmitterClient":
        resolved_url = NetworkConfig.get_rpc_url(network, override=rpc_url)
        kwargs.setdefault("expected_chain_id", NetworkConfig.get_chain_id(network))
        client = cls(rpc_url=resolved_url, signer=signer, priv_key=priv_key, **kwargs)
        client._network_name = network
        return client

    async def __aenter__(self) -> "AsyncSubmitterClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Release the provider's HTTP sessions"""
        await self.w3.provider.disconnect()

    @property
    def address(self) -> str:
        return self.signer.address

    async def block_number(self) -> int:
        try:
            return await self.w3.eth.block_number
        except _CONNECTION_ERRORS as e:
            raise NetworkError(f"Failed to reach node at {self.rpc_url}: {e}") from e

    async def chain_id(self) -> int:
        try:
            return await self.w3.eth.chain_id
        except _CONNECTION_ERRORS as e:
            raise NetworkError(f"Failed to reach node at {self.rpc_url}: {e}") from e

    async def assert_chain_id(self) -> None:
        if self._expected_chain_id is None:
            self.logger.warning("No expected chain ID set, skipping chain ID validation")
            return
        try:
            actual = await self.w3.eth.chain_id
        except Exception as e:
            raise NetworkError(f"Failed to validate chain ID: {e}") from e
        if actual != self._expected_chain_id:
            network = f" for network '{self._network_name}'" if self._network_name else ""
            raise NetworkError(f"Chain ID mismatch{network}: expected {self._expected_chain_id}, got {actual}")

    async def submit(
        self,
        request: TransactionRequest,
        gas: Optional[int] = None,
        gas_price_override: Optional[int] = None,
    ) -> TxHandle:
        """
        Sign a request and submit it to the node.

        Raises:
            NetworkError: If the node cannot be reached
            TransactionError: If signing fails or submission fails unexpectedly
            Web3Exception: If the node rejects the transaction
        """
        sender = self.address
        try:
            nonce = await self.w3.eth.get_transaction_count(sender, "pending")
            chain_id = await self.w3.eth.chain_id
            if gas is None:
                gas = await self._estimate_gas(request, sender)
            fees = await self._fee_fields(gas_price_override)

            tx = build_transaction(request, sender, nonce, chain_id, gas, fees)
            self.logger.debug(f"Built transaction: nonce={nonce} chainId={chain_id} gas={gas} fees={fees}")

            try:
                raw_tx = raw_bytes(self.signer.sign_transaction(tx))
            except Exception as e:
                self.logger.error(f"Transaction signing failed: {e}")
                raise TransactionError(f"Failed to sign transaction: {str(e)}")

            tx_hash = await self.w3.eth.send_raw_transaction(raw_tx)
            handle = TxHandle(tx_hash=to_hex_hash(tx_hash), nonce=nonce, sender=sender, to=request.to)
            self.logger.info(f"Transaction sent: {handle.tx_hash} (nonce {nonce}, to {request.to})")
            return handle

        except TxSubmitError:
            raise
        except _CONNECTION_ERRORS as e:
            self.logger.error(f"Node unreachable at {self.rpc_url}: {e}")
            raise NetworkError(f"Failed to reach node at {self.rpc_url}: {e}") from e
        except Web3Exception as e:
            self.logger.error(f"Web3 error: {e}")
            raise
        except Exception as e:
            self.logger.error(f"Unexpected error during submit: {e}")
            raise TransactionError(f"Transaction failed: {str(e)}") from e

    async def get_receipt(self, handle: HandleLike) -> Optional[TxReceipt]:
        """Single lookup; None while the transaction is not mined"""
        tx_hash = hash_of(handle)
        try:
            receipt = await self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        except _CONNECTION_ERRORS as e:
            raise NetworkError(f"Failed to reach node at {self.rpc_url}: {e}") from e
        if receipt is None:
            return None
        return convert_receipt(receipt)

    async def await_receipt(self, handle: HandleLike, delay: float = 5.0) -> Optional[TxReceipt]:
        """Fixed delay followed by exactly one lookup"""
        await asyncio.sleep(delay)
        return await self.get_receipt(handle)

    async def wait_for_receipt(
        self,
        handle: HandleLike,
        timeout: float = 120.0,
        poll_interval: float = 0.5,
        backoff_factor: float = 2.0,
        max_interval: float = 8.0,
    ) -> TxReceipt:
        """
        Poll for a receipt with exponential backoff until it appears or the deadline passes.

        Raises:
            ReceiptTimeoutError: If no receipt appears before the deadline
            asyncio.CancelledError: If the awaiting task is cancelled
        """
        tx_hash = hash_of(handle)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        for delay in backoff_delays(poll_interval, backoff_factor, max_interval):
            receipt = await self.get_receipt(tx_hash)
            if receipt is not None:
                self.logger.info(f"Receipt for {tx_hash}: status={receipt.status} block={receipt.block_number}")
                return receipt

            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            rate_limited_log(
                f"Transaction {tx_hash} still pending",
                level="info",
                interval=30,
                logger_instance=self.logger,
            )
            await asyncio.sleep(min(delay, remaining))

        raise ReceiptTimeoutError(f"Transaction {tx_hash} not confirmed within {timeout}s", tx_hash=tx_hash)

    async def _estimate_gas(self, request: TransactionRequest, sender: str) -> int:
        try:
            estimate = await self.w3.eth.estimate_gas(estimate_call(request, sender))
        except MethodUnavailable as e:
            self.logger.warning(f"Gas estimation unavailable, using default: {DEFAULT_GAS_LIMIT}. Error: {e}")
            return DEFAULT_GAS_LIMIT
        return buffered_gas(estimate)

    async def _fee_fields(self, gas_price_override: Optional[int]) -> Dict[str, int]:
        if gas_price_override is not None:
            return fee_fields(None, None, gas_price_override)

        latest = await self.w3.eth.get_block("latest")
        base_fee = latest.get("baseFeePerGas")
        if base_fee is not None:
            try:
                return fee_fields(base_fee, await self.w3.eth.max_priority_fee, None)
            except Web3Exception as e:
                self.logger.warning(f"Priority fee unavailable, falling back to gas price. Error: {e}")
        return fee_fields(None, None, await self.w3.eth.gas_price)
