"""
Sequential submit-and-confirm runs.

Each request is submitted only after the previous one has been checked for a
receipt. The transactions are independent: nothing is rolled back when a later
one fails.
"""
import logging
from typing import List, Mapping, Optional

from .async_client import AsyncSubmitterClient
from .client import SubmitterClient
from .exceptions import ReceiptTimeoutError
from .models import TransactionRequest, SubmissionResult, TxHandle, TxReceipt

logger = logging.getLogger(__name__)


def _record(
    name: str,
    handle: TxHandle,
    receipt: Optional[TxReceipt],
) -> SubmissionResult:
    if receipt is None:
        logger.warning(f"{name}: no receipt for {handle.tx_hash}")
    elif not receipt.succeeded:
        logger.error(f"{name}: transaction {handle.tx_hash} reverted in block {receipt.block_number}")
    else:
        logger.info(f"{name}: transaction {handle.tx_hash} confirmed in block {receipt.block_number}")
    return SubmissionResult(name=name, handle=handle, receipt=receipt)


def run_sequence(
    client: SubmitterClient,
    requests: Mapping[str, TransactionRequest],
    timeout: float = 120.0,
    poll_interval: float = 0.5,
    fixed_delay: Optional[float] = None,
    stop_on_revert: bool = False,
) -> List[SubmissionResult]:
    """
    Submit each request in order and check its receipt before moving on.

    Args:
        client: Client used for every submission
        requests: Named requests, submitted in mapping order
        timeout: Receipt polling deadline per transaction
        poll_interval: First delay between receipt lookups
        fixed_delay: When set, wait this long and look the receipt up once
            instead of polling
        stop_on_revert: Stop after the first reverted transaction

    Returns:
        One result per submitted request. A receipt that did not arrive in time
        is recorded as None.

    Raises:
        Any submission failure from the client; the run stops there.
    """
    results: List[SubmissionResult] = []
    for name, request in requests.items():
        handle = client.submit(request)
        if fixed_delay is not None:
            receipt = client.await_receipt(handle, delay=fixed_delay)
        else:
            try:
                receipt = client.wait_for_receipt(handle, timeout=timeout, poll_interval=poll_interval)
            except ReceiptTimeoutError as e:
                logger.warning(str(e))
                receipt = None

        result = _record(name, handle, receipt)
        results.append(result)
        if stop_on_revert and receipt is not None and not receipt.succeeded:
            logger.info(f"Stopping sequence after reverted {name}")
            break
    return results


async def run_sequence_async(
    client: AsyncSubmitterClient,
    requests: Mapping[str, TransactionRequest],
    timeout: float = 120.0,
    poll_interval: float = 0.5,
    fixed_delay: Optional[float] = None,
    stop_on_revert: bool = False,
) -> List[SubmissionResult]:
    """Async variant of run_sequence; still strictly one transaction at a time."""
    results: List[SubmissionResult] = []
    for name, request in requests.items():
        handle = await client.submit(request)
        if fixed_delay is not None:
            receipt = await client.await_receipt(handle, delay=fixed_delay)
        else:
            try:
                receipt = await client.wait_for_receipt(handle, timeout=timeout, poll_interval=poll_interval)
            except ReceiptTimeoutError as e:
                logger.warning(str(e))
                receipt = None

        result = _record(name, handle, receipt)
        results.append(result)
        if stop_on_revert and receipt is not None and not receipt.succeeded:
            logger.info(f"Stopping sequence after reverted {name}")
            break
    return results
