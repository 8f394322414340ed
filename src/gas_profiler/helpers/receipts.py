"""
Receipt polling.

``await_receipt`` is the only waiting primitive of the pipeline: deployment
and every method step use it to block until their transaction is mined.
It polls with exponential backoff and gives up with ReceiptTimeoutError
once the configured bound is exceeded.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Optional, Protocol

from ..config.logging_config import component_logger
from ..config.settings import ReceiptPollConfig
from ..exceptions import (
    MalformedReceiptError,
    ReceiptQueryError,
    ReceiptTimeoutError,
    TransactionRevertedError,
)


class ReceiptSource(Protocol):
    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Mapping[str, Any]]: ...


async def await_receipt(
    client: ReceiptSource,
    tx_hash: str,
    poll: Optional[ReceiptPollConfig] = None,
    logger: Optional[logging.Logger] = None,
    operation: Optional[str] = None,
) -> Mapping[str, Any]:
    """
    Wait until ``tx_hash`` is mined and return its receipt.

    Raises:
        ReceiptTimeoutError: no receipt within ``poll.timeout`` seconds.
        ReceiptQueryError: the node failed while being polled (from the client).
        MalformedReceiptError: the receipt has no positive integer gasUsed.
        TransactionRevertedError: the transaction was mined with status 0.
    """
    poll = poll or ReceiptPollConfig()
    log = component_logger(logger, "receipts")
    loop = asyncio.get_running_loop()
    deadline = loop.time() + poll.timeout
    attempts = 0

    log.debug(f"Waiting for receipt of {tx_hash}")
    for delay in poll.delays():
        attempts += 1
        try:
            receipt = await client.get_transaction_receipt(tx_hash)
        except ReceiptQueryError as e:
            if e.operation is None:
                e.operation = operation
            raise
        if receipt is not None:
            break
        remaining = deadline - loop.time()
        if remaining <= 0:
            log.debug(f"No receipt for {tx_hash} after {attempts} attempts ({poll.timeout}s)")
            raise ReceiptTimeoutError(
                f"Transaction {tx_hash} was not mined within {poll.timeout}s",
                operation=operation,
                tx_hash=tx_hash,
            )
        await asyncio.sleep(min(delay, remaining))

    log.debug(f"Receipt for {tx_hash} received after {attempts} attempt(s)")
    gas_used_of(receipt, tx_hash, operation)

    status = receipt.get("status")
    if status is not None and int(status) == 0:
        raise TransactionRevertedError(
            f"Transaction {tx_hash} reverted", operation=operation, tx_hash=tx_hash
        )
    return receipt


def gas_used_of(receipt: Mapping[str, Any], tx_hash: str, operation: Optional[str] = None) -> int:
    """Extract gasUsed, rejecting receipts where it is absent or not positive."""
    gas_used = receipt.get("gasUsed")
    if isinstance(gas_used, bool) or not isinstance(gas_used, int) or gas_used <= 0:
        raise MalformedReceiptError(
            f"Transaction receipt for {tx_hash} did not contain gasUsed (got {gas_used!r})",
            operation=operation,
            tx_hash=tx_hash,
        )
    return gas_used
