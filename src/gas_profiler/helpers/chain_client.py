"""
Chain client adapter.

Thin asynchronous facade over a synchronous ``web3.Web3`` instance. Every
blocking RPC runs in a worker thread, so a profiling pipeline suspends only
at gas estimation, transaction submission and receipt polls.

An *invocation* is anything web3 can estimate and send: a bound contract
function (``contract.functions.transfer(to, 100)``) or a constructor call
(``Contract.constructor(*args)``).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.contract import Contract
from web3.exceptions import TransactionNotFound, Web3Exception
from web3.types import TxReceipt

from ..config.logging_config import component_logger
from ..exceptions import GasEstimationError, ReceiptQueryError, SubmissionError
from .accounts import Sender, sender_address

# Failures a node or transport may raise for a single request
NODE_ERRORS = (Web3Exception, ValueError, OSError)


class ChainClient:
    """Gas estimation, submission and receipt lookup for one node."""

    def __init__(self, w3: Web3, logger: Optional[logging.Logger] = None):
        self.w3 = w3
        self.log = component_logger(logger, "chain")
        # One lock per sender address: nonce lookup and send must not interleave
        self._sender_locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, address: str) -> asyncio.Lock:
        lock = self._sender_locks.get(address)
        if lock is None:
            lock = self._sender_locks[address] = asyncio.Lock()
        return lock

    def accounts(self) -> list[str]:
        return list(self.w3.eth.accounts)

    def contract_factory(self, abi: list[dict[str, Any]], bytecode: str) -> type[Contract]:
        return self.w3.eth.contract(abi=abi, bytecode=bytecode)

    def contract_at(self, abi: list[dict[str, Any]], address: str) -> Contract:
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    async def estimate_gas(self, invocation: Any, sender: Sender, operation: str | None = None) -> int:
        """Ask the node how much gas ``invocation`` needs when sent by ``sender``."""
        params = {"from": sender_address(sender)}
        try:
            estimate = await asyncio.to_thread(invocation.estimate_gas, params)
        except NODE_ERRORS as e:
            raise GasEstimationError(f"Gas estimation failed: {e}", operation=operation) from e
        return int(estimate)

    async def submit_transaction(
        self,
        invocation: Any,
        sender: Sender,
        gas: int,
        operation: str | None = None,
    ) -> str:
        """Send ``invocation`` with an explicit gas limit and return the tx hash (0x-hex).

        Submissions from the same sender are serialized, so pipelines running
        concurrently never sign two transactions with the same nonce.
        """
        address = sender_address(sender)
        try:
            async with self._lock_for(address):
                if isinstance(sender, LocalAccount):
                    tx_hash = await asyncio.to_thread(self._send_signed, invocation, sender, gas)
                else:
                    tx_hash = await asyncio.to_thread(invocation.transact, {"from": address, "gas": gas})
        except NODE_ERRORS as e:
            raise SubmissionError(f"Transaction submission failed: {e}", operation=operation) from e
        return Web3.to_hex(tx_hash)

    def _send_signed(self, invocation: Any, account: LocalAccount, gas: int) -> bytes:
        tx = invocation.build_transaction({
            "from": account.address,
            "gas": gas,
            "nonce": self.w3.eth.get_transaction_count(account.address, "pending"),
            "chainId": self.w3.eth.chain_id,
        })
        signed = account.sign_transaction(tx)
        # Handle both old and new eth-account versions
        raw = getattr(signed, "raw_transaction", None) or getattr(signed, "rawTransaction")
        return self.w3.eth.send_raw_transaction(raw)

    async def get_transaction_receipt(self, tx_hash: str) -> TxReceipt | None:
        """Return the receipt, or None while the transaction is still pending."""
        try:
            return await asyncio.to_thread(self.w3.eth.get_transaction_receipt, tx_hash)
        except TransactionNotFound:
            return None
        except NODE_ERRORS as e:
            raise ReceiptQueryError(f"Receipt lookup failed: {e}", tx_hash=tx_hash) from e
