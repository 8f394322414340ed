"""
Method steps.

A step calls one contract method with fixed arguments, measures the gas of
the mined transaction and returns the GasReport extended by that single
operation. Steps know nothing about their position in a pipeline.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from web3.contract import Contract
from web3.exceptions import Web3Exception

from ..config.logging_config import component_logger
from ..config.settings import ProfilerSettings
from ..exceptions import GasEstimationError
from ..helpers.accounts import Sender
from ..helpers.chain_client import ChainClient
from ..helpers.receipts import await_receipt, gas_used_of
from ..types import GasReport


class MethodStep:
    """Callable ``(instance, report) -> (instance, report')`` for one method call."""

    def __init__(
        self,
        client: ChainClient,
        sender: Sender,
        method_name: str,
        *args: Any,
        operation: Optional[str] = None,
        settings: Optional[ProfilerSettings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.client = client
        self.sender = sender
        self.method_name = method_name
        self.args = args
        self.operation = operation or method_name
        self.settings = settings or ProfilerSettings()
        self.logger = logger
        self.log = component_logger(logger, "step")

    def __repr__(self) -> str:
        return f"MethodStep({self.operation!r}, {self.method_name}{self.args!r})"

    def _invocation(self, instance: Contract) -> Any:
        try:
            return instance.functions[self.method_name](*self.args)
        except (Web3Exception, AttributeError, KeyError, TypeError, ValueError) as e:
            raise GasEstimationError(
                f"Cannot call {self.method_name}{self.args!r}: {e}", operation=self.operation
            ) from e

    async def __call__(self, instance: Contract, report: GasReport) -> tuple[Contract, GasReport]:
        invocation = self._invocation(instance)

        self.log.debug(f"{self.operation}: estimating gas")
        estimate = await self.client.estimate_gas(invocation, self.sender, operation=self.operation)
        gas_limit = self.settings.gas_multiplier * estimate

        self.log.debug(f"{self.operation}: sending transaction (limit {gas_limit})")
        tx_hash = await self.client.submit_transaction(
            invocation, self.sender, gas_limit, operation=self.operation
        )

        receipt = await await_receipt(
            self.client, tx_hash, self.settings.poll, self.logger, operation=self.operation
        )
        gas_used = gas_used_of(receipt, tx_hash, self.operation)
        self.log.debug(f"{self.operation}: {gas_used} gas used")

        return instance, report.with_gas(self.operation, gas_used)


def make_step(
    client: ChainClient,
    sender: Sender,
    method_name: str,
    *args: Any,
    operation: Optional[str] = None,
    settings: Optional[ProfilerSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> MethodStep:
    """Build a step calling ``method_name(*args)`` from ``sender``."""
    return MethodStep(
        client,
        sender,
        method_name,
        *args,
        operation=operation,
        settings=settings,
        logger=logger,
    )
