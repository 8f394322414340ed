"""
Profiling pipeline.

deploy -> step 1 -> step 2 -> ... -> GasReport

Steps run strictly one after another (each waits for the previous
transaction's receipt) because they share the sender's nonce sequence.
The first failure aborts the pipeline and is re-raised unchanged; a
partially filled report is never returned.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Optional

from web3.contract import Contract

from ..config.logging_config import component_logger
from ..config.settings import ProfilerSettings
from ..exceptions import ProfilerError
from ..helpers.accounts import Sender
from ..helpers.chain_client import ChainClient
from ..helpers.compiler import SolidityCompiler
from ..types import ContractSpec, GasReport
from .deployer import Compiler, deploy
from .interfaces import ContractType, build_steps, resolve_contract_type

Step = Callable[[Contract, GasReport], Awaitable[tuple[Contract, GasReport]]]


async def fold_steps(
    steps: Iterable[Step],
    instance: Contract,
    report: GasReport,
) -> tuple[Contract, GasReport]:
    """Thread ``(instance, report)`` through ``steps`` in order."""
    state = (instance, report)
    for step in steps:
        state = await step(*state)
    return state


async def profile(
    client: ChainClient,
    deployer: Sender,
    second: Sender,
    spec: ContractSpec,
    contract_type: str | ContractType = ContractType.ERC20,
    *,
    compiler: Optional[Compiler] = None,
    settings: Optional[ProfilerSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> GasReport:
    """
    Deploy ``spec`` and measure every standard method of ``contract_type``.

    Returns:
        GasReport with ``deployment`` followed by one key per profiled call.

    Raises:
        ProfilerError: the first error of any stage.
    """
    contract_type = resolve_contract_type(contract_type)
    settings = settings or ProfilerSettings()
    compiler = compiler or SolidityCompiler(settings.solc_version, logger=logger)
    log = component_logger(logger, "profile")

    steps = build_steps(contract_type, client, deployer, second, settings, logger)
    log.info(f"Profiling {spec.selector} as {contract_type.name} ({len(steps)} method calls)")

    try:
        instance, report = await deploy(
            client, deployer, spec, compiler=compiler, settings=settings, logger=logger
        )
        _, report = await fold_steps(steps, instance, report)
    except ProfilerError as e:
        log.debug(f"Profiling {spec.selector} failed: {type(e).__name__}: {e}")
        raise

    log.debug(f"Profile of {spec.selector} complete: {report.as_dict()}")
    return report


async def profile_many(
    client: ChainClient,
    deployer: Sender,
    second: Sender,
    specs: Sequence[ContractSpec],
    contract_type: str | ContractType = ContractType.ERC20,
    *,
    compiler: Optional[Compiler] = None,
    settings: Optional[ProfilerSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> list[tuple[ContractSpec, GasReport]]:
    """
    Profile every spec, at most ``settings.concurrency`` at a time.

    All or nothing: the first failing pipeline cancels the others and its
    error propagates.
    """
    settings = settings or ProfilerSettings()
    compiler = compiler or SolidityCompiler(settings.solc_version, logger=logger)
    limit = asyncio.Semaphore(settings.concurrency)

    async def run(spec: ContractSpec) -> GasReport:
        async with limit:
            return await profile(
                client,
                deployer,
                second,
                spec,
                contract_type,
                compiler=compiler,
                settings=settings,
                logger=logger,
            )

    tasks = [asyncio.ensure_future(run(spec)) for spec in specs]
    try:
        reports = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return list(zip(specs, reports))
