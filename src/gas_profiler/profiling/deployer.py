"""
Contract deployment.

Compiles the contract named by a ContractSpec, deploys it with a gas limit
of ``gas_multiplier`` x the node's estimate, waits for the receipt and seeds
the GasReport with the gas the deployment actually used.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol

from web3.contract import Contract
from web3.exceptions import Web3Exception

from ..config.logging_config import component_logger
from ..config.settings import ProfilerSettings
from ..exceptions import (
    CompilationError,
    ConstructorArgumentError,
    MalformedReceiptError,
    MissingBytecodeError,
    MissingInterfaceError,
    ProfilerError,
)
from ..helpers.abi_args import coerce_constructor_args
from ..helpers.accounts import Sender, sender_address
from ..helpers.chain_client import ChainClient
from ..helpers.receipts import await_receipt, gas_used_of
from ..types import DEPLOYMENT, CompiledArtifact, ContractSpec, GasReport


class Compiler(Protocol):
    def compile(self, source_path: str) -> dict[str, dict[str, Any]]: ...


def load_artifact(compiler: Compiler, spec: ContractSpec) -> CompiledArtifact:
    """Compile ``spec.source_path`` and pick the artifact for ``spec.selector``."""
    compiled = compiler.compile(spec.source_path)

    entry = compiled.get(spec.selector)
    if not entry:
        raise CompilationError(
            f"Contract not found: {spec.selector} at {spec.source_path}",
            errors=[f"available: {', '.join(sorted(compiled)) or '<none>'}"],
        )

    bytecode = entry.get("bytecode")
    if not bytecode:
        raise MissingBytecodeError(
            f"Compilation of contract {spec.selector} at {spec.source_path} did not produce any bytecode"
        )

    interface = entry.get("interface")
    if interface is None:
        raise MissingInterfaceError(
            f"Compilation of contract {spec.selector} at {spec.source_path} did not produce interface"
        )

    return CompiledArtifact(bytecode=bytecode, interface=list(interface))


async def deploy(
    client: ChainClient,
    deployer: Sender,
    spec: ContractSpec,
    *,
    compiler: Compiler,
    settings: Optional[ProfilerSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> tuple[Contract, GasReport]:
    """
    Deploy the contract described by ``spec`` from ``deployer``.

    Returns:
        The live contract instance and a GasReport holding only ``deployment``.

    Raises:
        DeployError: compilation output unusable or constructor args invalid.
        TransactionError: estimation, submission or receipt polling failed.
    """
    settings = settings or ProfilerSettings()
    log = component_logger(logger, "deploy")

    try:
        log.debug(f"Compiling contract {spec.selector} at {spec.source_path}")
        artifact = await asyncio.to_thread(load_artifact, compiler, spec)

        args = coerce_constructor_args(artifact.interface, spec.constructor_args)
        factory = client.contract_factory(artifact.interface, artifact.bytecode)
        try:
            constructor = factory.constructor(*args)
        except (Web3Exception, TypeError, ValueError) as e:
            raise ConstructorArgumentError(f"Invalid constructor arguments for {spec.selector}: {e}") from e

        log.debug(f"Estimating deployment gas for {spec.selector}")
        estimate = await client.estimate_gas(constructor, deployer, operation=DEPLOYMENT)
        gas_limit = settings.gas_multiplier * estimate

        log.debug(
            f"Deploying {spec.selector} from {sender_address(deployer)} "
            f"with args {args} (estimate {estimate}, limit {gas_limit})"
        )
        tx_hash = await client.submit_transaction(constructor, deployer, gas_limit, operation=DEPLOYMENT)

        receipt = await await_receipt(client, tx_hash, settings.poll, logger, operation=DEPLOYMENT)
        gas_used = gas_used_of(receipt, tx_hash, DEPLOYMENT)

        address = receipt.get("contractAddress")
        if not address:
            raise MalformedReceiptError(
                f"Could not find contract address after deployment transaction {tx_hash}",
                operation=DEPLOYMENT,
                tx_hash=tx_hash,
            )
    except ProfilerError as e:
        log.debug(f"Deployment of {spec.selector} failed: {e}")
        raise

    log.info(f"Deployed {spec.selector} at {address} using {gas_used} gas")
    return client.contract_at(artifact.interface, address), GasReport.seeded(gas_used)
