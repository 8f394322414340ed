#!/usr/bin/env python3
"""
Command line interface.

Usage:
    erc-gas-profiler --contract-type erc20 contracts/EIP20.sol:EIP20,1200000,"Test token",1,TST
    python -m gas_profiler -t erc721 --format json contracts/Token.sol:Token,1

Environment Variables:
    - RPC_URL: node to profile against (default: local Anvil/Hardhat port)
    - LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL
    - GAS_MULTIPLIER, TOKEN_ID, SOLC_VERSION, PROFILE_CONCURRENCY,
      RECEIPT_TIMEOUT, RECEIPT_POLL_INTERVAL, RECEIPT_POLL_MAX_INTERVAL,
      RECEIPT_POLL_BACKOFF: see gas_profiler.config.settings
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional, Sequence

from dotenv import find_dotenv, load_dotenv
from web3.exceptions import Web3Exception

from .config.logging_config import get_profiler_logger
from .config.settings import ProfilerSettings
from .exceptions import InvalidContractSpecError, ProfilerError
from .helpers.accounts import resolve_accounts
from .helpers.chain_client import ChainClient
from .helpers.compiler import SolidityCompiler
from .helpers.web3_setup import ensure_connected, get_web3_instance
from .profiling.interfaces import CONTRACT_TYPES, resolve_contract_type
from .profiling.pipeline import profile_many
from .reporting import NO_RESULTS, RENDERERS
from .types import ContractSpec


def parse_contract_spec(raw: str) -> ContractSpec:
    """Parse ``<path>:<ContractName>[,arg1,arg2,...]``.

    >>> parse_contract_spec("path:contract,arg1,arg2")
    ContractSpec(source_path='path', selector='path:contract', constructor_args=('arg1', 'arg2'))
    """
    selector, *args = raw.split(",")
    source_path, sep, name = selector.rpartition(":")
    if not sep or not source_path or not name:
        raise InvalidContractSpecError(
            f"Invalid contract spec {raw!r}: expected <path-to-contract-file>:<contract-name>[,args...]"
        )
    return ContractSpec(source_path=source_path, selector=selector, constructor_args=tuple(args))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="erc-gas-profiler",
        description="Deploy ERC20/ERC721 contracts to a development node and report gas per method",
    )
    parser.add_argument(
        "specs",
        nargs="*",
        metavar="CONTRACT_SPEC",
        help="Contract in the format <path-to-contract-file>:<contract-name>[,<constructor args separated by ','>]",
    )
    parser.add_argument(
        "--contract-specs",
        nargs="*",
        default=[],
        metavar="CONTRACT_SPEC",
        help="Same as the positional specs (kept for scripts using the flag form)",
    )
    parser.add_argument(
        "-t", "--contract-type",
        default="erc20",
        help=f"Choose from: {', '.join(CONTRACT_TYPES)} (default erc20)",
    )
    parser.add_argument("--format", choices=sorted(RENDERERS), default="table", help="Output format (default table)")
    parser.add_argument("--json", action="store_true", help="Shortcut for --format json")
    parser.add_argument("--rpc-url", help="Node RPC URL (default RPC_URL env or local node)")
    parser.add_argument("--env-file", help="Path to .env file to load before resolving env vars")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL (default LOG_LEVEL env or INFO)")
    parser.add_argument("--log-file", help="Also write logs to this file under GAS_PROFILER_LOG_DIR (default ./logs)")
    parser.add_argument("--timeout", type=float, help="Seconds to wait for each transaction receipt")
    parser.add_argument("--gas-multiplier", type=int, help="Gas limit = multiplier x estimate (default 2)")
    parser.add_argument("--token-id", type=int, help="Token id the ERC721 constructor mints to the deployer (default 1)")
    parser.add_argument("--solc-version", help="solc version to install and use (default: active solcx version)")
    parser.add_argument("--concurrency", type=int, help="Contracts profiled at the same time (default 1)")
    parser.add_argument("--deployer-key-env", help="Env var holding the deployer private key (default: first node account)")
    parser.add_argument("--recipient-key-env", help="Env var holding the second account private key (default: next node account)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv(args.env_file or find_dotenv(usecwd=True))

    try:
        logger = get_profiler_logger(args.log_level, args.log_file)
    except ProfilerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        contract_type = resolve_contract_type(args.contract_type)
        specs = [parse_contract_spec(raw) for raw in [*args.contract_specs, *args.specs]]
        if not specs:
            print(NO_RESULTS)
            return 0

        settings = ProfilerSettings.from_env().override(
            gas_multiplier=args.gas_multiplier,
            token_id=args.token_id,
            solc_version=args.solc_version,
            concurrency=args.concurrency,
            timeout=args.timeout,
        )

        w3 = ensure_connected(get_web3_instance(args.rpc_url))
        client = ChainClient(w3, logger)
        deployer, second = resolve_accounts(client.accounts(), args.deployer_key_env, args.recipient_key_env)

        results = asyncio.run(profile_many(
            client,
            deployer,
            second,
            specs,
            contract_type,
            compiler=SolidityCompiler(settings.solc_version, logger=logger),
            settings=settings,
            logger=logger,
        ))
    except ProfilerError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    except (Web3Exception, OSError) as e:
        logger.error(f"Node error: {e}")
        return 1

    output_format = "json" if args.json else args.format
    print(RENDERERS[output_format](results))
    return 0


if __name__ == "__main__":
    sys.exit(main())
