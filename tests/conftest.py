"""Shared pytest fixtures for gas-profiler tests.

The fakes below stand in for a node and for solc so the pipeline can be
exercised without network access. Estimates and gas used are deterministic
per method name.
"""

from __future__ import annotations

import asyncio
import itertools
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from gas_profiler.config.settings import ProfilerSettings, ReceiptPollConfig
from gas_profiler.exceptions import GasEstimationError, SubmissionError
from gas_profiler.types import ContractSpec

OWNER = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"
CONTRACT_ADDRESS = "0x9999999999999999999999999999999999999999"


def _fn(name: str, inputs: List[str] = ()) -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": f"p{i}", "type": t} for i, t in enumerate(inputs)],
        "outputs": [],
        "stateMutability": "nonpayable",
    }


ERC20_ABI = [
    {
        "type": "constructor",
        "inputs": [
            {"name": "_initialAmount", "type": "uint256"},
            {"name": "_tokenName", "type": "string"},
            {"name": "_decimalUnits", "type": "uint8"},
            {"name": "_tokenSymbol", "type": "string"},
        ],
    },
    _fn("totalSupply"),
    _fn("balanceOf", ["address"]),
    _fn("transfer", ["address", "uint256"]),
    _fn("approve", ["address", "uint256"]),
    _fn("allowance", ["address", "address"]),
    _fn("transferFrom", ["address", "address", "uint256"]),
]

ERC721_ABI = [
    {"type": "constructor", "inputs": [{"name": "tokenId", "type": "uint256"}]},
    _fn("totalSupply"),
    _fn("balanceOf", ["address"]),
    _fn("ownerOf", ["uint256"]),
    _fn("approve", ["address", "uint256"]),
    _fn("getApproved", ["uint256"]),
    _fn("setApprovalForAll", ["address", "bool"]),
    _fn("isApprovedForAll", ["address", "address"]),
    _fn("transferFrom", ["address", "address", "uint256"]),
    _fn("safeTransferFrom", ["address", "address", "uint256"]),
]


class FakeInvocation:
    def __init__(self, name: str, args: tuple):
        self.name = name
        self.args = args

    def __repr__(self) -> str:
        return f"FakeInvocation({self.name!r}, {self.args!r})"


class FakeFunctions:
    def __init__(self, abi: List[Dict[str, Any]]):
        self._names = {entry["name"] for entry in abi if entry.get("type") == "function"}

    def __getitem__(self, name: str):
        if name not in self._names:
            raise KeyError(name)
        return lambda *args: FakeInvocation(name, args)


class FakeContract:
    def __init__(self, abi: List[Dict[str, Any]], address: str):
        self.abi = abi
        self.address = address
        self.functions = FakeFunctions(abi)


class FakeContractFactory:
    def __init__(self, abi: List[Dict[str, Any]], bytecode: str):
        self.abi = abi
        self.bytecode = bytecode

    def constructor(self, *args: Any) -> FakeInvocation:
        return FakeInvocation("constructor", args)


class FakeChainClient:
    """In-memory stand-in for ChainClient.

    Every estimate is ``estimates.get(name, 50_000)``; the mined receipt
    reports ``gas_used.get(name, 21_000 + 1_000 * n)`` where n counts
    submissions. ``pending_polls`` receipt lookups answer None before the
    receipt shows up.
    """

    def __init__(
        self,
        estimates: Optional[Dict[str, int]] = None,
        gas_used: Optional[Dict[str, Any]] = None,
        pending_polls: int = 0,
        fail_estimate: tuple = (),
        fail_submit: tuple = (),
        never_mined: tuple = (),
        receipt_overrides: Optional[Dict[str, Dict[str, Any]]] = None,
    ):
        self.estimates = estimates or {}
        self.gas_used = gas_used or {}
        self.pending_polls = pending_polls
        self.fail_estimate = set(fail_estimate)
        self.fail_submit = set(fail_submit)
        self.never_mined = set(never_mined)
        self.receipt_overrides = receipt_overrides or {}
        self.submissions: List[Dict[str, Any]] = []
        self.estimations: List[str] = []
        self.polls: Dict[str, int] = {}
        self._receipts: Dict[str, Dict[str, Any]] = {}
        self._hashes = itertools.count(1)

    def accounts(self) -> List[str]:
        return [OWNER, RECIPIENT]

    def contract_factory(self, abi, bytecode):
        return FakeContractFactory(abi, bytecode)

    def contract_at(self, abi, address):
        return FakeContract(abi, address)

    async def estimate_gas(self, invocation, sender, operation=None) -> int:
        await asyncio.sleep(0)
        self.estimations.append(invocation.name)
        if invocation.name in self.fail_estimate:
            raise GasEstimationError(f"execution reverted: {invocation.name}", operation=operation)
        return self.estimates.get(invocation.name, 50_000)

    async def submit_transaction(self, invocation, sender, gas, operation=None) -> str:
        await asyncio.sleep(0)
        if invocation.name in self.fail_submit:
            raise SubmissionError(f"rejected: {invocation.name}", operation=operation)
        n = next(self._hashes)
        tx_hash = f"0x{n:064x}"
        receipt: Dict[str, Any] = {
            "transactionHash": tx_hash,
            "gasUsed": self.gas_used.get(invocation.name, 21_000 + 1_000 * n),
            "status": 1,
        }
        if invocation.name == "constructor":
            receipt["contractAddress"] = CONTRACT_ADDRESS
        receipt.update(self.receipt_overrides.get(invocation.name, {}))
        self._receipts[tx_hash] = receipt
        self.submissions.append({
            "name": invocation.name,
            "args": invocation.args,
            "sender": sender,
            "gas": gas,
            "operation": operation,
            "tx_hash": tx_hash,
        })
        return tx_hash

    async def get_transaction_receipt(self, tx_hash: str):
        await asyncio.sleep(0)
        self.polls[tx_hash] = self.polls.get(tx_hash, 0) + 1
        name = next(s["name"] for s in self.submissions if s["tx_hash"] == tx_hash)
        if name in self.never_mined or self.polls[tx_hash] <= self.pending_polls:
            return None
        return self._receipts[tx_hash]


class FakeCompiler:
    def __init__(self, artifacts: Dict[str, Dict[str, Any]]):
        self.artifacts = artifacts
        self.compiled: List[str] = []

    def compile(self, source_path: str) -> Dict[str, Dict[str, Any]]:
        self.compiled.append(source_path)
        return self.artifacts


@pytest.fixture
def fast_settings() -> ProfilerSettings:
    """Settings with a tight receipt polling loop."""
    return ProfilerSettings(poll=ReceiptPollConfig(timeout=0.5, interval=0.001, max_interval=0.005))


@pytest.fixture
def fake_client() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture
def make_client():
    return FakeChainClient


@pytest.fixture
def erc20_spec() -> ContractSpec:
    return ContractSpec(
        source_path="contracts/EIP20.sol",
        selector="contracts/EIP20.sol:EIP20",
        constructor_args=("1200000", "Test ERC20 token", "1", "TST"),
    )


@pytest.fixture
def erc721_spec() -> ContractSpec:
    return ContractSpec(
        source_path="contracts/Token.sol",
        selector="contracts/Token.sol:Token",
        constructor_args=("1",),
    )


@pytest.fixture
def erc20_compiler(erc20_spec: ContractSpec) -> FakeCompiler:
    return FakeCompiler({
        erc20_spec.selector: {"bytecode": "6080604052", "interface": ERC20_ABI},
        "contracts/EIP20Interface.sol:EIP20Interface": {"bytecode": None, "interface": ERC20_ABI[1:]},
    })


@pytest.fixture
def erc721_compiler(erc721_spec: ContractSpec) -> FakeCompiler:
    return FakeCompiler({erc721_spec.selector: {"bytecode": "6080604052", "interface": ERC721_ABI}})


@pytest.fixture
def make_compiler():
    return FakeCompiler


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def erc20_instance() -> FakeContract:
    return FakeContract(ERC20_ABI, CONTRACT_ADDRESS)


@pytest.fixture
def erc721_instance() -> FakeContract:
    return FakeContract(ERC721_ABI, CONTRACT_ADDRESS)


@pytest.fixture
def erc20_abi() -> List[Dict[str, Any]]:
    return ERC20_ABI
