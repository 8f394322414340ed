"""
Gas profiler for ERC20 / ERC721 contracts.

Deploys a Solidity contract to a development node, calls each standard
token method once and reports the gas used per operation.
"""

from .exceptions import ProfilerError
from .profiling.deployer import deploy
from .profiling.interfaces import ContractType, expected_operations
from .profiling.pipeline import fold_steps, profile, profile_many
from .profiling.steps import make_step
from .types import ContractSpec, GasReport

__version__ = "0.1.0"

__all__ = [
    "ContractSpec",
    "ContractType",
    "GasReport",
    "ProfilerError",
    "deploy",
    "expected_operations",
    "fold_steps",
    "make_step",
    "profile",
    "profile_many",
]
