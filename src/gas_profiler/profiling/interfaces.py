"""
Standard token interfaces and the method calls profiled for each.

The call lists are fixed. Arguments only depend on the two accounts of the
run and on the token id configured for ERC721 contracts, which the contract
must have minted to the deployer in its constructor.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..config.settings import ProfilerSettings
from ..exceptions import UnsupportedContractTypeError
from ..helpers.accounts import Sender, sender_address
from ..helpers.chain_client import ChainClient
from .steps import MethodStep, make_step

TRANSFER_AMOUNT = 100
APPROVAL_AMOUNT = 47
TRANSFER_FROM_AMOUNT = 42

DEPLOYER = "deployer"
SECOND = "second"


class ContractType(str, Enum):
    ERC20 = "erc20"
    ERC721 = "erc721"


CONTRACT_TYPES: dict[str, ContractType] = {
    "ERC20": ContractType.ERC20,
    "EIP20": ContractType.ERC20,
    "erc20": ContractType.ERC20,
    "eip20": ContractType.ERC20,
    "ERC721": ContractType.ERC721,
    "EIP721": ContractType.ERC721,
    "erc721": ContractType.ERC721,
    "eip721": ContractType.ERC721,
}


def resolve_contract_type(name: str | ContractType) -> ContractType:
    if isinstance(name, ContractType):
        return name
    key = name.strip()
    contract_type = CONTRACT_TYPES.get(key) or CONTRACT_TYPES.get(key.lower())
    if contract_type is None:
        raise UnsupportedContractTypeError(
            f"Invalid contract type: {name}. Choose from: {', '.join(CONTRACT_TYPES)}"
        )
    return contract_type


@dataclass(frozen=True)
class PlannedCall:
    method: str
    args: tuple[Any, ...] = ()
    sender: str = DEPLOYER


def erc20_plan(owner: str, recipient: str) -> list[PlannedCall]:
    return [
        PlannedCall("totalSupply"),
        PlannedCall("balanceOf", (owner,)),
        PlannedCall("transfer", (recipient, TRANSFER_AMOUNT)),
        PlannedCall("approve", (owner, APPROVAL_AMOUNT)),
        PlannedCall("allowance", (owner, owner)),
        PlannedCall("transferFrom", (owner, recipient, TRANSFER_FROM_AMOUNT)),
    ]


def erc721_plan(owner: str, recipient: str, token_id: int) -> list[PlannedCall]:
    # The token travels owner -> recipient -> owner so ownerOf is measured twice
    # against different ownership states.
    return [
        PlannedCall("totalSupply"),
        PlannedCall("balanceOf", (owner,)),
        PlannedCall("ownerOf", (token_id,)),
        PlannedCall("approve", (recipient, token_id)),
        PlannedCall("getApproved", (token_id,)),
        PlannedCall("setApprovalForAll", (recipient, True)),
        PlannedCall("isApprovedForAll", (owner, recipient)),
        PlannedCall("transferFrom", (owner, recipient, token_id)),
        PlannedCall("safeTransferFrom", (recipient, owner, token_id), sender=SECOND),
        PlannedCall("ownerOf", (token_id,)),
    ]


def plan_for(contract_type: ContractType, owner: str, recipient: str, token_id: int) -> list[PlannedCall]:
    if contract_type is ContractType.ERC20:
        return erc20_plan(owner, recipient)
    return erc721_plan(owner, recipient, token_id)


def operation_names(methods: list[str]) -> list[str]:
    """Name each call after its method, suffixing repeats: ownerOf, ownerOf_2."""
    seen: Counter[str] = Counter()
    names = []
    for method in methods:
        seen[method] += 1
        names.append(method if seen[method] == 1 else f"{method}_{seen[method]}")
    return names


def expected_operations(contract_type: str | ContractType, token_id: int = 0) -> list[str]:
    """Operation names a successful profile of ``contract_type`` reports, in order."""
    plan = plan_for(resolve_contract_type(contract_type), "owner", "recipient", token_id)
    return ["deployment"] + operation_names([call.method for call in plan])


def build_steps(
    contract_type: str | ContractType,
    client: ChainClient,
    deployer: Sender,
    second: Sender,
    settings: Optional[ProfilerSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> list[MethodStep]:
    settings = settings or ProfilerSettings()
    plan = plan_for(
        resolve_contract_type(contract_type),
        sender_address(deployer),
        sender_address(second),
        settings.token_id,
    )
    senders = {DEPLOYER: deployer, SECOND: second}
    names = operation_names([call.method for call in plan])
    return [
        make_step(
            client,
            senders[call.sender],
            call.method,
            *call.args,
            operation=name,
            settings=settings,
            logger=logger,
        )
        for call, name in zip(plan, names)
    ]
