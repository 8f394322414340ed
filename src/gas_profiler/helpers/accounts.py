"""Resolution of the two accounts a profiling run needs.

The deployer sends every transaction of the pipeline; the second account is
the recipient of transfers. Both default to the first two unlocked accounts
of the node, and either can be replaced by a private key read from the
environment, in which case transactions are signed locally.
"""

from __future__ import annotations

import os
from typing import Union

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from ..exceptions import ConfigurationError

# Either an unlocked node account address or a local signer
Sender = Union[str, LocalAccount]


def sender_address(sender: Sender) -> str:
    if isinstance(sender, str):
        return to_checksum_address(sender)
    return to_checksum_address(sender.address)


def _normalize_privkey_hex(pk: str) -> str:
    pk = pk.strip()
    if pk.startswith("0x"):
        pk = pk[2:]
    if len(pk) != 64:
        raise ValueError("private key hex must be 64 characters (32 bytes)")
    int(pk, 16)  # validate hex
    return "0x" + pk


def load_signer_from_env(env_name: str) -> LocalAccount | None:
    """Return a LocalAccount for the private key stored in ``env_name``, if set."""
    raw = os.getenv(env_name)
    if not raw:
        return None
    try:
        return Account.from_key(_normalize_privkey_hex(raw))
    except ValueError as e:
        raise ConfigurationError(f"{env_name} does not hold a valid private key: {e}") from None


def resolve_accounts(
    node_accounts: list[str],
    deployer_key_env: str | None = None,
    recipient_key_env: str | None = None,
) -> tuple[Sender, Sender]:
    """Pick (deployer, second) senders.

    Environment keys take precedence; remaining roles are filled from the
    node's unlocked accounts in order.
    """
    deployer = load_signer_from_env(deployer_key_env) if deployer_key_env else None
    second = load_signer_from_env(recipient_key_env) if recipient_key_env else None

    taken = {sender_address(s) for s in (deployer, second) if s is not None}
    available = iter(a for a in node_accounts if to_checksum_address(a) not in taken)

    if deployer is None:
        deployer = next(available, None)
    if second is None:
        second = next(available, None)
    if deployer is None or second is None:
        raise ConfigurationError(
            "Profiling needs two funded accounts: the node exposes "
            f"{len(node_accounts)} unlocked account(s) and no private key fills the gap"
        )
    if sender_address(deployer) == sender_address(second):
        raise ConfigurationError("Deployer and second account must differ")
    return deployer, second
