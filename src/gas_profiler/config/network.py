"""
Network configuration for the gas profiler.

Profiling runs against a local development node with unlocked, funded
accounts. Supported nodes: Ganache, Anvil and Hardhat.
"""

import os
from typing import Any

from ..exceptions import ConfigurationError


# =============================================================================
# CHAIN CONFIGURATIONS
# =============================================================================

CHAINS: dict[str, dict[str, Any]] = {
    "ganache": {
        "chain_id": 1337,
        "name": "Ganache",
        "rpc_urls": [
            "http://127.0.0.1:7545",
            "http://127.0.0.1:8545",
        ],
    },
    "anvil": {
        "chain_id": 31337,
        "name": "Anvil",
        "rpc_urls": [
            "http://127.0.0.1:8545",
        ],
    },
    "hardhat": {
        "chain_id": 31337,
        "name": "Hardhat Network",
        "rpc_urls": [
            "http://127.0.0.1:8545",
        ],
    },
}

DEFAULT_NETWORK = "anvil"

# Chain ID to name mapping (first declared name wins for shared IDs)
CHAIN_ID_TO_NAME: dict[int, str] = {}
for _name, _config in CHAINS.items():
    CHAIN_ID_TO_NAME.setdefault(_config["chain_id"], _name)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_chain_config(chain: str | int | None = None) -> dict[str, Any]:
    """Get configuration for a specific local network.

    Args:
        chain: Network name (e.g., 'anvil', 'ganache') or chain ID.
               If None, uses NETWORK environment variable or defaults to 'anvil'.

    Returns:
        Chain configuration dictionary.

    Raises:
        ConfigurationError: If the network is not supported.
    """
    if chain is None:
        chain = os.getenv("NETWORK", DEFAULT_NETWORK)

    if isinstance(chain, int):
        name = CHAIN_ID_TO_NAME.get(chain)
        if name is None:
            raise ConfigurationError(f"Unsupported chain ID: {chain}")
        chain = name

    chain = chain.lower()
    if chain not in CHAINS:
        raise ConfigurationError(f"Unsupported network: {chain}. Supported: {list(CHAINS.keys())}")

    return CHAINS[chain]


def get_rpc_url(chain: str | int | None = None) -> str:
    """Get the RPC URL for a network.

    Uses RPC_URL environment variable if set, otherwise returns the first default.
    """
    env_rpc = os.getenv("RPC_URL")
    if env_rpc:
        return env_rpc

    config = get_chain_config(chain)
    return config["rpc_urls"][0]


# Network timeouts
RPC_TIMEOUT: int = 30  # seconds per HTTP request
