"""
Web3 setup helper - provides the web3 instance used by the profiler.

Public API
----------
get_web3_instance(rpc_url=None, timeout=RPC_TIMEOUT)
    Return a Web3 instance connected to the specified RPC URL.
    Falls back to RPC_URL, then to the default local network.
"""
from __future__ import annotations

from typing import Optional

from web3 import Web3

from ..config.network import RPC_TIMEOUT, get_rpc_url
from ..exceptions import ConfigurationError

__all__ = ["get_web3_instance", "ensure_connected"]

# Cached web3 instance
_w3_instance: Optional[Web3] = None


def get_web3_instance(rpc_url: str | None = None, timeout: int = RPC_TIMEOUT) -> Web3:
    """
    Get a Web3 instance connected to the specified RPC URL.

    Args:
        rpc_url: Optional RPC URL. If not provided, uses RPC_URL env var or
            the default local network.
        timeout: HTTP request timeout in seconds.

    Returns:
        Web3 instance
    """
    global _w3_instance

    if rpc_url is None:
        rpc_url = get_rpc_url()

    # Return cached instance if URL matches
    if _w3_instance is not None and _w3_instance.provider.endpoint_uri == rpc_url:
        return _w3_instance

    _w3_instance = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
    return _w3_instance


def ensure_connected(w3: Web3) -> Web3:
    """Raise ConfigurationError when the node does not answer."""
    if not w3.is_connected():
        endpoint = getattr(w3.provider, "endpoint_uri", "<unknown>")
        raise ConfigurationError(f"Web3 provider not connected (check RPC URL {endpoint})")
    return w3
