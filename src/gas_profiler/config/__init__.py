"""
Configuration package for the gas profiler.
"""

from .network import (
    CHAINS,
    DEFAULT_NETWORK,
    RPC_TIMEOUT,
    get_chain_config,
    get_rpc_url,
)

from .settings import (
    DEFAULT_GAS_MULTIPLIER,
    DEFAULT_TOKEN_ID,
    ProfilerSettings,
    ReceiptPollConfig,
)

from .logging_config import (
    PROFILER_LOGGER_NAME,
    component_logger,
    get_profiler_logger,
    resolve_log_level,
    setup_logger,
)

__all__ = [
    # Network
    'CHAINS',
    'DEFAULT_NETWORK',
    'RPC_TIMEOUT',
    'get_chain_config',
    'get_rpc_url',

    # Settings
    'DEFAULT_GAS_MULTIPLIER',
    'DEFAULT_TOKEN_ID',
    'ProfilerSettings',
    'ReceiptPollConfig',

    # Logging
    'PROFILER_LOGGER_NAME',
    'component_logger',
    'get_profiler_logger',
    'resolve_log_level',
    'setup_logger',
]
