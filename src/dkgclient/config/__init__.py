"""Application configuration helpers."""

from __future__ import annotations

from .blockchain import (
    AVAILABLE_BLOCKCHAINS,
    DEFAULT_BLOCKCHAIN,
    BlockchainConfig,
    BlockchainSettings,
    get_blockchain_settings,
)
from .chain_resilience import RETRY_FOREVER, ChainRetryPolicy
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError, UnknownBlockchainError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .node import NodeConfig, PollingConfig, build_node_config, get_node_config

__all__ = [
    "AVAILABLE_BLOCKCHAINS",
    "DEFAULT_BLOCKCHAIN",
    "RETRY_FOREVER",
    "BlockchainConfig",
    "BlockchainSettings",
    "ChainRetryPolicy",
    "ConfigurationError",
    "MissingConfigurationError",
    "NodeConfig",
    "PollingConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "UnknownBlockchainError",
    "build_node_config",
    "configure_logging",
    "get_blockchain_settings",
    "get_node_config",
    "require_env_var",
    "require_env_vars",
]
