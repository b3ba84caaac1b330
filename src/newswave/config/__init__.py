"""Configuration module for NewsWave."""

from newswave.config.factory import Components, create_from_config
from newswave.config.loader import get_default_config_path, load_config
from newswave.config.models import (
    ClaudeVerifierConfig,
    ContractLedgerConfig,
    FeedConfig,
    FixedVerifierConfig,
    HttpVerifierConfig,
    IdentityConfig,
    IPFSStoreConfig,
    LedgerConfig,
    LoggingConfig,
    MemoryLedgerConfig,
    MemoryStoreConfig,
    NewsWaveConfig,
    NodeIdentityConfig,
    StaticIdentityConfig,
    StoreConfig,
    VerifierConfig,
)

__all__ = [
    "ClaudeVerifierConfig",
    "Components",
    "ContractLedgerConfig",
    "FeedConfig",
    "FixedVerifierConfig",
    "HttpVerifierConfig",
    "IPFSStoreConfig",
    "IdentityConfig",
    "LedgerConfig",
    "LoggingConfig",
    "MemoryLedgerConfig",
    "MemoryStoreConfig",
    "NewsWaveConfig",
    "NodeIdentityConfig",
    "StaticIdentityConfig",
    "StoreConfig",
    "VerifierConfig",
    "create_from_config",
    "get_default_config_path",
    "load_config",
]
