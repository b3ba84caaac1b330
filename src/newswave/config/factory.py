"""Factory functions to create components from configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

from newswave.config.models import (
    ClaudeVerifierConfig,
    ContractLedgerConfig,
    FixedVerifierConfig,
    HttpVerifierConfig,
    IdentityConfig,
    IPFSStoreConfig,
    LedgerConfig,
    MemoryLedgerConfig,
    MemoryStoreConfig,
    NewsWaveConfig,
    NodeIdentityConfig,
    StaticIdentityConfig,
    StoreConfig,
    VerifierConfig,
)
from newswave.feed import FeedAggregator
from newswave.identity import IdentityProvider, NodeAccountIdentity, StaticIdentity
from newswave.ledger import ContractLedger, InMemoryLedger, Ledger
from newswave.publish import Publisher
from newswave.run_logger import RunLogger
from newswave.store import ContentStore, InMemoryContentStore, IPFSContentStore
from newswave.verifier import ClaudeVerifier, ContentVerifier, FixedVerifier, HttpVerifier

DEFAULT_RPC_URL = "http://127.0.0.1:8545"


def resolve_rpc_url(configured: str | None) -> str:
    """Pick the JSON-RPC URL: config value, then NEWSWAVE_RPC_URL, then localhost."""
    return configured or os.environ.get("NEWSWAVE_RPC_URL") or DEFAULT_RPC_URL


@dataclass(frozen=True)
class Components:
    """The wired-up object graph built from one config."""

    publisher: Publisher
    aggregator: FeedAggregator
    identity: IdentityProvider
    ledger: Ledger
    store: ContentStore
    verifier: ContentVerifier
    run_logger: RunLogger | None


def create_verifier(config: VerifierConfig) -> ContentVerifier:
    """Create a content verifier from config."""
    if isinstance(config, ClaudeVerifierConfig):
        return ClaudeVerifier(model=config.model, timeout=config.timeout)
    if isinstance(config, HttpVerifierConfig):
        return HttpVerifier(config.url, timeout=config.timeout)
    if isinstance(config, FixedVerifierConfig):
        return FixedVerifier(config.score)
    msg = f"Unknown verifier config type: {type(config)}"
    raise ValueError(msg)


def create_store(config: StoreConfig) -> ContentStore:
    """Create a content store from config."""
    if isinstance(config, IPFSStoreConfig):
        return IPFSContentStore(
            api_url=config.api_url,
            gateway_url=config.gateway_url,
            timeout=config.timeout,
            cid_version=config.cid_version,
        )
    if isinstance(config, MemoryStoreConfig):
        return InMemoryContentStore()
    msg = f"Unknown store config type: {type(config)}"
    raise ValueError(msg)


def create_ledger(config: LedgerConfig) -> Ledger:
    """Create a ledger client from config."""
    if isinstance(config, ContractLedgerConfig):
        return ContractLedger(
            resolve_rpc_url(config.rpc_url),
            contract_address=config.contract_address,
            timeout=config.timeout,
            finality_timeout=config.finality_timeout,
        )
    if isinstance(config, MemoryLedgerConfig):
        return InMemoryLedger()
    msg = f"Unknown ledger config type: {type(config)}"
    raise ValueError(msg)


def create_identity(config: IdentityConfig, ledger: Ledger | None = None) -> IdentityProvider:
    """Create an identity provider from config.

    A node identity reuses the contract ledger's web3 connection when no
    separate ``rpc_url`` is configured.
    """
    if isinstance(config, StaticIdentityConfig):
        return StaticIdentity(config.address or os.environ.get("NEWSWAVE_ADDRESS"))
    if isinstance(config, NodeIdentityConfig):
        if config.rpc_url is None and isinstance(ledger, ContractLedger):
            return NodeAccountIdentity(timeout=config.timeout, w3=ledger.w3)
        return NodeAccountIdentity(resolve_rpc_url(config.rpc_url), timeout=config.timeout)
    msg = f"Unknown identity config type: {type(config)}"
    raise ValueError(msg)


def create_from_config(
    config: NewsWaveConfig,
    *,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
) -> Components:
    """Create the complete object graph from root config.

    Args:
        config: Root configuration.
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.

    Returns:
        The wired components. ``run_logger`` is None if logging is disabled.
    """
    log_enabled = log_override if log_override is not None else config.logging.enabled
    log_dir = Path(log_dir_override if log_dir_override is not None else config.logging.log_dir)

    run_logger: RunLogger | None = None
    if log_enabled:
        run_logger = RunLogger(log_dir=log_dir, enabled=True)

    verifier = create_verifier(config.verifier)
    store = create_store(config.store)
    ledger = create_ledger(config.ledger)
    identity = create_identity(config.identity, ledger)

    publisher = Publisher(verifier, store, ledger, run_logger=run_logger)
    aggregator = FeedAggregator(
        ledger,
        store,
        max_concurrency=config.feed.max_concurrency,
        verified_threshold=config.feed.verified_threshold,
        fallback_score=config.feed.fallback_score,
        run_logger=run_logger,
    )
    return Components(
        publisher=publisher,
        aggregator=aggregator,
        identity=identity,
        ledger=ledger,
        store=store,
        verifier=verifier,
        run_logger=run_logger,
    )
