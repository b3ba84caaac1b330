"""Pydantic configuration models for NewsWave components."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from newswave.data import FALLBACK_SCORE, VERIFIED_THRESHOLD
from newswave.ledger.abi import DEFAULT_CONTRACT_ADDRESS
from newswave.store.ipfs import DEFAULT_API_URL, DEFAULT_GATEWAY_URL

# ============================================================
# Verifier Configs
# ============================================================


class ClaudeVerifierConfig(BaseModel):
    """Configuration for ClaudeVerifier."""

    type: Literal["claude"] = "claude"
    model: str = "claude-haiku-4-5-20251001"
    timeout: float = Field(default=30.0, gt=0)

    model_config = {"frozen": True}


class HttpVerifierConfig(BaseModel):
    """Configuration for HttpVerifier."""

    type: Literal["http"] = "http"
    url: str
    timeout: float = Field(default=30.0, gt=0)

    model_config = {"frozen": True}


class FixedVerifierConfig(BaseModel):
    """Verifier that assigns a constant score (no service call)."""

    type: Literal["fixed"] = "fixed"
    score: float = Field(default=0.5, ge=0.0, le=1.0)

    model_config = {"frozen": True}


VerifierConfig = Annotated[
    ClaudeVerifierConfig | HttpVerifierConfig | FixedVerifierConfig,
    Field(discriminator="type"),
]


# ============================================================
# Store Configs
# ============================================================


class IPFSStoreConfig(BaseModel):
    """Configuration for IPFSContentStore."""

    type: Literal["ipfs"] = "ipfs"
    api_url: str = DEFAULT_API_URL
    gateway_url: str = DEFAULT_GATEWAY_URL
    timeout: float = Field(default=30.0, gt=0)
    cid_version: Literal[0, 1] = 1

    model_config = {"frozen": True}


class MemoryStoreConfig(BaseModel):
    """In-process content store."""

    type: Literal["memory"] = "memory"

    model_config = {"frozen": True}


StoreConfig = Annotated[
    IPFSStoreConfig | MemoryStoreConfig,
    Field(discriminator="type"),
]


# ============================================================
# Ledger Configs
# ============================================================


class ContractLedgerConfig(BaseModel):
    """Configuration for ContractLedger.

    ``rpc_url`` falls back to the NEWSWAVE_RPC_URL env var.
    """

    type: Literal["contract"] = "contract"
    rpc_url: str | None = None
    contract_address: str = DEFAULT_CONTRACT_ADDRESS
    timeout: float = Field(default=15.0, gt=0)
    finality_timeout: float = Field(default=120.0, gt=0)

    model_config = {"frozen": True}


class MemoryLedgerConfig(BaseModel):
    """In-process ledger."""

    type: Literal["memory"] = "memory"

    model_config = {"frozen": True}


LedgerConfig = Annotated[
    ContractLedgerConfig | MemoryLedgerConfig,
    Field(discriminator="type"),
]


# ============================================================
# Identity Configs
# ============================================================


class StaticIdentityConfig(BaseModel):
    """Fixed signing address; falls back to the NEWSWAVE_ADDRESS env var."""

    type: Literal["static"] = "static"
    address: str | None = None

    model_config = {"frozen": True}


class NodeIdentityConfig(BaseModel):
    """Bind the first account managed by the ledger's node."""

    type: Literal["node"] = "node"
    rpc_url: str | None = None
    timeout: float = Field(default=10.0, gt=0)

    model_config = {"frozen": True}


IdentityConfig = Annotated[
    StaticIdentityConfig | NodeIdentityConfig,
    Field(discriminator="type"),
]


# ============================================================
# Feed Config
# ============================================================


class FeedConfig(BaseModel):
    """Configuration for the feed aggregator."""

    max_concurrency: int = Field(default=8, ge=1)
    verified_threshold: float = Field(default=VERIFIED_THRESHOLD, ge=0.0, le=1.0)
    fallback_score: float = Field(default=FALLBACK_SCORE, ge=0.0, le=1.0)

    model_config = {"frozen": True}


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for per-run JSON logging."""

    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class NewsWaveConfig(BaseModel):
    """Root configuration for NewsWave."""

    verifier: VerifierConfig = Field(default_factory=FixedVerifierConfig)
    store: StoreConfig = Field(default_factory=MemoryStoreConfig)
    ledger: LedgerConfig = Field(default_factory=MemoryLedgerConfig)
    identity: IdentityConfig = Field(default_factory=StaticIdentityConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}
