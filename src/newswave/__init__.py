"""NewsWave: publish news with an AI verification score to IPFS and an on-chain registry."""

from newswave.config import NewsWaveConfig, create_from_config, load_config
from newswave.data import (
    FALLBACK_SCORE,
    VERIFIED_THRESHOLD,
    Classification,
    ContentBlob,
    Feed,
    LedgerEvent,
    NewsItem,
    PublicationProgress,
    PublicationReceipt,
    PublicationRecord,
    PublicationStage,
    Submission,
    classify,
)
from newswave.display import format_score, format_timestamp, truncate_address
from newswave.errors import (
    ContentCorrupt,
    ContentNotFound,
    ContentStoreFailure,
    IdentityUnavailable,
    IndexOutOfRange,
    InvalidSubmission,
    LedgerError,
    LedgerUnavailable,
    NewsWaveError,
    PublicationFailed,
    SubmissionRejected,
    SubmissionTimeout,
    VerificationError,
    VerificationTimeout,
    VerificationUnavailable,
)
from newswave.feed import FeedAggregator
from newswave.identity import IdentityProvider, NodeAccountIdentity, Session, StaticIdentity
from newswave.ledger import ContractLedger, InMemoryLedger, Ledger
from newswave.publish import Publisher
from newswave.run_logger import RunLogger
from newswave.store import ContentStore, InMemoryContentStore, IPFSContentStore
from newswave.verifier import ClaudeVerifier, ContentVerifier, FixedVerifier, HttpVerifier

__all__ = [
    # Models
    "Classification",
    "ContentBlob",
    "FALLBACK_SCORE",
    "Feed",
    "LedgerEvent",
    "NewsItem",
    "PublicationProgress",
    "PublicationReceipt",
    "PublicationRecord",
    "PublicationStage",
    "Submission",
    "VERIFIED_THRESHOLD",
    "classify",
    # Errors
    "ContentCorrupt",
    "ContentNotFound",
    "ContentStoreFailure",
    "IdentityUnavailable",
    "IndexOutOfRange",
    "InvalidSubmission",
    "LedgerError",
    "LedgerUnavailable",
    "NewsWaveError",
    "PublicationFailed",
    "SubmissionRejected",
    "SubmissionTimeout",
    "VerificationError",
    "VerificationTimeout",
    "VerificationUnavailable",
    # Identity
    "IdentityProvider",
    "NodeAccountIdentity",
    "Session",
    "StaticIdentity",
    # Verifiers
    "ClaudeVerifier",
    "ContentVerifier",
    "FixedVerifier",
    "HttpVerifier",
    # Stores
    "ContentStore",
    "IPFSContentStore",
    "InMemoryContentStore",
    # Ledgers
    "ContractLedger",
    "InMemoryLedger",
    "Ledger",
    # Orchestration
    "FeedAggregator",
    "Publisher",
    # Config
    "NewsWaveConfig",
    "create_from_config",
    "load_config",
    # Utilities
    "RunLogger",
    "format_score",
    "format_timestamp",
    "truncate_address",
]
