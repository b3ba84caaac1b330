"""Data models for NewsWave."""

from newswave.data.models import (
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

__all__ = [
    "FALLBACK_SCORE",
    "VERIFIED_THRESHOLD",
    "Classification",
    "ContentBlob",
    "Feed",
    "LedgerEvent",
    "NewsItem",
    "PublicationProgress",
    "PublicationReceipt",
    "PublicationRecord",
    "PublicationStage",
    "Submission",
    "classify",
]
