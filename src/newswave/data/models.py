"""Core data models for NewsWave."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

VERIFIED_THRESHOLD = 0.7
FALLBACK_SCORE = 0.5


class PublicationStage(StrEnum):
    """States of a single publication run.

    A run moves ``IDLE -> VERIFYING -> STORING -> RECORDING -> DONE`` and can
    end in ``FAILED`` from any non-terminal state.
    """

    IDLE = "idle"
    VERIFYING = "verifying"
    STORING = "storing"
    RECORDING = "recording"
    DONE = "done"
    FAILED = "failed"


class Classification(StrEnum):
    """Presentation bucket for a news item, derived from its score."""

    VERIFIED = "verified"
    QUESTIONABLE = "questionable"


def classify(score: float, threshold: float = VERIFIED_THRESHOLD) -> Classification:
    """Classify a verification score against the verified threshold."""
    if score >= threshold:
        return Classification.VERIFIED
    return Classification.QUESTIONABLE


@dataclass(frozen=True)
class Submission:
    """Author input for a new article.

    The author address is not part of the submission; it comes from the
    signing identity bound to the session that publishes it.
    """

    title: str
    body: str

    def normalized(self) -> "Submission":
        return Submission(title=self.title.strip(), body=self.body.strip())


@dataclass(frozen=True)
class ContentBlob:
    """Immutable article content as stored in the content store.

    On the wire the blob is a JSON object with the keys ``title``,
    ``content``, ``author``, ``timestamp`` and, once scored,
    ``verificationScore``. ``submitted_at`` is client-set milliseconds and
    is informational only.
    """

    title: str
    body: str
    author: str
    submitted_at: int
    verification_score: float | None = None

    def __post_init__(self) -> None:
        score = self.verification_score
        if score is not None and not 0.0 <= score <= 1.0:
            raise ValueError(f"verification_score must be within [0, 1], got {score}")

    def with_score(self, score: float) -> "ContentBlob":
        return ContentBlob(
            title=self.title,
            body=self.body,
            author=self.author,
            submitted_at=self.submitted_at,
            verification_score=score,
        )

    def to_wire(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "title": self.title,
            "content": self.body,
            "author": self.author,
            "timestamp": self.submitted_at,
        }
        if self.verification_score is not None:
            data["verificationScore"] = self.verification_score
        return data

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "ContentBlob":
        """Build a blob from its wire dict.

        Raises:
            KeyError: If a required key is missing.
            ValueError: If a field has the wrong type or the score is out of range.
        """
        title = data["title"]
        body = data["content"]
        author = data["author"]
        if not all(isinstance(v, str) for v in (title, body, author)):
            raise ValueError("title, content and author must be strings")
        timestamp = data.get("timestamp", 0)
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError(f"timestamp must be numeric, got {timestamp!r}")
        raw_score = data.get("verificationScore")
        score: float | None = None
        if raw_score is not None:
            if isinstance(raw_score, bool) or not isinstance(raw_score, (int, float)):
                raise ValueError(f"verificationScore must be numeric, got {raw_score!r}")
            score = float(raw_score)
        return cls(
            title=title,
            body=body,
            author=author,
            submitted_at=int(timestamp),
            verification_score=score,
        )


@dataclass(frozen=True)
class PublicationRecord:
    """A ledger entry. ``recorded_at`` and ``sequence_index`` are ledger-assigned."""

    content_ref: str
    title: str
    recorded_at: int
    author: str
    sequence_index: int


@dataclass(frozen=True)
class LedgerEvent:
    """Notification emitted by the ledger for every successful append."""

    content_ref: str
    title: str
    recorded_at: int
    author: str


@dataclass(frozen=True)
class NewsItem:
    """A ledger record merged with its content blob, built on every read.

    When the blob could not be fetched ``content_available`` is False,
    ``body`` is None and the score is the fallback score.
    """

    sequence_index: int
    content_ref: str
    title: str
    author: str
    recorded_at: int
    verification_score: float
    body: str | None = None
    content_available: bool = True
    blob_author: str | None = None

    @property
    def recorded_at_ms(self) -> int:
        """Ledger timestamp scaled to milliseconds for display."""
        return self.recorded_at * 1000

    @property
    def author_mismatch(self) -> bool:
        """True when the blob claims a different author than the ledger signer."""
        if self.blob_author is None:
            return False
        return self.blob_author.lower() != self.author.lower()

    @classmethod
    def merge(
        cls, record: PublicationRecord, blob: ContentBlob, fallback_score: float = FALLBACK_SCORE
    ) -> "NewsItem":
        score = blob.verification_score
        return cls(
            sequence_index=record.sequence_index,
            content_ref=record.content_ref,
            title=record.title,
            author=record.author,
            recorded_at=record.recorded_at,
            verification_score=fallback_score if score is None else score,
            body=blob.body,
            blob_author=blob.author,
        )

    @classmethod
    def unavailable(
        cls, record: PublicationRecord, fallback_score: float = FALLBACK_SCORE
    ) -> "NewsItem":
        return cls(
            sequence_index=record.sequence_index,
            content_ref=record.content_ref,
            title=record.title,
            author=record.author,
            recorded_at=record.recorded_at,
            verification_score=fallback_score,
            content_available=False,
        )


@dataclass(frozen=True)
class Feed:
    """The sorted article list produced by one listing call.

    ``skipped_indices`` lists the ledger indices whose records could not be
    read during the fan-out.
    """

    items: tuple[NewsItem, ...] = ()
    ledger_count: int = 0
    skipped_indices: tuple[int, ...] = ()
    threshold: float = VERIFIED_THRESHOLD

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[NewsItem]:
        return iter(self.items)

    def classification_of(self, item: NewsItem) -> Classification:
        return classify(item.verification_score, self.threshold)

    @property
    def verified(self) -> list[NewsItem]:
        return [
            item for item in self.items if self.classification_of(item) == Classification.VERIFIED
        ]

    @property
    def questionable(self) -> list[NewsItem]:
        return [
            item
            for item in self.items
            if self.classification_of(item) == Classification.QUESTIONABLE
        ]


@dataclass(frozen=True)
class PublicationReceipt:
    """Result of a successful publication.

    ``verification_score`` is None when only the recording step was retried.
    """

    content_ref: str
    sequence_index: int
    title: str
    author: str
    verification_score: float | None = None


@dataclass
class PublicationProgress:
    """Mutable view of a publication run, handed to progress callbacks."""

    stage: PublicationStage = PublicationStage.IDLE
    content_ref: str | None = None
    verification_score: float | None = None
    history: list[PublicationStage] = field(default_factory=lambda: [PublicationStage.IDLE])

    def advance(self, stage: PublicationStage) -> None:
        self.stage = stage
        self.history.append(stage)
