"""Exception taxonomy for NewsWave.

Client modules translate transport-library errors (httpx, anthropic, web3)
into these classes at their boundary, chaining the original with
``raise ... from``.
"""

from newswave.data import PublicationStage


class NewsWaveError(Exception):
    """Base class for all NewsWave errors."""


class InvalidSubmission(NewsWaveError):
    """Submission failed local precondition checks. No external call was made."""


class IdentityUnavailable(NewsWaveError):
    """No signing identity is bound to the session."""


class VerificationError(NewsWaveError):
    """Base class for content verifier failures."""


class VerificationUnavailable(VerificationError):
    """The scoring service could not be reached or returned a malformed reply."""


class VerificationTimeout(VerificationError):
    """The scoring service did not answer within the configured timeout."""


class ContentStoreFailure(NewsWaveError):
    """A content store put or get failed."""


class ContentNotFound(ContentStoreFailure):
    """The content reference is unknown to the store (or not yet propagated)."""

    def __init__(self, content_ref: str, message: str | None = None) -> None:
        self.content_ref = content_ref
        super().__init__(message or f"Content not found: {content_ref}")


class ContentCorrupt(ContentStoreFailure):
    """The retrieved bytes are not a well-formed content blob."""

    def __init__(self, content_ref: str, message: str | None = None) -> None:
        self.content_ref = content_ref
        super().__init__(message or f"Content is not a valid blob: {content_ref}")


class LedgerError(NewsWaveError):
    """Base class for ledger failures."""


class LedgerUnavailable(LedgerError):
    """A read call against the ledger failed at the transport level."""


class SubmissionRejected(LedgerError):
    """The ledger refused the append (reverted, unauthorized or malformed)."""


class SubmissionTimeout(LedgerError):
    """Finality of the append was not observed within the bounded wait.

    The append may still land later; callers must not assume it did not.
    """

    def __init__(self, message: str, tx_hash: str | None = None) -> None:
        self.tx_hash = tx_hash
        super().__init__(message)


class IndexOutOfRange(LedgerError):
    """``get_by_index`` was asked for an index at or above the current count."""

    def __init__(self, index: int, count: int | None = None) -> None:
        self.index = index
        self.count = count
        if count is None:
            super().__init__(f"Ledger index {index} is out of range")
        else:
            super().__init__(f"Ledger index {index} is out of range (count={count})")


class PublicationFailed(NewsWaveError):
    """A publication run ended in the FAILED state.

    Attributes:
        stage: The stage that was running when the failure happened.
        cause: The underlying error.
        content_ref: Content reference obtained before the failure, if any.
            Set when the failure happened in the recording stage so the
            caller can retry the ledger append alone.
    """

    def __init__(
        self,
        stage: PublicationStage,
        cause: BaseException,
        *,
        content_ref: str | None = None,
    ) -> None:
        self.stage = stage
        self.cause = cause
        self.content_ref = content_ref
        super().__init__(f"Publication failed while {stage.value}: {cause}")

    @property
    def content_stored(self) -> bool:
        """True when the content blob is known to be in the store."""
        return self.content_ref is not None

    @property
    def ledger_write_possible(self) -> bool:
        """True when an append may have reached the ledger despite the failure."""
        return self.stage == PublicationStage.RECORDING and isinstance(
            self.cause, SubmissionTimeout
        )

    def describe(self) -> str:
        """User-facing summary of what did and did not happen."""
        lines = [f"Publication failed during the {self.stage.value} stage: {self.cause}"]
        if self.content_ref is None:
            lines.append("Nothing was stored or recorded; the submission can be retried.")
            return "\n".join(lines)
        lines.append(f"The content is stored as {self.content_ref} but is not yet recorded.")
        if self.ledger_write_possible:
            lines.append(
                "The ledger append may still be confirmed; check the listing before "
                "retrying to avoid a duplicate entry."
            )
        else:
            lines.append("Retry the recording step with this content reference.")
        return "\n".join(lines)
