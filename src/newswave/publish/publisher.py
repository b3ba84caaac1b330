"""Publication orchestrator: verify, store, then record on the ledger."""

import asyncio
import logging
import time
from collections.abc import Callable

from newswave.data import (
    ContentBlob,
    PublicationProgress,
    PublicationReceipt,
    PublicationStage,
    Submission,
)
from newswave.errors import IdentityUnavailable, InvalidSubmission, PublicationFailed
from newswave.identity import Session
from newswave.ledger import Ledger
from newswave.run_logger import RunLogger, RunTrace, disabled_run_logger
from newswave.store import ContentStore
from newswave.verifier import ContentVerifier

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[PublicationProgress], None]


class Publisher:
    """Drive one submission through verify -> store -> record.

    Stages run strictly in sequence, each consuming the previous stage's
    output. Only the final ledger append has an irreversible effect, so it
    runs last. A failure in any stage ends the run with ``PublicationFailed``
    tagged with that stage; nothing is retried here. A recording failure
    carries the stored ``content_ref`` so the caller can call
    ``retry_recording`` instead of starting over.

    Args:
        verifier: Content verifier used in the verifying stage.
        store: Content store used in the storing stage.
        ledger: Ledger used in the recording stage.
        run_logger: Optional RunLogger for per-run JSON records.
        clock: Returns the current time in seconds; used for ``submitted_at``.
    """

    def __init__(
        self,
        verifier: ContentVerifier,
        store: ContentStore,
        ledger: Ledger,
        *,
        run_logger: RunLogger | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._verifier = verifier
        self._store = store
        self._ledger = ledger
        self._run_logger = run_logger or disabled_run_logger()
        self._clock = clock

    async def publish(
        self,
        submission: Submission,
        session: Session,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> PublicationReceipt:
        """Publish a submission under the session's signing identity.

        Args:
            submission: Title and body from the author.
            session: Handle on the signing identity; re-checked before any call.
            on_progress: Optional advisory callback invoked on every stage change.

        Returns:
            Receipt with the content reference and the ledger sequence index.

        Raises:
            InvalidSubmission: If the title or body is blank or no identity is
                bound. No external call has been made.
            PublicationFailed: If a stage failed. See ``stage`` and
                ``content_ref`` on the exception.
        """
        submission = submission.normalized()
        if not submission.title or not submission.body:
            raise InvalidSubmission("Title and body are required")
        try:
            author = await session.resolve()
        except IdentityUnavailable as e:
            raise InvalidSubmission(f"No signing identity: {e}") from e

        draft = ContentBlob(
            title=submission.title,
            body=submission.body,
            author=author,
            submitted_at=int(self._clock() * 1000),
        )
        trace = self._run_logger.start_run("publish", draft)
        progress = PublicationProgress()

        self._advance(progress, PublicationStage.VERIFYING, on_progress)
        t0 = time.monotonic()
        try:
            score = await self._verifier.score(draft)
            scored = draft.with_score(score)
        except Exception as e:
            self._fail(trace, progress, PublicationStage.VERIFYING, e, t0, on_progress)
            raise PublicationFailed(PublicationStage.VERIFYING, e) from e
        progress.verification_score = score
        trace.log_stage(
            "verifying", type(self._verifier).__name__, draft, score, time.monotonic() - t0
        )

        self._advance(progress, PublicationStage.STORING, on_progress)
        t0 = time.monotonic()
        try:
            content_ref = await self._store.put(scored)
        except Exception as e:
            self._fail(trace, progress, PublicationStage.STORING, e, t0, on_progress)
            raise PublicationFailed(PublicationStage.STORING, e) from e
        progress.content_ref = content_ref
        trace.log_stage(
            "storing", type(self._store).__name__, scored, content_ref, time.monotonic() - t0
        )

        index = await self._record(
            content_ref, submission.title, author, trace, progress, on_progress
        )
        receipt = PublicationReceipt(
            content_ref=content_ref,
            sequence_index=index,
            title=submission.title,
            author=author,
            verification_score=score,
        )
        trace.finish("done", receipt)
        logger.info(
            "Published %r as #%d (%s, score %.2f)", submission.title, index, content_ref, score
        )
        return receipt

    async def retry_recording(
        self,
        content_ref: str,
        title: str,
        session: Session,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> PublicationReceipt:
        """Re-run only the recording stage for content that is already stored.

        Use this after a ``PublicationFailed`` from the recording stage. Check
        the listing first when the failure was a ``SubmissionTimeout``; the
        earlier append may have landed.

        Raises:
            InvalidSubmission: If the reference or title is blank or no
                identity is bound.
            PublicationFailed: If the append failed again.
        """
        content_ref = content_ref.strip()
        title = title.strip()
        if not content_ref or not title:
            raise InvalidSubmission("Content reference and title are required")
        try:
            author = await session.resolve()
        except IdentityUnavailable as e:
            raise InvalidSubmission(f"No signing identity: {e}") from e

        trace = self._run_logger.start_run(
            "retry_recording", {"content_ref": content_ref, "title": title}
        )
        progress = PublicationProgress(content_ref=content_ref)
        index = await self._record(content_ref, title, author, trace, progress, on_progress)
        receipt = PublicationReceipt(
            content_ref=content_ref,
            sequence_index=index,
            title=title,
            author=author,
        )
        trace.finish("done", receipt)
        logger.info("Recorded %s as #%d", content_ref, index)
        return receipt

    async def _record(
        self,
        content_ref: str,
        title: str,
        author: str,
        trace: RunTrace,
        progress: PublicationProgress,
        on_progress: ProgressCallback | None,
    ) -> int:
        self._advance(progress, PublicationStage.RECORDING, on_progress)
        t0 = time.monotonic()
        try:
            index = await self._ledger.append(content_ref, title, signer=author)
        except asyncio.CancelledError:
            # The append may already be in flight; cancelling only stops waiting.
            logger.warning("Stopped waiting for ledger append of %s", content_ref)
            raise
        except Exception as e:
            self._fail(trace, progress, PublicationStage.RECORDING, e, t0, on_progress)
            logger.warning(
                "Content %s is stored but not recorded; retry recording to publish it",
                content_ref,
            )
            raise PublicationFailed(PublicationStage.RECORDING, e, content_ref=content_ref) from e
        trace.log_stage(
            "recording",
            type(self._ledger).__name__,
            {"content_ref": content_ref, "title": title, "signer": author},
            index,
            time.monotonic() - t0,
        )
        self._advance(progress, PublicationStage.DONE, on_progress)
        return index

    def _fail(
        self,
        trace: RunTrace,
        progress: PublicationProgress,
        stage: PublicationStage,
        error: Exception,
        started: float,
        on_progress: ProgressCallback | None,
    ) -> None:
        logger.warning("Publication failed while %s: %s", stage.value, error)
        trace.log_stage(
            stage.value, "Publisher", None, None, time.monotonic() - started, error=error
        )
        trace.finish("failed", {"stage": stage, "content_ref": progress.content_ref})
        self._advance(progress, PublicationStage.FAILED, on_progress)

    def _advance(
        self,
        progress: PublicationProgress,
        stage: PublicationStage,
        on_progress: ProgressCallback | None,
    ) -> None:
        progress.advance(stage)
        logger.info("Publication stage: %s", stage.value)
        if on_progress is None:
            return
        try:
            on_progress(progress)
        except Exception:
            logger.exception("Progress callback raised; ignoring")
