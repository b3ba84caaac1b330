"""Feed aggregator: rebuild the article list from the ledger and the content store."""

import asyncio
import logging
import time
from collections.abc import Awaitable
from typing import TypeVar

from newswave.data import (
    FALLBACK_SCORE,
    VERIFIED_THRESHOLD,
    ContentBlob,
    Feed,
    NewsItem,
    PublicationRecord,
)
from newswave.ledger import Ledger
from newswave.run_logger import RunLogger, disabled_run_logger
from newswave.store import ContentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FeedAggregator:
    """Reconstruct the visible article set on every call.

    Flow:
    1. Read the ledger count once
    2. Fetch every record in ``[0, count)`` concurrently
    3. Fetch every record's blob concurrently
    4. Merge records and blobs into news items
    5. Sort newest first (ties broken by higher sequence index)

    Both fan-outs share one semaphore, so at most ``max_concurrency``
    requests are in flight. A record that cannot be read is omitted; a blob
    that cannot be read yields a placeholder item with the fallback score.
    Only a failing ledger count fails the whole listing. Nothing is cached
    between calls.

    Args:
        ledger: Ledger to enumerate.
        store: Content store holding the article bodies.
        max_concurrency: Maximum number of in-flight ledger/store requests.
        verified_threshold: Minimum score for the "verified" partition.
        fallback_score: Score used when a blob is missing or unscored.
        run_logger: Optional RunLogger for per-run JSON records.
    """

    def __init__(
        self,
        ledger: Ledger,
        store: ContentStore,
        *,
        max_concurrency: int = 8,
        verified_threshold: float = VERIFIED_THRESHOLD,
        fallback_score: float = FALLBACK_SCORE,
        run_logger: RunLogger | None = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._ledger = ledger
        self._store = store
        self._max_concurrency = max_concurrency
        self._threshold = verified_threshold
        self._fallback_score = fallback_score
        self._run_logger = run_logger or disabled_run_logger()

    @property
    def verified_threshold(self) -> float:
        return self._threshold

    async def list_all(self) -> Feed:
        """Return every ledger record merged with its content, newest first.

        Raises:
            LedgerError: If the ledger count cannot be read.
        """
        trace = self._run_logger.start_run("list")
        limiter = asyncio.Semaphore(self._max_concurrency)

        # Step 1: count; the only call whose failure is fatal
        t0 = time.monotonic()
        try:
            count = await self._ledger.count()
        except Exception as e:
            trace.log_stage("count", type(self._ledger).__name__, None, None, 0.0, error=e)
            trace.finish("failed")
            raise
        trace.log_stage("count", type(self._ledger).__name__, None, count, time.monotonic() - t0)

        # Step 2: records
        t0 = time.monotonic()
        record_results = await asyncio.gather(
            *(self._limited(limiter, self._ledger.get_by_index(i)) for i in range(count)),
            return_exceptions=True,
        )
        records: list[PublicationRecord] = []
        skipped: list[int] = []
        for index, result in enumerate(record_results):
            if isinstance(result, BaseException):
                logger.warning("Skipping ledger index %d: %s", index, result)
                skipped.append(index)
                continue
            records.append(result)
        trace.log_stage(
            "ledger_fanout",
            type(self._ledger).__name__,
            {"count": count},
            {"records": len(records), "skipped": skipped},
            time.monotonic() - t0,
        )

        # Step 3: blobs
        t0 = time.monotonic()
        blob_results = await asyncio.gather(
            *(self._limited(limiter, self._store.get(r.content_ref)) for r in records),
            return_exceptions=True,
        )

        # Step 4: merge
        items: list[NewsItem] = []
        unavailable = 0
        for record, blob in zip(records, blob_results, strict=True):
            if isinstance(blob, BaseException):
                logger.warning(
                    "Content %s for ledger index %d unavailable: %s",
                    record.content_ref,
                    record.sequence_index,
                    blob,
                )
                unavailable += 1
                items.append(NewsItem.unavailable(record, self._fallback_score))
                continue
            items.append(self._merge(record, blob))
        trace.log_stage(
            "content_fanout",
            type(self._store).__name__,
            {"records": len(records)},
            {"unavailable": unavailable},
            time.monotonic() - t0,
        )

        # Step 5: sort
        items.sort(key=lambda item: (item.recorded_at, item.sequence_index), reverse=True)
        feed = Feed(
            items=tuple(items),
            ledger_count=count,
            skipped_indices=tuple(skipped),
            threshold=self._threshold,
        )
        trace.finish(
            "done",
            {
                "items": len(feed),
                "verified": len(feed.verified),
                "questionable": len(feed.questionable),
            },
        )
        return feed

    async def get(self, index: int) -> NewsItem:
        """Return a single article by ledger index.

        The record must exist; a missing or corrupt blob degrades to a
        placeholder item exactly as in ``list_all``.

        Raises:
            IndexOutOfRange: If the ledger has no record at ``index``.
            LedgerError: If the ledger could not be read.
        """
        record = await self._ledger.get_by_index(index)
        try:
            blob = await self._store.get(record.content_ref)
        except Exception as e:
            logger.warning(
                "Content %s for ledger index %d unavailable: %s", record.content_ref, index, e
            )
            return NewsItem.unavailable(record, self._fallback_score)
        return self._merge(record, blob)

    def _merge(self, record: PublicationRecord, blob: ContentBlob) -> NewsItem:
        item = NewsItem.merge(record, blob, self._fallback_score)
        if item.author_mismatch:
            logger.warning(
                "Ledger index %d: blob author %s differs from signer %s",
                record.sequence_index,
                blob.author,
                record.author,
            )
        return item

    @staticmethod
    async def _limited(limiter: asyncio.Semaphore, aw: Awaitable[T]) -> T:
        async with limiter:
            return await aw
