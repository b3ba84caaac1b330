"""Tests for the feed aggregator."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from newswave.data import FALLBACK_SCORE, ContentBlob, PublicationRecord, Submission
from newswave.errors import IndexOutOfRange, LedgerUnavailable
from newswave.feed import FeedAggregator
from newswave.identity import Session, StaticIdentity
from newswave.ledger import InMemoryLedger
from newswave.publish import Publisher
from newswave.store import InMemoryContentStore
from newswave.verifier import FixedVerifier

AUTHOR = "0x1111111111111111111111111111111111111111"


async def _seed(
    ledger: InMemoryLedger,
    store: InMemoryContentStore,
    entries: list[tuple[str, float | None]],
) -> list[str]:
    """Put one blob per (title, score) and append it; returns content refs."""
    refs = []
    for title, score in entries:
        blob = ContentBlob(
            title=title,
            body=f"Body of {title}",
            author=AUTHOR,
            submitted_at=0,
            verification_score=score,
        )
        ref = await store.put(blob)
        await ledger.append(ref, title, signer=AUTHOR)
        refs.append(ref)
    return refs


class _Clock:
    def __init__(self, times: list[float]) -> None:
        self._times = iter(times)

    def __call__(self) -> float:
        return next(self._times)


class TestFeedAggregator:
    """Tests for FeedAggregator."""

    @pytest.fixture
    def store(self) -> InMemoryContentStore:
        return InMemoryContentStore()

    def test_rejects_zero_concurrency(self, store: InMemoryContentStore) -> None:
        with pytest.raises(ValueError, match="max_concurrency"):
            FeedAggregator(InMemoryLedger(), store, max_concurrency=0)

    async def test_empty_ledger(self, store: InMemoryContentStore) -> None:
        feed = await FeedAggregator(InMemoryLedger(), store).list_all()
        assert len(feed) == 0
        assert feed.ledger_count == 0
        assert feed.verified == []
        assert feed.questionable == []

    async def test_newest_first(self, store: InMemoryContentStore) -> None:
        ledger = InMemoryLedger(clock=_Clock([100, 300, 200]))
        await _seed(ledger, store, [("a", 0.9), ("b", 0.9), ("c", 0.9)])

        feed = await FeedAggregator(ledger, store).list_all()

        assert [item.title for item in feed] == ["b", "c", "a"]
        timestamps = [item.recorded_at for item in feed]
        assert timestamps == sorted(timestamps, reverse=True)

    async def test_equal_timestamps_break_ties_by_index(
        self, store: InMemoryContentStore
    ) -> None:
        ledger = InMemoryLedger(clock=lambda: 500.0)
        await _seed(ledger, store, [("a", 0.9), ("b", 0.9), ("c", 0.9)])

        feed = await FeedAggregator(ledger, store).list_all()

        assert [item.sequence_index for item in feed] == [2, 1, 0]

    async def test_classification_partition(self, store: InMemoryContentStore) -> None:
        ledger = InMemoryLedger()
        await _seed(ledger, store, [("high", 0.95), ("edge", 0.7), ("low", 0.3), ("none", None)])

        feed = await FeedAggregator(ledger, store).list_all()

        assert {i.title for i in feed.verified} == {"high", "edge"}
        assert {i.title for i in feed.questionable} == {"low", "none"}
        unscored = next(i for i in feed if i.title == "none")
        assert unscored.verification_score == FALLBACK_SCORE

    async def test_custom_threshold(self, store: InMemoryContentStore) -> None:
        ledger = InMemoryLedger()
        await _seed(ledger, store, [("mid", 0.6)])

        feed = await FeedAggregator(ledger, store, verified_threshold=0.5).list_all()

        assert [i.title for i in feed.verified] == ["mid"]

    async def test_unreadable_record_is_skipped(self, store: InMemoryContentStore) -> None:
        backing = InMemoryLedger()
        await _seed(backing, store, [(f"item {i}", 0.8) for i in range(5)])

        async def get_by_index(index: int) -> PublicationRecord:
            if index == 3:
                raise LedgerUnavailable("node hiccup")
            return await backing.get_by_index(index)

        ledger = MagicMock()
        ledger.count = AsyncMock(return_value=5)
        ledger.get_by_index = get_by_index

        feed = await FeedAggregator(ledger, store).list_all()

        assert len(feed) == 4
        assert 3 not in {item.sequence_index for item in feed}
        assert feed.skipped_indices == (3,)
        assert feed.ledger_count == 5

    async def test_missing_blob_yields_placeholder(self, store: InMemoryContentStore) -> None:
        ledger = InMemoryLedger()
        await _seed(ledger, store, [("present", 0.9)])
        await ledger.append("sha256-gone", "missing", signer=AUTHOR)

        feed = await FeedAggregator(ledger, store, fallback_score=0.4).list_all()

        assert len(feed) == 2
        missing = next(i for i in feed if i.title == "missing")
        assert not missing.content_available
        assert missing.body is None
        assert missing.verification_score == 0.4

    async def test_corrupt_blob_yields_placeholder(self, store: InMemoryContentStore) -> None:
        ledger = InMemoryLedger()
        store.put_raw("sha256-bad", b"not json")
        await ledger.append("sha256-bad", "corrupt", signer=AUTHOR)

        feed = await FeedAggregator(ledger, store).list_all()

        assert len(feed) == 1
        assert not feed.items[0].content_available

    async def test_count_failure_fails_listing(self, store: InMemoryContentStore) -> None:
        ledger = MagicMock()
        ledger.count = AsyncMock(side_effect=LedgerUnavailable("node down"))

        with pytest.raises(LedgerUnavailable):
            await FeedAggregator(ledger, store).list_all()

    async def test_author_mismatch_is_flagged(self, store: InMemoryContentStore) -> None:
        ledger = InMemoryLedger()
        ref = await store.put(
            ContentBlob(title="t", body="b", author="0x9999", submitted_at=0, verification_score=1)
        )
        await ledger.append(ref, "t", signer=AUTHOR)

        feed = await FeedAggregator(ledger, store).list_all()

        assert feed.items[0].author == AUTHOR
        assert feed.items[0].author_mismatch

    async def test_concurrency_is_bounded(self) -> None:
        ledger = InMemoryLedger()
        real_store = InMemoryContentStore()
        await _seed(ledger, real_store, [(f"item {i}", 0.8) for i in range(12)])

        in_flight = 0
        peak = 0

        async def slow_get(content_ref: str) -> ContentBlob:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return await real_store.get(content_ref)

        store = MagicMock()
        store.get = slow_get

        feed = await FeedAggregator(ledger, store, max_concurrency=3).list_all()

        assert len(feed) == 12
        assert peak <= 3

    async def test_get_single_item(self, store: InMemoryContentStore) -> None:
        ledger = InMemoryLedger()
        await _seed(ledger, store, [("a", 0.9), ("b", 0.2)])

        item = await FeedAggregator(ledger, store).get(1)

        assert item.title == "b"
        assert item.body == "Body of b"
        assert item.verification_score == 0.2

    async def test_get_out_of_range(self, store: InMemoryContentStore) -> None:
        with pytest.raises(IndexOutOfRange):
            await FeedAggregator(InMemoryLedger(), store).get(0)

    async def test_get_missing_blob(self, store: InMemoryContentStore) -> None:
        ledger = InMemoryLedger()
        await ledger.append("sha256-gone", "missing", signer=AUTHOR)

        item = await FeedAggregator(ledger, store).get(0)

        assert not item.content_available


async def test_published_item_appears_in_listing() -> None:
    """A flood warning scored 0.82 shows up as verified with its own author."""
    store = InMemoryContentStore()
    ledger = InMemoryLedger()
    session = Session(StaticIdentity(AUTHOR))
    publisher = Publisher(FixedVerifier(0.82), store, ledger)

    receipt = await publisher.publish(
        Submission(title="Flood warning", body="River expected to crest tonight."), session
    )
    feed = await FeedAggregator(ledger, store).list_all()

    assert len(feed) == 1
    item = feed.items[0]
    assert item.sequence_index == receipt.sequence_index
    assert item.content_ref == receipt.content_ref
    assert item.author == AUTHOR
    assert item.verification_score == 0.82
    assert feed.verified == [item]
    assert not item.author_mismatch
