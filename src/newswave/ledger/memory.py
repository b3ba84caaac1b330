"""In-process ledger with the same ordering guarantees as the contract."""

import time
from collections.abc import Callable

from newswave.data import LedgerEvent, PublicationRecord
from newswave.errors import IdentityUnavailable, IndexOutOfRange, SubmissionRejected
from newswave.ledger.base import EventEmitter, LedgerListener


class InMemoryLedger:
    """Append-only list of publication records.

    Appends are atomic with respect to the event loop (no suspension point
    between reading the count and storing the record), so indices are dense
    and unique.

    Args:
        clock: Returns the current time in seconds; defaults to ``time.time``.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._records: list[PublicationRecord] = []
        self._clock = clock
        self._events = EventEmitter()

    async def append(self, content_ref: str, title: str, *, signer: str | None) -> int:
        if not signer:
            raise IdentityUnavailable("No signer bound for ledger append")
        if not content_ref or not title:
            raise SubmissionRejected("content_ref and title must be non-empty")

        index = len(self._records)
        record = PublicationRecord(
            content_ref=content_ref,
            title=title,
            recorded_at=int(self._clock()),
            author=signer,
            sequence_index=index,
        )
        self._records.append(record)
        self._events.emit(
            LedgerEvent(
                content_ref=record.content_ref,
                title=record.title,
                recorded_at=record.recorded_at,
                author=record.author,
            )
        )
        return index

    async def count(self) -> int:
        return len(self._records)

    async def get_by_index(self, index: int) -> PublicationRecord:
        if index < 0 or index >= len(self._records):
            raise IndexOutOfRange(index, len(self._records))
        return self._records[index]

    def subscribe(self, listener: LedgerListener) -> Callable[[], None]:
        return self._events.subscribe(listener)
