"""Protocol for the append-only publication ledger."""

import logging
from collections.abc import Callable
from typing import Protocol

from newswave.data import LedgerEvent, PublicationRecord

logger = logging.getLogger(__name__)

LedgerListener = Callable[[LedgerEvent], None]


class Ledger(Protocol):
    """Interface for an append-only, globally ordered record store.

    The ledger alone assigns ``sequence_index`` and ``recorded_at``.
    """

    async def append(self, content_ref: str, title: str, *, signer: str | None) -> int:
        """Record a new entry signed by ``signer``.

        Returns:
            The sequence index assigned to the new record.

        Raises:
            IdentityUnavailable: If ``signer`` is empty.
            SubmissionRejected: If the ledger refused the append.
            SubmissionTimeout: If finality was not observed in time.
        """
        ...

    async def count(self) -> int:
        """Return the current number of records.

        Raises:
            LedgerUnavailable: If the ledger could not be reached.
        """
        ...

    async def get_by_index(self, index: int) -> PublicationRecord:
        """Read one record.

        Raises:
            IndexOutOfRange: If ``index`` is not below the current count.
            LedgerUnavailable: If the ledger could not be reached.
        """
        ...

    def subscribe(self, listener: LedgerListener) -> Callable[[], None]:
        """Register a callback for append events. Returns an unsubscribe callable."""
        ...


class EventEmitter:
    """Fan out ledger events to subscribers; a failing listener never blocks the rest."""

    def __init__(self) -> None:
        self._listeners: list[LedgerListener] = []

    def subscribe(self, listener: LedgerListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: LedgerEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Ledger event listener raised; ignoring")
