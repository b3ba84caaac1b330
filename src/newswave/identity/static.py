"""Identity provider backed by an explicitly configured address."""

import logging
from collections.abc import Callable

from newswave.identity.base import IdentityListener

logger = logging.getLogger(__name__)


class ListenerSet:
    """Small registry of identity-change listeners shared by the providers."""

    def __init__(self) -> None:
        self._listeners: list[IdentityListener] = []

    def add(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def notify(self, address: str | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(address)
            except Exception:
                logger.exception("Identity listener raised; ignoring")


class StaticIdentity:
    """Identity provider holding a single address set by the caller.

    ``set_address`` plays the role of the wallet's "accounts changed"
    notification: every subscriber is told about the new binding.

    Args:
        address: Initial signing address, or None for an unbound identity.
    """

    def __init__(self, address: str | None = None) -> None:
        self._address = address or None
        self._listeners = ListenerSet()

    async def current_address(self) -> str | None:
        return self._address

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        return self._listeners.add(listener)

    def set_address(self, address: str | None) -> None:
        """Rebind (or unbind with None) the signing address."""
        address = address or None
        if address == self._address:
            return
        self._address = address
        logger.info("Signing identity changed to %s", address or "<none>")
        self._listeners.notify(address)
