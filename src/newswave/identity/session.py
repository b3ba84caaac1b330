"""Explicit session handle that carries the signing identity into a publication."""

import logging

from newswave.errors import IdentityUnavailable
from newswave.identity.base import IdentityProvider

logger = logging.getLogger(__name__)


class Session:
    """A caller's handle on a signing identity.

    The session remembers the last address it resolved, and drops it as soon
    as the provider reports a change. ``resolve`` always re-checks the
    provider, so a publication never signs with a stale binding.

    Args:
        provider: The identity provider to resolve addresses from.
    """

    def __init__(self, provider: IdentityProvider) -> None:
        self._provider = provider
        self._address: str | None = None
        self._unsubscribe = provider.subscribe(self._on_identity_changed)

    @property
    def address(self) -> str | None:
        """Last resolved address, or None if never resolved or invalidated."""
        return self._address

    async def resolve(self) -> str:
        """Re-check the provider and return the bound address.

        Raises:
            IdentityUnavailable: If no address is bound or the provider failed.
        """
        try:
            address = await self._provider.current_address()
        except Exception as e:
            self._address = None
            raise IdentityUnavailable(f"Identity provider failed: {e}") from e
        if not address:
            self._address = None
            raise IdentityUnavailable("No signing identity is bound")
        self._address = address
        return address

    def close(self) -> None:
        """Stop listening for identity changes."""
        self._unsubscribe()

    def _on_identity_changed(self, address: str | None) -> None:
        if self._address is not None:
            logger.info("Session identity invalidated (was %s)", self._address)
        self._address = None
