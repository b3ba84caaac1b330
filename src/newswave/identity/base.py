"""Protocol for signing identity providers."""

from collections.abc import Callable
from typing import Protocol

IdentityListener = Callable[[str | None], None]


class IdentityProvider(Protocol):
    """Interface for sources of the currently authorized signing address."""

    async def current_address(self) -> str | None:
        """Return the bound signing address, or None when nothing is bound."""
        ...

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a callback fired whenever the bound address changes.

        Returns:
            A callable that removes the listener.
        """
        ...
