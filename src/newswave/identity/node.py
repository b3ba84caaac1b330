"""Identity provider that asks an Ethereum node for its managed accounts."""

import asyncio
import logging
from collections.abc import Callable

from web3 import AsyncHTTPProvider, AsyncWeb3

from newswave.identity.base import IdentityListener
from newswave.identity.static import ListenerSet

logger = logging.getLogger(__name__)


class NodeAccountIdentity:
    """Bind the first account exposed by the node, like a browser wallet does.

    The node holds the keys and signs transactions sent ``from`` that
    account. ``connect`` requests the account list once; ``refresh`` re-reads
    it and notifies subscribers when the first account changed.

    Args:
        rpc_url: JSON-RPC endpoint of the node.
        timeout: Timeout in seconds for the accounts request.
        w3: Optional pre-built AsyncWeb3 instance (shared with the ledger).
    """

    def __init__(
        self,
        rpc_url: str | None = None,
        *,
        timeout: float = 10.0,
        w3: AsyncWeb3 | None = None,
    ) -> None:
        if w3 is None:
            if not rpc_url:
                raise ValueError("rpc_url is required when no AsyncWeb3 instance is given")
            w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        self._w3 = w3
        self._timeout = timeout
        self._address: str | None = None
        self._connected = False
        self._listeners = ListenerSet()

    async def connect(self) -> str | None:
        """Request the node's accounts and bind the first one.

        Returns:
            The bound address, or None if the node exposes no accounts.
        """
        await self.refresh()
        self._connected = True
        return self._address

    async def refresh(self) -> str | None:
        async with asyncio.timeout(self._timeout):
            accounts = await self._w3.eth.accounts
        address = str(accounts[0]) if accounts else None
        if address != self._address:
            self._address = address
            logger.info("Node account binding changed to %s", address or "<none>")
            self._listeners.notify(address)
        return address

    async def current_address(self) -> str | None:
        if not self._connected:
            return None
        return await self.refresh()

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        return self._listeners.add(listener)
