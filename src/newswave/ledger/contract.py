"""Ledger client for the news registry contract, over web3 JSON-RPC."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception
from web3.logs import DISCARD

from newswave.data import LedgerEvent, PublicationRecord
from newswave.errors import (
    IdentityUnavailable,
    IndexOutOfRange,
    LedgerUnavailable,
    SubmissionRejected,
    SubmissionTimeout,
)
from newswave.ledger.abi import (
    DEFAULT_CONTRACT_ADDRESS,
    NEWS_REGISTRY_ABI,
    NEWS_UPLOADED_SIGNATURE,
)
from newswave.ledger.base import EventEmitter, LedgerListener

logger = logging.getLogger(__name__)

NEWS_UPLOADED_TOPIC = Web3.to_hex(Web3.keccak(text=NEWS_UPLOADED_SIGNATURE))


class ContractLedger:
    """Read and append publication records on the news registry contract.

    Appends are sent ``from`` the signer address and signed by the node
    that manages that account. An append returns only after the
    transaction receipt is observed; once the transaction has been sent it
    is never withdrawn, even if the caller stops waiting.

    Args:
        rpc_url: JSON-RPC endpoint of the node.
        contract_address: Address of the deployed registry contract.
        timeout: Timeout in seconds for each read call and for sending an append.
        finality_timeout: How long to wait for the append's receipt.
        w3: Optional pre-built AsyncWeb3 instance.
    """

    def __init__(
        self,
        rpc_url: str | None = None,
        *,
        contract_address: str = DEFAULT_CONTRACT_ADDRESS,
        timeout: float = 15.0,
        finality_timeout: float = 120.0,
        w3: AsyncWeb3 | None = None,
    ) -> None:
        if w3 is None:
            if not rpc_url:
                raise ValueError("rpc_url is required when no AsyncWeb3 instance is given")
            w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        self._w3 = w3
        self._address = Web3.to_checksum_address(contract_address)
        self._contract = w3.eth.contract(address=self._address, abi=NEWS_REGISTRY_ABI)
        self._timeout = timeout
        self._finality_timeout = finality_timeout
        self._events = EventEmitter()

    @property
    def w3(self) -> AsyncWeb3:
        return self._w3

    async def append(self, content_ref: str, title: str, *, signer: str | None) -> int:
        if not signer:
            raise IdentityUnavailable("No signer bound for ledger append")
        try:
            sender = Web3.to_checksum_address(signer)
        except ValueError as e:
            raise SubmissionRejected(f"Signer {signer!r} is not a valid address") from e

        call = self._contract.functions.uploadNews(content_ref, title)
        try:
            async with asyncio.timeout(self._timeout):
                tx_hash = await call.transact({"from": sender})
        except TimeoutError as e:
            raise SubmissionTimeout("Timed out sending the ledger append") from e
        except ContractLogicError as e:
            raise SubmissionRejected(f"Ledger append reverted: {e}") from e
        except (Web3Exception, ValueError, OSError) as e:
            raise SubmissionRejected(f"Ledger append refused: {e}") from e

        tx_hex = Web3.to_hex(tx_hash)
        logger.info("Ledger append sent as %s, waiting for receipt", tx_hex)
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._finality_timeout
            )
        except TimeExhausted as e:
            raise SubmissionTimeout(
                f"Append {tx_hex} not confirmed within {self._finality_timeout}s", tx_hash=tx_hex
            ) from e
        except (TimeoutError, Web3Exception, ValueError, OSError) as e:
            # Already broadcast, so the append may still land.
            raise SubmissionTimeout(
                f"Lost track of append {tx_hex} while waiting for its receipt: {e}",
                tx_hash=tx_hex,
            ) from e

        if receipt["status"] != 1:
            raise SubmissionRejected(f"Ledger append {tx_hex} reverted")

        event = self._event_from_receipt(receipt)
        try:
            async with asyncio.timeout(self._timeout):
                index = await self._resolve_index(receipt, event)
        except (TimeoutError, Web3Exception, ValueError, OSError) as e:
            # The record exists; only its index is unknown.
            raise SubmissionTimeout(
                f"Append {tx_hex} confirmed but its index could not be read: {e}",
                tx_hash=tx_hex,
            ) from e
        logger.info("Ledger append %s confirmed at index %d", tx_hex, index)
        if event is not None:
            self._events.emit(event[0])
        return index

    async def count(self) -> int:
        try:
            async with asyncio.timeout(self._timeout):
                count = await self._contract.functions.newsCount().call()
        except TimeoutError as e:
            raise LedgerUnavailable("Timed out reading ledger count") from e
        except (Web3Exception, ValueError, OSError) as e:
            raise LedgerUnavailable(f"Failed to read ledger count: {e}") from e
        return int(count)

    async def get_by_index(self, index: int) -> PublicationRecord:
        if index < 0:
            raise IndexOutOfRange(index)
        try:
            async with asyncio.timeout(self._timeout):
                content_ref, title, timestamp, author = await self._contract.functions.getNews(
                    index
                ).call()
        except ContractLogicError as e:
            # Out-of-bounds array access reverts with a panic.
            raise IndexOutOfRange(index) from e
        except TimeoutError as e:
            raise LedgerUnavailable(f"Timed out reading ledger index {index}") from e
        except (Web3Exception, ValueError, OSError) as e:
            raise LedgerUnavailable(f"Failed to read ledger index {index}: {e}") from e

        return PublicationRecord(
            content_ref=str(content_ref),
            title=str(title),
            recorded_at=int(timestamp),
            author=str(author),
            sequence_index=index,
        )

    def subscribe(self, listener: LedgerListener) -> Callable[[], None]:
        return self._events.subscribe(listener)

    def _event_from_receipt(self, receipt: Any) -> tuple[LedgerEvent, int] | None:
        """Decode our NewsUploaded log from the receipt, with its log index."""
        decoded = self._contract.events.NewsUploaded().process_receipt(receipt, errors=DISCARD)
        if not decoded:
            logger.warning("No NewsUploaded event in receipt for block %s", receipt["blockNumber"])
            return None
        log = decoded[0]
        args = log["args"]
        event = LedgerEvent(
            content_ref=str(args["ipfsHash"]),
            title=str(args["title"]),
            recorded_at=int(args["timestamp"]),
            author=str(args["author"]),
        )
        return event, int(log["logIndex"])

    async def _resolve_index(self, receipt: Any, event: tuple[LedgerEvent, int] | None) -> int:
        """Work out the sequence index the contract assigned to our append.

        The event carries no index, so take the count as of the receipt's
        block and subtract any appends that landed after ours in that block.
        """
        block = receipt["blockNumber"]
        count_at_block = int(
            await self._contract.functions.newsCount().call(block_identifier=block)
        )
        if event is None:
            return count_at_block - 1

        _, our_log_index = event
        try:
            logs = await self._w3.eth.get_logs(
                {
                    "address": self._address,
                    "fromBlock": block,
                    "toBlock": block,
                    "topics": [NEWS_UPLOADED_TOPIC],
                }
            )
        except (Web3Exception, ValueError, OSError) as e:
            logger.warning("Could not read block %s logs (%s); assuming last append", block, e)
            return count_at_block - 1

        later = sum(1 for log in logs if int(log["logIndex"]) > our_log_index)
        return count_at_block - 1 - later
