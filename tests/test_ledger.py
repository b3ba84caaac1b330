"""Tests for ledger implementations."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3RPCError

from newswave.data import LedgerEvent
from newswave.errors import (
    IdentityUnavailable,
    IndexOutOfRange,
    LedgerUnavailable,
    SubmissionRejected,
    SubmissionTimeout,
)
from newswave.ledger import DEFAULT_CONTRACT_ADDRESS, ContractLedger, InMemoryLedger

SIGNER = "0x1111111111111111111111111111111111111111"
TX_HASH = bytes.fromhex("ab" * 32)


# -- InMemoryLedger --


class TestInMemoryLedger:
    async def test_append_assigns_dense_indices(self) -> None:
        ledger = InMemoryLedger(clock=lambda: 1_700_000_000.9)
        indices = [await ledger.append(f"ref-{i}", f"Title {i}", signer=SIGNER) for i in range(3)]
        assert indices == [0, 1, 2]
        assert await ledger.count() == 3

        record = await ledger.get_by_index(1)
        assert record.content_ref == "ref-1"
        assert record.title == "Title 1"
        assert record.author == SIGNER
        assert record.recorded_at == 1_700_000_000
        assert record.sequence_index == 1

    async def test_concurrent_appends_get_unique_indices(self) -> None:
        ledger = InMemoryLedger()
        indices = await asyncio.gather(
            *(ledger.append(f"ref-{i}", "t", signer=SIGNER) for i in range(20))
        )
        assert sorted(indices) == list(range(20))

    async def test_append_requires_signer(self) -> None:
        ledger = InMemoryLedger()
        with pytest.raises(IdentityUnavailable):
            await ledger.append("ref", "title", signer=None)
        assert await ledger.count() == 0

    async def test_append_rejects_empty_fields(self) -> None:
        ledger = InMemoryLedger()
        with pytest.raises(SubmissionRejected):
            await ledger.append("", "title", signer=SIGNER)
        with pytest.raises(SubmissionRejected):
            await ledger.append("ref", "", signer=SIGNER)

    async def test_get_by_index_out_of_range(self) -> None:
        ledger = InMemoryLedger()
        await ledger.append("ref", "title", signer=SIGNER)
        with pytest.raises(IndexOutOfRange):
            await ledger.get_by_index(1)
        with pytest.raises(IndexOutOfRange):
            await ledger.get_by_index(-1)

    async def test_subscribe_receives_events(self) -> None:
        ledger = InMemoryLedger(clock=lambda: 100.0)
        events: list[LedgerEvent] = []
        unsubscribe = ledger.subscribe(events.append)

        await ledger.append("ref-a", "A", signer=SIGNER)
        unsubscribe()
        await ledger.append("ref-b", "B", signer=SIGNER)

        assert events == [
            LedgerEvent(content_ref="ref-a", title="A", recorded_at=100, author=SIGNER)
        ]

    async def test_failing_listener_does_not_break_append(self) -> None:
        ledger = InMemoryLedger()
        ledger.subscribe(MagicMock(side_effect=RuntimeError("boom")))
        assert await ledger.append("ref", "title", signer=SIGNER) == 0


# -- ContractLedger --


class TestContractLedger:
    """Tests for ContractLedger against a mocked AsyncWeb3."""

    @pytest.fixture
    def contract(self) -> MagicMock:
        contract = MagicMock()
        contract.functions.uploadNews.return_value.transact = AsyncMock(return_value=TX_HASH)
        contract.functions.newsCount.return_value.call = AsyncMock(return_value=5)
        contract.events.NewsUploaded.return_value.process_receipt.return_value = [
            {
                "args": {
                    "ipfsHash": "bafyref",
                    "title": "Flood warning",
                    "timestamp": 1_700_000_000,
                    "author": SIGNER,
                },
                "logIndex": 3,
            }
        ]
        return contract

    @pytest.fixture
    def w3(self, contract: MagicMock) -> MagicMock:
        w3 = MagicMock()
        w3.eth.contract.return_value = contract
        w3.eth.wait_for_transaction_receipt = AsyncMock(
            return_value={"status": 1, "blockNumber": 42}
        )
        w3.eth.get_logs = AsyncMock(return_value=[{"logIndex": 3}])
        return w3

    @pytest.fixture
    def ledger(self, w3: MagicMock) -> ContractLedger:
        return ContractLedger(w3=w3, timeout=1.0, finality_timeout=5.0)

    def test_requires_rpc_url_or_w3(self) -> None:
        with pytest.raises(ValueError, match="rpc_url"):
            ContractLedger()

    def test_binds_default_contract(self, ledger: ContractLedger, w3: MagicMock) -> None:
        kwargs = w3.eth.contract.call_args.kwargs
        assert kwargs["address"] == Web3.to_checksum_address(DEFAULT_CONTRACT_ADDRESS)
        assert any(entry.get("name") == "uploadNews" for entry in kwargs["abi"])

    async def test_append_returns_last_index(
        self, ledger: ContractLedger, contract: MagicMock
    ) -> None:
        events: list[LedgerEvent] = []
        ledger.subscribe(events.append)

        index = await ledger.append("bafyref", "Flood warning", signer=SIGNER.lower())

        assert index == 4
        contract.functions.uploadNews.assert_called_once_with("bafyref", "Flood warning")
        transact_arg = contract.functions.uploadNews.return_value.transact.call_args.args[0]
        assert transact_arg == {"from": SIGNER}
        contract.functions.newsCount.return_value.call.assert_called_with(block_identifier=42)
        assert events[0].content_ref == "bafyref"
        assert events[0].recorded_at == 1_700_000_000

    async def test_append_accounts_for_later_appends_in_same_block(
        self, ledger: ContractLedger, w3: MagicMock
    ) -> None:
        w3.eth.get_logs = AsyncMock(
            return_value=[{"logIndex": 1}, {"logIndex": 3}, {"logIndex": 7}, {"logIndex": 9}]
        )
        # Count at block is 5, two appends landed after ours
        assert await ledger.append("bafyref", "t", signer=SIGNER) == 2

    async def test_append_without_event_uses_count(
        self, ledger: ContractLedger, contract: MagicMock, w3: MagicMock
    ) -> None:
        contract.events.NewsUploaded.return_value.process_receipt.return_value = []
        assert await ledger.append("bafyref", "t", signer=SIGNER) == 4
        w3.eth.get_logs.assert_not_called()

    async def test_append_requires_signer(self, ledger: ContractLedger) -> None:
        with pytest.raises(IdentityUnavailable):
            await ledger.append("bafyref", "t", signer="")

    async def test_append_invalid_signer(self, ledger: ContractLedger) -> None:
        with pytest.raises(SubmissionRejected, match="not a valid address"):
            await ledger.append("bafyref", "t", signer="not-an-address")

    async def test_append_revert(self, ledger: ContractLedger, contract: MagicMock) -> None:
        contract.functions.uploadNews.return_value.transact = AsyncMock(
            side_effect=ContractLogicError("execution reverted")
        )
        with pytest.raises(SubmissionRejected, match="reverted"):
            await ledger.append("bafyref", "t", signer=SIGNER)

    async def test_append_rpc_error(self, ledger: ContractLedger, contract: MagicMock) -> None:
        contract.functions.uploadNews.return_value.transact = AsyncMock(
            side_effect=Web3RPCError("unknown account")
        )
        with pytest.raises(SubmissionRejected, match="refused"):
            await ledger.append("bafyref", "t", signer=SIGNER)

    async def test_append_failed_receipt(self, ledger: ContractLedger, w3: MagicMock) -> None:
        w3.eth.wait_for_transaction_receipt = AsyncMock(
            return_value={"status": 0, "blockNumber": 42}
        )
        with pytest.raises(SubmissionRejected):
            await ledger.append("bafyref", "t", signer=SIGNER)

    async def test_append_not_confirmed(self, ledger: ContractLedger, w3: MagicMock) -> None:
        w3.eth.wait_for_transaction_receipt = AsyncMock(side_effect=TimeExhausted("too slow"))
        with pytest.raises(SubmissionTimeout) as exc_info:
            await ledger.append("bafyref", "t", signer=SIGNER)
        assert exc_info.value.tx_hash == "0x" + "ab" * 32

    async def test_append_receipt_wait_connection_lost(
        self, ledger: ContractLedger, w3: MagicMock
    ) -> None:
        w3.eth.wait_for_transaction_receipt = AsyncMock(side_effect=OSError("connection reset"))
        with pytest.raises(SubmissionTimeout) as exc_info:
            await ledger.append("bafyref", "t", signer=SIGNER)
        assert exc_info.value.tx_hash == "0x" + "ab" * 32

    async def test_append_receipt_wait_rpc_error(
        self, ledger: ContractLedger, w3: MagicMock
    ) -> None:
        w3.eth.wait_for_transaction_receipt = AsyncMock(
            side_effect=Web3RPCError("node restarting")
        )
        with pytest.raises(SubmissionTimeout):
            await ledger.append("bafyref", "t", signer=SIGNER)

    async def test_append_index_unreadable(
        self, ledger: ContractLedger, contract: MagicMock
    ) -> None:
        contract.functions.newsCount.return_value.call = AsyncMock(
            side_effect=OSError("connection reset")
        )
        with pytest.raises(SubmissionTimeout, match="index could not be read"):
            await ledger.append("bafyref", "t", signer=SIGNER)

    async def test_append_logs_unreadable_falls_back_to_count(
        self, ledger: ContractLedger, w3: MagicMock
    ) -> None:
        w3.eth.get_logs = AsyncMock(side_effect=Web3RPCError("query limit"))
        assert await ledger.append("bafyref", "t", signer=SIGNER) == 4

    async def test_count(self, ledger: ContractLedger) -> None:
        assert await ledger.count() == 5

    async def test_count_unavailable(self, ledger: ContractLedger, contract: MagicMock) -> None:
        contract.functions.newsCount.return_value.call = AsyncMock(side_effect=OSError("down"))
        with pytest.raises(LedgerUnavailable):
            await ledger.count()

    async def test_get_by_index(self, ledger: ContractLedger, contract: MagicMock) -> None:
        contract.functions.getNews.return_value.call = AsyncMock(
            return_value=("bafyref", "Flood warning", 1_700_000_000, SIGNER)
        )
        record = await ledger.get_by_index(2)
        contract.functions.getNews.assert_called_once_with(2)
        assert record.content_ref == "bafyref"
        assert record.title == "Flood warning"
        assert record.recorded_at == 1_700_000_000
        assert record.author == SIGNER
        assert record.sequence_index == 2

    async def test_get_by_index_revert_is_out_of_range(
        self, ledger: ContractLedger, contract: MagicMock
    ) -> None:
        contract.functions.getNews.return_value.call = AsyncMock(
            side_effect=ContractLogicError("Panic error 0x32")
        )
        with pytest.raises(IndexOutOfRange):
            await ledger.get_by_index(99)

    async def test_get_by_index_negative(self, ledger: ContractLedger) -> None:
        with pytest.raises(IndexOutOfRange):
            await ledger.get_by_index(-1)

    async def test_get_by_index_transport_error(
        self, ledger: ContractLedger, contract: MagicMock
    ) -> None:
        contract.functions.getNews.return_value.call = AsyncMock(side_effect=OSError("down"))
        with pytest.raises(LedgerUnavailable):
            await ledger.get_by_index(0)
