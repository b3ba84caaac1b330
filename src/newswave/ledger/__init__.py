"""Append-only publication ledger clients."""

from newswave.ledger.abi import DEFAULT_CONTRACT_ADDRESS, NEWS_REGISTRY_ABI
from newswave.ledger.base import EventEmitter, Ledger, LedgerListener
from newswave.ledger.contract import ContractLedger
from newswave.ledger.memory import InMemoryLedger

__all__ = [
    "DEFAULT_CONTRACT_ADDRESS",
    "NEWS_REGISTRY_ABI",
    "ContractLedger",
    "EventEmitter",
    "InMemoryLedger",
    "Ledger",
    "LedgerListener",
]
