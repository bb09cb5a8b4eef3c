"""Ledger store — atomic per-key access to products, orders and carts."""

from checkout.ledger.domain_store import DomainLedgerStore
from checkout.ledger.locks import KeyedLocks
from checkout.ledger.port import LedgerStore

__all__ = ["DomainLedgerStore", "KeyedLocks", "LedgerStore"]
