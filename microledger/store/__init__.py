"""In-memory ledger store for maintaining entity relationships."""

from microledger.store.ledger import AgendaItem, LedgerStore, PortfolioLine

__all__ = ["AgendaItem", "LedgerStore", "PortfolioLine"]
