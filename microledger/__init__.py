"""Micro-lending ledger: loan schedules and payment allocation."""

from microledger.engine import apply_payment, generate_schedule, originate_loan
from microledger.service import LedgerService
from microledger.store import LedgerStore

__version__ = "0.1.0"

__all__ = [
    "LedgerService",
    "LedgerStore",
    "apply_payment",
    "generate_schedule",
    "originate_loan",
]
