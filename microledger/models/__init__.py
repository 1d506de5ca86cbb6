"""Domain models for the lending ledger."""

from microledger.models.base import Event
from microledger.models.borrower import Borrower
from microledger.models.enums import (
    BorrowerStatus,
    InstallmentStatus,
    LoanStatus,
    LoanType,
    PaymentMethod,
    Periodicity,
)
from microledger.models.loan import (
    Installment,
    Loan,
    LoanTerms,
    PaymentInstruction,
    ScheduleEntry,
    ScheduleResult,
)

__all__ = [
    "Borrower",
    "BorrowerStatus",
    "Event",
    "Installment",
    "InstallmentStatus",
    "Loan",
    "LoanStatus",
    "LoanTerms",
    "LoanType",
    "PaymentInstruction",
    "PaymentMethod",
    "Periodicity",
    "ScheduleEntry",
    "ScheduleResult",
]
