"""Loan, installment and payment models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from microledger.models.enums import (
    InstallmentStatus,
    LoanStatus,
    LoanType,
    PaymentMethod,
    Periodicity,
)


@dataclass
class Installment:
    """One scheduled due amount within a loan's payment schedule."""

    installment_id: str
    loan_id: str
    due_date: date
    amount: Decimal  # Amount originally due
    amount_paid: Decimal = Decimal("0")
    paid_date: date | None = None  # Date of the most recent allocation
    registered_by: str | None = None  # Who recorded the most recent allocation
    status: InstallmentStatus = InstallmentStatus.PENDING


@dataclass
class Loan:
    """Loan contract and its payment schedule."""

    loan_id: str
    borrower_id: str
    principal: Decimal
    monthly_rate_percent: Decimal  # e.g. Decimal("10") for 10% a month
    loan_type: LoanType
    installment_count: int | None  # Unused for interest-only loans
    periodicity: Periodicity | None  # Unused for interest-only loans
    start_date: date
    end_date: date | None  # None for open-ended interest-only loans
    outstanding_balance: Decimal
    status: LoanStatus
    payment_schedule: list[Installment] = field(default_factory=list)
    fund_source: str = ""
    observations: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def monthly_rate(self) -> Decimal:
        """Monthly rate as a fraction."""
        return self.monthly_rate_percent / Decimal("100")


@dataclass(frozen=True)
class LoanTerms:
    """Parameters a loan is originated from."""

    principal: Decimal
    monthly_rate_percent: Decimal
    loan_type: LoanType
    start_date: date
    installment_count: int | None = None
    periodicity: Periodicity | None = None


@dataclass(frozen=True)
class ScheduleEntry:
    """Generated installment before IDs are assigned."""

    due_date: date
    amount: Decimal
    status: InstallmentStatus = InstallmentStatus.PENDING


@dataclass(frozen=True)
class ScheduleResult:
    """Output of schedule generation."""

    total_amount: Decimal
    installment_amount: Decimal
    end_date: date | None
    schedule: tuple[ScheduleEntry, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.schedule


@dataclass(frozen=True)
class PaymentInstruction:
    """Incoming payment to be allocated against a loan."""

    installment_id: str | None
    amount_paid: Decimal
    payment_date: date
    registered_by: str | None = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    observations: str = ""
