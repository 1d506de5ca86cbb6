"""Ledger store with referential integrity and optimistic concurrency."""

import copy
import threading
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from microledger.engine.status import effective_status
from microledger.exceptions import (
    BorrowerNotFoundError,
    ConcurrentModificationError,
    DuplicateEntityError,
    LoanNotFoundError,
    ReferentialIntegrityError,
)
from microledger.models import Borrower, Installment, InstallmentStatus, Loan, LoanStatus

COLLECTIBLE_STATUSES = (LoanStatus.ACTIVE, LoanStatus.DELINQUENT)


@dataclass(frozen=True)
class AgendaItem:
    """An installment to collect, with the borrower it belongs to."""

    borrower: Borrower
    loan_id: str
    installment: Installment
    status: InstallmentStatus  # Status as of the agenda date


@dataclass
class PortfolioLine:
    """Aggregate of loans sharing a status."""

    status: LoanStatus
    count: int = 0
    total_principal: Decimal = Decimal("0")
    total_outstanding: Decimal = Decimal("0")


@dataclass
class LedgerStore:
    """In-memory store for borrowers and loans.

    Loans are versioned. Readers get deep copies together with the version
    they were read at, and writes are rejected when that version is no
    longer current, so two writers working from the same snapshot cannot
    silently overwrite each other.
    """

    borrowers: dict[str, Borrower] = field(default_factory=dict)
    loans: dict[str, Loan] = field(default_factory=dict)

    # Relationship indexes
    _borrower_loans: dict[str, list[str]] = field(default_factory=dict)
    _versions: dict[str, int] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add_borrower(self, borrower: Borrower) -> None:
        """Add a borrower to the store."""
        with self._lock:
            if borrower.borrower_id in self.borrowers:
                raise DuplicateEntityError(f"Borrower {borrower.borrower_id} already exists")
            self.borrowers[borrower.borrower_id] = borrower
            self._borrower_loans[borrower.borrower_id] = []

    def get_borrower(self, borrower_id: str) -> Borrower:
        """Get a borrower by ID."""
        try:
            return self.borrowers[borrower_id]
        except KeyError:
            raise BorrowerNotFoundError(f"Borrower {borrower_id} not found") from None

    def add_loan(self, loan: Loan) -> int:
        """Add a new loan to the store and return its initial version."""
        with self._lock:
            if loan.borrower_id not in self.borrowers:
                raise ReferentialIntegrityError(f"Borrower {loan.borrower_id} not found")
            if loan.loan_id in self.loans:
                raise DuplicateEntityError(f"Loan {loan.loan_id} already exists")

            self.loans[loan.loan_id] = copy.deepcopy(loan)
            self._versions[loan.loan_id] = 1
            self._borrower_loans[loan.borrower_id].append(loan.loan_id)
            return 1

    def get_loan(self, loan_id: str) -> Loan:
        """Get a copy of a loan."""
        return self.get_loan_snapshot(loan_id)[0]

    def get_loan_snapshot(self, loan_id: str) -> tuple[Loan, int]:
        """Get a copy of a loan and the version it was read at."""
        with self._lock:
            if loan_id not in self.loans:
                raise LoanNotFoundError(f"Loan {loan_id} not found")
            return copy.deepcopy(self.loans[loan_id]), self._versions[loan_id]

    def loan_version(self, loan_id: str) -> int:
        """Current version of a loan."""
        with self._lock:
            if loan_id not in self._versions:
                raise LoanNotFoundError(f"Loan {loan_id} not found")
            return self._versions[loan_id]

    def save_loan(self, loan: Loan, expected_version: int) -> int:
        """Replace a loan if it has not changed since ``expected_version``.

        The loan, its schedule, balance and status are written together.

        Returns
        -------
        int
            The new version.

        Raises
        ------
        LoanNotFoundError
            If the loan was never added.
        ConcurrentModificationError
            If another write happened after the snapshot was taken.
        """
        with self._lock:
            current = self._versions.get(loan.loan_id)
            if current is None:
                raise LoanNotFoundError(f"Loan {loan.loan_id} not found")
            if current != expected_version:
                raise ConcurrentModificationError(
                    f"Loan {loan.loan_id} is at version {current}, write was based on {expected_version}"
                )
            self.loans[loan.loan_id] = copy.deepcopy(loan)
            self._versions[loan.loan_id] = current + 1
            return current + 1

    # Query methods
    def get_borrower_loans(self, borrower_id: str) -> list[Loan]:
        """Get copies of all loans for a borrower."""
        with self._lock:
            loan_ids = self._borrower_loans.get(borrower_id, [])
            return [copy.deepcopy(self.loans[lid]) for lid in loan_ids]

    def collection_agenda(self, today: date) -> list[AgendaItem]:
        """Installments due on or before ``today`` that are still unpaid.

        Only active and delinquent loans are considered. Items are ordered
        by due date.
        """
        with self._lock:
            loans = [copy.deepcopy(loan) for loan in self.loans.values()]

        items = []
        for loan in loans:
            if loan.status not in COLLECTIBLE_STATUSES:
                continue
            borrower = self.borrowers.get(loan.borrower_id)
            if borrower is None:
                continue
            for installment in loan.payment_schedule:
                if installment.status == InstallmentStatus.PAID or installment.due_date > today:
                    continue
                items.append(
                    AgendaItem(
                        borrower=borrower,
                        loan_id=loan.loan_id,
                        installment=installment,
                        status=effective_status(installment, today),
                    )
                )

        items.sort(key=lambda item: item.installment.due_date)
        return items

    def portfolio_summary(self) -> list[PortfolioLine]:
        """Count, principal and outstanding balance per loan status."""
        lines: dict[LoanStatus, PortfolioLine] = {}
        with self._lock:
            for loan in self.loans.values():
                line = lines.setdefault(loan.status, PortfolioLine(status=loan.status))
                line.count += 1
                line.total_principal += loan.principal
                line.total_outstanding += loan.outstanding_balance
        return list(lines.values())

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        with self._lock:
            return {
                "borrowers": len(self.borrowers),
                "loans": len(self.loans),
                "installments": sum(len(loan.payment_schedule) for loan in self.loans.values()),
            }
