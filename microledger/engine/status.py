"""Installment and loan status transitions outside payment allocation."""

import copy
from datetime import date

from microledger.models.enums import InstallmentStatus, LoanStatus
from microledger.models.loan import Installment, Loan


def effective_status(installment: Installment, today: date) -> InstallmentStatus:
    """Status as it should be shown on ``today``.

    An unpaid installment past its due date reads as overdue even if the
    stored status has not been refreshed yet.
    """
    if installment.status != InstallmentStatus.PAID and installment.due_date < today:
        return InstallmentStatus.OVERDUE
    return installment.status


def mark_overdue(loan: Loan, today: date) -> Loan:
    """Return a copy of the loan with past-due pending installments overdue."""
    updated = copy.deepcopy(loan)
    for installment in updated.payment_schedule:
        if installment.status == InstallmentStatus.PENDING and installment.due_date < today:
            installment.status = InstallmentStatus.OVERDUE
    return updated


def has_overdue(loan: Loan, today: date) -> bool:
    return any(
        effective_status(installment, today) == InstallmentStatus.OVERDUE
        for installment in loan.payment_schedule
    )


def cancel_loan(loan: Loan) -> Loan:
    """Return a cancelled copy of the loan. The schedule is kept as is."""
    updated = copy.deepcopy(loan)
    updated.status = LoanStatus.CANCELLED
    return updated
