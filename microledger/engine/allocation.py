"""Payment allocation across a loan's installments."""

from __future__ import annotations

import copy
import logging
from datetime import date
from decimal import Decimal
from typing import Callable

from microledger.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from microledger.engine.dates import add_months
from microledger.engine.money import ZERO, clamp_non_negative, quantize_money, validate_payment_amount
from microledger.engine.schedule import new_id
from microledger.exceptions import NoPendingInstallmentError
from microledger.models.enums import InstallmentStatus, LoanStatus, LoanType
from microledger.models.loan import Installment, Loan, PaymentInstruction

logger = logging.getLogger(__name__)


def apply_payment(
    loan: Loan,
    instruction: PaymentInstruction,
    today: date | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    id_factory: Callable[[], str] = new_id,
) -> Loan:
    """Allocate a payment and return the updated loan.

    The input loan is left untouched; allocation runs on a deep copy so the
    caller can persist the whole result in one write or discard it.

    Closed-end loans cascade the payment over successive unpaid installments
    starting at the target. Interest-only loans either settle the debt,
    cover the month's interest (reducing capital and rolling the schedule
    forward one month), or record a partial interest payment.

    Parameters
    ----------
    loan : Loan
        Current loan state, including its schedule.
    instruction : PaymentInstruction
        Target installment, amount, payment date and who registered it.
    today : date | None
        Reference date for overdue checks (default: ``date.today()``).
    config : EngineConfig
        Rounding and tolerance constants.
    id_factory : Callable[[], str]
        ID source for installments appended to interest-only schedules.

    Returns
    -------
    Loan
        A new loan with schedule, balance and status updated.

    Raises
    ------
    InvalidAmountError
        If the amount is not a positive, finite number.
    NoPendingInstallmentError
        If every installment is already paid.
    """
    amount = validate_payment_amount(instruction.amount_paid)
    today = today or date.today()

    updated = copy.deepcopy(loan)
    index = resolve_target_index(updated.payment_schedule, instruction.installment_id)
    if index is None:
        raise NoPendingInstallmentError(f"Loan {loan.loan_id} has no pending installment")

    if updated.loan_type == LoanType.INTEREST_ONLY:
        _allocate_interest_only(updated, index, amount, instruction, config, id_factory)
    else:
        _allocate_cascade(updated, index, amount, instruction, today)

    logger.debug(
        "Applied %s to loan %s: balance %s -> %s, status %s",
        amount,
        loan.loan_id,
        loan.outstanding_balance,
        updated.outstanding_balance,
        updated.status.value,
    )
    return updated


def resolve_target_index(schedule: list[Installment], installment_id: str | None) -> int | None:
    """Index of the installment a payment should start at.

    The requested installment wins while it is still pending or overdue;
    otherwise the first unpaid installment in schedule order is used.
    """
    if installment_id is not None:
        for index, installment in enumerate(schedule):
            if installment.installment_id == installment_id:
                if installment.status != InstallmentStatus.PAID:
                    return index
                break

    for index, installment in enumerate(schedule):
        if installment.status != InstallmentStatus.PAID:
            return index
    return None


def remaining_amount(installment: Installment) -> Decimal:
    """Amount still owed on an installment (never negative)."""
    return clamp_non_negative(installment.amount - installment.amount_paid)


def interest_due(loan: Loan, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> Decimal:
    """One month of interest on the outstanding balance."""
    return quantize_money(loan.outstanding_balance * loan.monthly_rate, config)


def payoff_amount(loan: Loan, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> Decimal:
    """Amount that settles the loan today."""
    if loan.loan_type == LoanType.INTEREST_ONLY:
        return loan.outstanding_balance + interest_due(loan, config)
    return loan.outstanding_balance


def suggested_payment(
    loan: Loan, installment: Installment, config: EngineConfig = DEFAULT_ENGINE_CONFIG
) -> Decimal:
    """Default amount to offer when registering a payment.

    Interest-only loans suggest the month's interest; other loans suggest
    whatever is left on the installment.
    """
    if loan.loan_type == LoanType.INTEREST_ONLY:
        return interest_due(loan, config)
    return remaining_amount(installment)


def _record(installment: Installment, instruction: PaymentInstruction) -> None:
    installment.paid_date = instruction.payment_date
    installment.registered_by = instruction.registered_by


def _allocate_cascade(
    loan: Loan,
    start: int,
    amount: Decimal,
    instruction: PaymentInstruction,
    today: date,
) -> None:
    schedule = loan.payment_schedule
    pool = amount
    index = start

    while pool > ZERO and index < len(schedule):
        installment = schedule[index]
        index += 1
        if installment.status == InstallmentStatus.PAID:
            continue

        owed = remaining_amount(installment)
        if pool >= owed:
            installment.amount_paid = installment.amount
            installment.status = InstallmentStatus.PAID
            _record(installment, instruction)
            pool -= owed
        else:
            installment.amount_paid += pool
            installment.status = (
                InstallmentStatus.OVERDUE if installment.due_date < today else InstallmentStatus.PENDING
            )
            _record(installment, instruction)
            pool = ZERO

    if pool > ZERO:
        logger.info("Loan %s: %s left unallocated after the last installment", loan.loan_id, pool)

    loan.outstanding_balance = clamp_non_negative(loan.outstanding_balance - amount)
    if all(item.status == InstallmentStatus.PAID for item in schedule):
        loan.status = LoanStatus.PAID


def _allocate_interest_only(
    loan: Loan,
    index: int,
    amount: Decimal,
    instruction: PaymentInstruction,
    config: EngineConfig,
    id_factory: Callable[[], str],
) -> None:
    target = loan.payment_schedule[index]
    balance = loan.outstanding_balance
    interest = interest_due(loan, config)

    if abs(amount - (balance + interest)) < config.payoff_tolerance:
        target.amount_paid += amount
        target.status = InstallmentStatus.PAID
        _record(target, instruction)
        loan.outstanding_balance = ZERO
        loan.status = LoanStatus.PAID
        return

    if amount >= interest:
        target.amount_paid = amount
        target.status = InstallmentStatus.PAID
        _record(target, instruction)

        new_balance = balance - (amount - interest)
        if new_balance < config.payoff_floor:
            loan.outstanding_balance = ZERO
            loan.status = LoanStatus.PAID
            return

        next_amount = quantize_money(new_balance * (Decimal(1) + loan.monthly_rate), config)
        loan.payment_schedule.append(
            Installment(
                installment_id=id_factory(),
                loan_id=loan.loan_id,
                due_date=add_months(target.due_date, 1),
                amount=next_amount,
            )
        )
        loan.outstanding_balance = new_balance
        loan.status = LoanStatus.ACTIVE
        return

    # Interest not covered yet: record the partial payment only
    target.amount_paid += amount
    _record(target, instruction)
