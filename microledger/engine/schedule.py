"""Payment schedule generation for new loans."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from decimal import ROUND_FLOOR, Decimal, InvalidOperation
from typing import Any, Callable

from microledger.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from microledger.engine.dates import add_months, add_periods, duration_in_months
from microledger.engine.money import ZERO, floor_to_unit, quantize_money, to_decimal
from microledger.exceptions import InvalidLoanParametersError
from microledger.models.enums import LoanStatus, LoanType, Periodicity
from microledger.models.loan import Installment, Loan, LoanTerms, ScheduleEntry, ScheduleResult

logger = logging.getLogger(__name__)

CLOSED_END_TYPES = frozenset({LoanType.AMORTIZED, LoanType.FIXED_MONTHLY_INTEREST})

EMPTY_SCHEDULE = ScheduleResult(total_amount=ZERO, installment_amount=ZERO, end_date=None)


def new_id() -> str:
    """Generate a fresh entity ID."""
    return uuid.uuid4().hex


def generate_schedule(
    principal: Any,
    monthly_rate_percent: Any,
    installment_count: int | None,
    periodicity: Periodicity | None,
    start_date: date,
    loan_type: LoanType,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> ScheduleResult:
    """Generate the installment schedule for a loan.

    Closed-end loans (amortized and fixed monthly interest) spread
    principal plus interest over ``installment_count`` installments. Every
    installment except the last is floored to ``config.rounding_unit``; the
    last one absorbs the remainder so the schedule sums exactly to the total.

    Interest-only loans get a single installment one month after
    ``start_date`` for principal plus one month of interest. Later
    installments are appended by the payment allocator.

    Parameters
    ----------
    principal : Any
        Amount lent. Must be positive.
    monthly_rate_percent : Any
        Monthly interest rate in percent (``10`` for 10%).
    installment_count : int | None
        Number of installments. Required for closed-end loans.
    periodicity : Periodicity | None
        Installment period for closed-end loans (default monthly).
    start_date : date
        Disbursement date. The first installment is due one period later.
    loan_type : LoanType
        Selects the generation algorithm.
    config : EngineConfig
        Rounding constants.

    Returns
    -------
    ScheduleResult
        The schedule with its totals. Invalid terms yield an empty result
        with zero totals instead of raising.
    """
    try:
        principal = to_decimal(principal)
        rate = to_decimal(monthly_rate_percent) / Decimal("100")
    except (TypeError, InvalidOperation):
        logger.warning(
            "Cannot generate schedule: principal %r or rate %r is not a number",
            principal,
            monthly_rate_percent,
        )
        return EMPTY_SCHEDULE

    if not principal.is_finite() or principal <= ZERO:
        logger.warning("Cannot generate schedule: principal %s is not positive", principal)
        return EMPTY_SCHEDULE
    if not rate.is_finite() or rate < ZERO:
        logger.warning("Cannot generate schedule: rate %s%% is negative", monthly_rate_percent)
        return EMPTY_SCHEDULE

    if loan_type == LoanType.INTEREST_ONLY:
        return _interest_only_schedule(principal, rate, start_date, config)

    if installment_count is None or installment_count < 1:
        logger.warning(
            "Cannot generate %s schedule: installment count %s is not positive",
            loan_type.value,
            installment_count,
        )
        return EMPTY_SCHEDULE

    periodicity = periodicity or Periodicity.MONTHLY
    months = duration_in_months(periodicity, installment_count)
    if loan_type == LoanType.FIXED_MONTHLY_INTEREST:
        # Interest is charged for whole months only, at least one
        interest_months = max(Decimal(1), months.to_integral_value(rounding=ROUND_FLOOR))
    else:
        interest_months = months

    total_interest = principal * rate * interest_months
    total = quantize_money(principal + total_interest, config)

    return _split_total(total, installment_count, periodicity, start_date, config)


def generate_schedule_for_terms(
    terms: LoanTerms, config: EngineConfig = DEFAULT_ENGINE_CONFIG
) -> ScheduleResult:
    """Generate a schedule from a ``LoanTerms`` record."""
    return generate_schedule(
        terms.principal,
        terms.monthly_rate_percent,
        terms.installment_count,
        terms.periodicity,
        terms.start_date,
        terms.loan_type,
        config=config,
    )


def _interest_only_schedule(
    principal: Decimal, rate: Decimal, start_date: date, config: EngineConfig
) -> ScheduleResult:
    amount = quantize_money(principal * (Decimal(1) + rate), config)
    entry = ScheduleEntry(due_date=add_months(start_date, 1), amount=amount)
    return ScheduleResult(
        total_amount=amount,
        installment_amount=amount,
        end_date=None,
        schedule=(entry,),
    )


def _split_total(
    total: Decimal,
    count: int,
    periodicity: Periodicity,
    start_date: date,
    config: EngineConfig,
) -> ScheduleResult:
    installment_amount = floor_to_unit(total / count, config.rounding_unit)

    entries = []
    remaining = total
    for number in range(1, count + 1):
        if number == count:
            amount = remaining
        else:
            amount = installment_amount
            remaining -= installment_amount
        entries.append(
            ScheduleEntry(due_date=add_periods(start_date, periodicity, number), amount=amount)
        )

    return ScheduleResult(
        total_amount=total,
        installment_amount=installment_amount,
        end_date=add_periods(start_date, periodicity, count),
        schedule=tuple(entries),
    )


def originate_loan(
    borrower_id: str,
    terms: LoanTerms,
    *,
    loan_id: str | None = None,
    fund_source: str = "",
    observations: str = "",
    created_at: datetime | None = None,
    id_factory: Callable[[], str] = new_id,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> Loan:
    """Create a new loan with its generated schedule.

    Raises
    ------
    InvalidLoanParametersError
        If the terms produce an empty schedule.
    """
    result = generate_schedule_for_terms(terms, config)
    if result.is_empty:
        raise InvalidLoanParametersError(
            f"Terms do not produce a schedule: principal={terms.principal}, "
            f"installments={terms.installment_count}, type={terms.loan_type.value}"
        )

    loan_id = loan_id or id_factory()
    schedule = [
        Installment(
            installment_id=id_factory(),
            loan_id=loan_id,
            due_date=entry.due_date,
            amount=entry.amount,
            status=entry.status,
        )
        for entry in result.schedule
    ]

    if terms.loan_type == LoanType.INTEREST_ONLY:
        outstanding = to_decimal(terms.principal)
        installment_count = None
        periodicity = None
    else:
        outstanding = result.total_amount
        installment_count = terms.installment_count
        periodicity = terms.periodicity or Periodicity.MONTHLY

    return Loan(
        loan_id=loan_id,
        borrower_id=borrower_id,
        principal=to_decimal(terms.principal),
        monthly_rate_percent=to_decimal(terms.monthly_rate_percent),
        loan_type=terms.loan_type,
        installment_count=installment_count,
        periodicity=periodicity,
        start_date=terms.start_date,
        end_date=result.end_date,
        outstanding_balance=outstanding,
        status=LoanStatus.ACTIVE,
        payment_schedule=schedule,
        fund_source=fund_source,
        observations=observations,
        created_at=created_at or datetime.now(),
    )
