"""Calendar arithmetic for schedules (dates only, no time of day)."""

from datetime import date, timedelta
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from microledger.models.enums import Periodicity

# Weeks per installment period for the non-daily periodicities. A schedule's
# duration in months is its length in weeks divided by four.
PERIOD_WEEKS: dict[Periodicity, Decimal] = {
    Periodicity.WEEKLY: Decimal(1),
    Periodicity.BIWEEKLY: Decimal(2),
    Periodicity.MONTHLY: Decimal(4),
}

BIWEEKLY_DAYS = 15


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping to the last day of shorter months."""
    return start + relativedelta(months=months)


def add_periods(start: date, periodicity: Periodicity, count: int) -> date:
    """Return ``start`` moved forward by ``count`` periods.

    Offsets are always computed from ``start`` so month-end clamping does not
    accumulate (Jan 31 + 2 months is Mar 31, not Mar 28).
    """
    if periodicity == Periodicity.DAILY:
        return start + timedelta(days=count)
    if periodicity == Periodicity.WEEKLY:
        return start + timedelta(weeks=count)
    if periodicity == Periodicity.BIWEEKLY:
        return start + timedelta(days=BIWEEKLY_DAYS * count)
    return add_months(start, count)


def duration_in_weeks(periodicity: Periodicity, count: int) -> Decimal:
    """Total schedule length in weeks for ``count`` installments."""
    if periodicity == Periodicity.DAILY:
        return Decimal(count) / Decimal(7)
    return Decimal(count) * PERIOD_WEEKS[periodicity]


def duration_in_months(periodicity: Periodicity, count: int) -> Decimal:
    """Total schedule length in (four-week) months."""
    return duration_in_weeks(periodicity, count) / Decimal(4)
