"""Loan amortization and payment allocation engine."""

from microledger.engine.allocation import (
    apply_payment,
    interest_due,
    payoff_amount,
    remaining_amount,
    resolve_target_index,
    suggested_payment,
)
from microledger.engine.schedule import (
    generate_schedule,
    generate_schedule_for_terms,
    originate_loan,
)
from microledger.engine.status import cancel_loan, effective_status, has_overdue, mark_overdue

__all__ = [
    "apply_payment",
    "cancel_loan",
    "effective_status",
    "generate_schedule",
    "generate_schedule_for_terms",
    "has_overdue",
    "interest_due",
    "mark_overdue",
    "originate_loan",
    "payoff_amount",
    "remaining_amount",
    "resolve_target_index",
    "suggested_payment",
]
