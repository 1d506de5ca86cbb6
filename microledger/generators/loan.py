"""Loan terms and payment behavior generators."""

from __future__ import annotations

import random
from datetime import date, timedelta
from decimal import Decimal

from microledger.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from microledger.engine.allocation import payoff_amount, suggested_payment
from microledger.engine.money import quantize_money
from microledger.generators.base import BaseGenerator
from microledger.models import (
    Installment,
    Loan,
    LoanTerms,
    LoanType,
    PaymentInstruction,
    PaymentMethod,
    Periodicity,
)


class LoanTermsGenerator(BaseGenerator):
    """Generate synthetic loan terms."""

    CLOSED_END_TYPES = [LoanType.AMORTIZED, LoanType.FIXED_MONTHLY_INTEREST]
    CLOSED_END_WEIGHTS = [0.75, 0.25]

    PERIODICITIES = list(Periodicity)
    PERIODICITY_WEIGHTS = [0.30, 0.20, 0.20, 0.30]

    # Typical installment counts by periodicity
    INSTALLMENT_COUNTS = {
        Periodicity.DAILY: [20, 24, 30, 40, 60],
        Periodicity.WEEKLY: [4, 6, 8, 10, 12],
        Periodicity.BIWEEKLY: [2, 4, 6, 8, 12],
        Periodicity.MONTHLY: [1, 2, 3, 6, 12, 18],
    }

    # Monthly rates in percent
    RATES = [Decimal("5"), Decimal("8"), Decimal("10"), Decimal("12"), Decimal("15"), Decimal("20")]

    def generate(
        self,
        loan_type: LoanType | None = None,
        reference_date: date | None = None,
        max_age_days: int = 365,
    ) -> LoanTerms:
        """Generate loan terms.

        Parameters
        ----------
        loan_type : LoanType | None
            Loan type; a closed-end type is picked when None.
        reference_date : date | None
            Latest possible start date (default: today).
        max_age_days : int
            How far before ``reference_date`` the loan may start.

        Returns
        -------
        LoanTerms
            Generated terms. Principal is a multiple of 10 000.
        """
        if loan_type is None:
            loan_type = random.choices(self.CLOSED_END_TYPES, weights=self.CLOSED_END_WEIGHTS, k=1)[0]
        reference_date = reference_date or date.today()
        start_date = reference_date - timedelta(days=random.randint(0, max_age_days))
        principal = Decimal(random.randint(5, 300) * 10_000)
        rate = random.choice(self.RATES)

        if loan_type == LoanType.INTEREST_ONLY:
            return LoanTerms(
                principal=principal,
                monthly_rate_percent=rate,
                loan_type=loan_type,
                start_date=start_date,
            )

        periodicity = random.choices(self.PERIODICITIES, weights=self.PERIODICITY_WEIGHTS, k=1)[0]
        return LoanTerms(
            principal=principal,
            monthly_rate_percent=rate,
            loan_type=loan_type,
            start_date=start_date,
            installment_count=random.choice(self.INSTALLMENT_COUNTS[periodicity]),
            periodicity=periodicity,
        )


class PaymentBehavior:
    """Simulate how borrowers pay their installments."""

    BEHAVIORS = ["punctual", "partial", "overpayer", "defaulter"]
    WEIGHTS = [0.65, 0.15, 0.12, 0.08]

    def __init__(
        self,
        seed: int | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        if seed is not None:
            random.seed(seed)
        self.config = config

    def pick_behavior(self) -> str:
        """Pick a borrower's payment habit."""
        return random.choices(self.BEHAVIORS, weights=self.WEIGHTS, k=1)[0]

    def payment_for(
        self,
        loan: Loan,
        installment: Installment,
        behavior: str,
        registered_by: str | None = None,
    ) -> PaymentInstruction | None:
        """Build the payment a borrower makes for an installment.

        Returns
        -------
        PaymentInstruction | None
            The payment, or None when the borrower skips it.
        """
        if behavior == "defaulter" and random.random() < 0.7:
            return None

        suggested = suggested_payment(loan, installment, self.config)

        if behavior == "partial":
            amount = suggested * Decimal(random.choice(["0.25", "0.5", "0.75"]))
        elif behavior == "overpayer":
            if random.random() < 0.15:
                amount = payoff_amount(loan, self.config)
            elif loan.loan_type == LoanType.INTEREST_ONLY:
                amount = suggested + loan.outstanding_balance * Decimal(random.choice(["0.1", "0.25", "0.5"]))
            else:
                amount = suggested * Decimal("1.5")
        else:
            amount = suggested

        amount = quantize_money(amount, self.config)
        if amount <= 0:
            return None

        return PaymentInstruction(
            installment_id=installment.installment_id,
            amount_paid=amount,
            payment_date=installment.due_date + timedelta(days=random.randint(0, 5)),
            registered_by=registered_by,
            payment_method=random.choice(list(PaymentMethod)),
        )
