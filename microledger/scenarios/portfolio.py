"""Portfolio scenario: borrowers, loans and a payment history up to a date."""

from __future__ import annotations

import logging
import random
from datetime import date

from microledger.config import ScenarioConfig
from microledger.engine.allocation import resolve_target_index
from microledger.engine.status import has_overdue
from microledger.generators import BorrowerGenerator, LoanTermsGenerator, PaymentBehavior
from microledger.models import BorrowerStatus, LoanStatus, LoanType
from microledger.service import LedgerService

logger = logging.getLogger(__name__)

MAX_PAYMENTS_PER_LOAN = 400


class PortfolioScenario:
    """Generate a loan portfolio by replaying payments through the engine.

    This scenario creates:
    - Borrowers
    - Closed-end and interest-only loans for a share of them
    - Payments for every installment due by ``today``, following each
      borrower's habit (punctual, partial, overpaying or defaulting)

    Every loan and payment goes through ``LedgerService``, so the resulting
    store holds exactly what the engine would have produced.
    """

    def __init__(
        self,
        num_borrowers: int = 50,
        loan_penetration: float = 0.8,
        interest_only_rate: float = 0.2,
        today: date | None = None,
        seed: int | None = None,
        *,
        config: ScenarioConfig | None = None,
        service: LedgerService | None = None,
    ) -> None:
        """Initialize the portfolio scenario.

        Parameters
        ----------
        num_borrowers : int
            Number of borrowers to generate.
        loan_penetration : float
            Share of borrowers who take a loan (0.0 to 1.0).
        interest_only_rate : float
            Share of loans that are interest-only.
        today : date | None
            Date the payment history runs up to (default: today).
        seed : int | None
            Random seed for reproducibility.
        config : ScenarioConfig | None
            Optional scenario configuration. If provided, overrides the
            keyword arguments above.
        service : LedgerService | None
            Service to write through (a fresh one by default).
        """
        if config is not None:
            num_borrowers = config.num_borrowers
            loan_penetration = config.loan_penetration
            interest_only_rate = config.interest_only_rate
            today = config.today or today

        self.num_borrowers = num_borrowers
        self.loan_penetration = loan_penetration
        self.interest_only_rate = interest_only_rate
        self.today = today or date.today()
        self.seed = seed

        if seed is not None:
            random.seed(seed)

        self.service = service or LedgerService()
        self._borrower_gen = BorrowerGenerator(seed=seed)
        self._terms_gen = LoanTermsGenerator(seed=seed)
        self._payment_behavior = PaymentBehavior(seed=seed, config=self.service.config)

    def generate(self) -> LedgerService:
        """Generate all data for the scenario.

        Returns
        -------
        LedgerService
            Service whose store holds the portfolio and whose outbox holds
            the events produced along the way.
        """
        logger.info(
            "Starting portfolio scenario: %d borrowers, %.0f%% with loans, up to %s",
            self.num_borrowers,
            self.loan_penetration * 100,
            self.today,
        )

        borrowers = [
            self.service.register_borrower(borrower)
            for borrower in self._borrower_gen.generate_batch(self.num_borrowers)
        ]

        num_with_loans = int(len(borrowers) * self.loan_penetration)
        for borrower in random.sample(borrowers, num_with_loans):
            loan_type = LoanType.INTEREST_ONLY if random.random() < self.interest_only_rate else None
            terms = self._terms_gen.generate(loan_type=loan_type, reference_date=self.today)
            loan = self.service.originate_loan(borrower.borrower_id, terms, fund_source="Caja principal")
            self._replay_payments(loan.loan_id)
            self.service.refresh_overdue(loan.loan_id, self.today)

        self._update_borrower_statuses()

        logger.info("Portfolio scenario complete: %s", self.service.store.summary())
        return self.service

    def _replay_payments(self, loan_id: str) -> None:
        """Register payments for installments due by ``today``."""
        behavior = self._payment_behavior.pick_behavior()
        store = self.service.store

        for _ in range(MAX_PAYMENTS_PER_LOAN):
            loan = store.get_loan(loan_id)
            index = resolve_target_index(loan.payment_schedule, None)
            if index is None or loan.status == LoanStatus.PAID:
                return

            installment = loan.payment_schedule[index]
            if installment.due_date > self.today:
                return

            instruction = self._payment_behavior.payment_for(
                loan, installment, behavior, registered_by="cobrador@microledger.local"
            )
            if instruction is None:
                return

            updated = self.service.register_payment(loan_id, instruction, today=self.today)

            # A borrower who only covered part of the installment stops here
            next_index = resolve_target_index(updated.payment_schedule, None)
            if next_index is not None:
                next_id = updated.payment_schedule[next_index].installment_id
                if next_id == installment.installment_id:
                    return

        logger.warning("Loan %s hit the payment replay limit", loan_id)

    def _update_borrower_statuses(self) -> None:
        store = self.service.store
        for borrower in store.borrowers.values():
            loans = store.get_borrower_loans(borrower.borrower_id)
            if not loans:
                continue
            if any(has_overdue(loan, self.today) for loan in loans if loan.status != LoanStatus.PAID):
                borrower.status = BorrowerStatus.DELINQUENT
            elif all(loan.status == LoanStatus.PAID for loan in loans):
                borrower.status = BorrowerStatus.FINISHED
