"""Ledger service: loan origination and payment registration over a store."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Callable, Iterator, Protocol

from microledger.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from microledger.engine.allocation import apply_payment
from microledger.engine.schedule import new_id, originate_loan
from microledger.engine.status import cancel_loan, mark_overdue
from microledger.models import Borrower, Event, Loan, LoanStatus, LoanTerms, PaymentInstruction
from microledger.store.ledger import LedgerStore

logger = logging.getLogger(__name__)


class Sink(Protocol):
    def write_batch(self, entity_type: str, records: list[Any]) -> None: ...


class LedgerService:
    """Coordinate the engine with the ledger store.

    Each payment is a read-allocate-write cycle on one loan. A per-loan lock
    serializes these cycles inside the process, and the store's version
    check rejects writes based on a snapshot someone else has already
    replaced. Domain events are collected in ``outbox`` until published.

    Parameters
    ----------
    store : LedgerStore | None
        Backing store (a fresh in-memory store by default).
    config : EngineConfig
        Engine rounding and tolerance constants.
    id_factory : Callable[[], str]
        ID source for loans, installments and events.
    clock : Callable[[], datetime]
        Timestamp source for ``created_at``/``updated_at`` and events.
    """

    SOURCE = "microledger"

    def __init__(
        self,
        store: LedgerStore | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
        id_factory: Callable[[], str] = new_id,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store if store is not None else LedgerStore()
        self.config = config
        self.id_factory = id_factory
        self.clock = clock
        self.outbox: list[Event] = []
        self._outbox_lock = threading.Lock()
        # loan_id -> [lock, callers holding or waiting on it]
        self._loan_locks: dict[str, list[Any]] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _locked(self, loan_id: str) -> Iterator[None]:
        """Hold the loan's lock, dropping its registry entry once unused."""
        with self._locks_guard:
            entry = self._loan_locks.setdefault(loan_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._loan_locks[loan_id]

    def _emit(self, event_type: str, subject: str, data: dict) -> Event:
        event = Event(
            event_id=self.id_factory(),
            event_type=event_type,
            event_time=self.clock(),
            source=self.SOURCE,
            subject=subject,
            data=data,
        )
        with self._outbox_lock:
            self.outbox.append(event)
        return event

    def register_borrower(self, borrower: Borrower) -> Borrower:
        """Add a borrower to the store."""
        self.store.add_borrower(borrower)
        logger.debug(
            "Registered borrower %s",
            borrower.borrower_id,
            extra={"borrower_id": borrower.borrower_id},
        )
        return borrower

    def originate_loan(
        self,
        borrower_id: str,
        terms: LoanTerms,
        fund_source: str = "",
        observations: str = "",
    ) -> Loan:
        """Generate a schedule for ``terms`` and store the new loan.

        Raises
        ------
        BorrowerNotFoundError
            If the borrower is unknown.
        InvalidLoanParametersError
            If the terms produce no schedule.
        """
        self.store.get_borrower(borrower_id)

        loan = originate_loan(
            borrower_id,
            terms,
            fund_source=fund_source,
            observations=observations,
            created_at=self.clock(),
            id_factory=self.id_factory,
            config=self.config,
        )
        self.store.add_loan(loan)

        self._emit(
            "loan.created",
            loan.loan_id,
            {
                "borrower_id": borrower_id,
                "loan_type": loan.loan_type,
                "principal": loan.principal,
                "outstanding_balance": loan.outstanding_balance,
                "installments": len(loan.payment_schedule),
                "end_date": loan.end_date,
            },
        )
        logger.info(
            "Originated %s loan %s for borrower %s: principal=%s, installments=%d",
            loan.loan_type.value,
            loan.loan_id,
            borrower_id,
            loan.principal,
            len(loan.payment_schedule),
            extra={"loan_id": loan.loan_id},
        )
        return loan

    def register_payment(
        self,
        loan_id: str,
        instruction: PaymentInstruction,
        today: date | None = None,
    ) -> Loan:
        """Allocate a payment to a loan and persist the result in one write.

        Raises
        ------
        LoanNotFoundError
            If the loan is unknown.
        InvalidAmountError, NoPendingInstallmentError
            From the allocator; nothing is written.
        ConcurrentModificationError
            If the loan changed between read and write.
        """
        with self._locked(loan_id):
            loan, version = self.store.get_loan_snapshot(loan_id)
            updated = apply_payment(
                loan,
                instruction,
                today=today,
                config=self.config,
                id_factory=self.id_factory,
            )
            updated.updated_at = self.clock()
            self.store.save_loan(updated, version)

        self._emit(
            "payment.registered",
            loan_id,
            {
                "installment_id": instruction.installment_id,
                "amount_paid": instruction.amount_paid,
                "payment_date": instruction.payment_date,
                "payment_method": instruction.payment_method,
                "registered_by": instruction.registered_by,
                "observations": instruction.observations,
                "outstanding_balance": updated.outstanding_balance,
                "status": updated.status,
            },
        )
        if updated.status == LoanStatus.PAID and loan.status != LoanStatus.PAID:
            self._emit("loan.paid", loan_id, {"paid_on": instruction.payment_date})

        logger.info(
            "Registered payment of %s on loan %s: outstanding=%s, status=%s",
            instruction.amount_paid,
            loan_id,
            updated.outstanding_balance,
            updated.status.value,
            extra={"loan_id": loan_id},
        )
        return updated

    def cancel_loan(self, loan_id: str) -> Loan:
        """Mark a loan as cancelled."""
        with self._locked(loan_id):
            loan, version = self.store.get_loan_snapshot(loan_id)
            updated = cancel_loan(loan)
            updated.updated_at = self.clock()
            self.store.save_loan(updated, version)

        self._emit("loan.cancelled", loan_id, {"outstanding_balance": updated.outstanding_balance})
        logger.info("Cancelled loan %s", loan_id, extra={"loan_id": loan_id})
        return updated

    def refresh_overdue(self, loan_id: str, today: date) -> Loan:
        """Persist overdue status for past-due pending installments."""
        with self._locked(loan_id):
            loan, version = self.store.get_loan_snapshot(loan_id)
            updated = mark_overdue(loan, today)
            if updated.payment_schedule != loan.payment_schedule:
                updated.updated_at = self.clock()
                self.store.save_loan(updated, version)
        return updated

    def publish(self, sink: Sink) -> int:
        """Write pending events to a sink, one batch per event type.

        The outbox is swapped out before writing, so events emitted while
        the sink works wait for the next call. If the sink fails, the
        batches it did not accept go back to the front of the outbox.

        Returns
        -------
        int
            Number of events published.
        """
        with self._outbox_lock:
            pending, self.outbox = self.outbox, []

        by_type: dict[str, list[Event]] = defaultdict(list)
        for event in pending:
            by_type[event.event_type].append(event)

        batches = list(by_type.items())
        for index, (event_type, events) in enumerate(batches):
            try:
                sink.write_batch(event_type, events)
            except Exception:
                unsent = [event for _, rest in batches[index:] for event in rest]
                with self._outbox_lock:
                    self.outbox[:0] = unsent
                raise

        logger.debug("Published %d events", len(pending))
        return len(pending)
