"""Pytest configuration and fixtures."""

import itertools
from datetime import date, datetime
from decimal import Decimal
from typing import Callable

import pytest

from microledger.engine.schedule import originate_loan
from microledger.models import Borrower, BorrowerStatus, Loan, LoanTerms, LoanType, Periodicity


def make_id_factory(prefix: str = "id") -> Callable[[], str]:
    """Sequential IDs: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def id_factory() -> Callable[[], str]:
    return make_id_factory()


@pytest.fixture
def sample_borrower_id() -> str:
    """Sample borrower ID."""
    return "borrower-test-001"


@pytest.fixture
def sample_loan_id() -> str:
    """Sample loan ID."""
    return "loan-test-001"


@pytest.fixture
def sample_borrower(sample_borrower_id: str) -> Borrower:
    """Create a sample borrower."""
    return Borrower(
        borrower_id=sample_borrower_id,
        first_name="Ana",
        last_name="Gómez",
        id_number="1020304050",
        phone="3001234567",
        address="Calle 10 # 5-20",
        status=BorrowerStatus.ACTIVE,
        created_at=datetime(2023, 12, 1, 9, 0),
    )


@pytest.fixture
def amortized_terms() -> LoanTerms:
    """5000 at 10% a month over 12 monthly installments."""
    return LoanTerms(
        principal=Decimal("5000"),
        monthly_rate_percent=Decimal("10"),
        loan_type=LoanType.AMORTIZED,
        start_date=date(2024, 1, 1),
        installment_count=12,
        periodicity=Periodicity.MONTHLY,
    )


@pytest.fixture
def interest_only_terms() -> LoanTerms:
    """1 000 000 at 10% a month, interest only."""
    return LoanTerms(
        principal=Decimal("1000000"),
        monthly_rate_percent=Decimal("10"),
        loan_type=LoanType.INTEREST_ONLY,
        start_date=date(2024, 1, 1),
    )


@pytest.fixture
def amortized_loan(
    amortized_terms: LoanTerms,
    sample_borrower_id: str,
    sample_loan_id: str,
    id_factory: Callable[[], str],
) -> Loan:
    """Amortized loan whose installments are id-1 .. id-12."""
    return originate_loan(
        sample_borrower_id,
        amortized_terms,
        loan_id=sample_loan_id,
        created_at=datetime(2024, 1, 1, 10, 0),
        id_factory=id_factory,
    )


@pytest.fixture
def interest_only_loan(
    interest_only_terms: LoanTerms,
    sample_borrower_id: str,
    sample_loan_id: str,
    id_factory: Callable[[], str],
) -> Loan:
    """Interest-only loan whose first installment is id-1."""
    return originate_loan(
        sample_borrower_id,
        interest_only_terms,
        loan_id=sample_loan_id,
        created_at=datetime(2024, 1, 1, 10, 0),
        id_factory=id_factory,
    )
