"""Tests for serialization helpers."""

import json
from datetime import date, datetime
from decimal import Decimal

from microledger.engine.allocation import apply_payment
from microledger.models import Borrower, InstallmentStatus, Loan, LoanStatus, PaymentInstruction, Periodicity
from microledger.sinks.serialization import (
    borrower_from_dict,
    loan_from_dict,
    serialize_value,
    to_dict,
)


class TestSerializeValue:
    """Tests for serialize_value."""

    def test_decimal_keeps_precision(self) -> None:
        assert serialize_value(Decimal("1099999.50")) == "1099999.50"

    def test_enum_and_dates(self) -> None:
        assert serialize_value(Periodicity.BIWEEKLY) == "BIWEEKLY"
        assert serialize_value(date(2024, 2, 29)) == "2024-02-29"
        assert serialize_value(datetime(2024, 2, 1, 12, 30)) == "2024-02-01T12:30:00"

    def test_nested_containers(self) -> None:
        value = {"amounts": (Decimal("1"), Decimal("2.5")), "status": LoanStatus.PAID}

        assert serialize_value(value) == {"amounts": ["1", "2.5"], "status": "PAID"}

    def test_plain_values_pass_through(self) -> None:
        assert serialize_value(None) is None
        assert serialize_value(3) == 3


class TestToDict:
    """Tests for to_dict."""

    def test_loan_is_json_ready(self, amortized_loan: Loan) -> None:
        data = to_dict(amortized_loan)

        assert json.loads(json.dumps(data)) == data
        assert data["periodicity"] == "MONTHLY"
        assert data["end_date"] == "2025-01-01"
        assert data["payment_schedule"][-1]["amount"] == "1100.00"

    def test_borrower_fields(self, sample_borrower: Borrower) -> None:
        data = to_dict(sample_borrower)

        assert data["status"] == "ACTIVE"
        assert data["created_at"] == "2023-12-01T09:00:00"

    def test_non_dataclass(self) -> None:
        assert to_dict({"a": 1}) == {"a": 1}
        assert to_dict(5) == {"value": "5"}


class TestFromDict:
    """Tests for rebuilding records."""

    def test_loan_round_trip_after_payment(self, amortized_loan: Loan) -> None:
        loan = apply_payment(
            amortized_loan,
            PaymentInstruction(
                installment_id="id-1",
                amount_paid=Decimal("1300"),
                payment_date=date(2024, 2, 3),
                registered_by="cajero@example.com",
            ),
            today=date(2024, 2, 3),
        )

        rebuilt = loan_from_dict(json.loads(json.dumps(to_dict(loan))))

        assert rebuilt == loan
        assert rebuilt.payment_schedule[0].status == InstallmentStatus.PAID
        assert rebuilt.payment_schedule[1].amount_paid == Decimal("400")
        assert rebuilt.payment_schedule[1].paid_date == date(2024, 2, 3)

    def test_interest_only_loan_without_count(self, interest_only_loan: Loan) -> None:
        rebuilt = loan_from_dict(to_dict(interest_only_loan))

        assert rebuilt.installment_count is None
        assert rebuilt.periodicity is None
        assert rebuilt.end_date is None

    def test_borrower(self, sample_borrower: Borrower) -> None:
        assert borrower_from_dict(to_dict(sample_borrower)) == sample_borrower
