"""Shared serialization utilities for sinks and stored records."""

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from microledger.models import (
    Borrower,
    BorrowerStatus,
    Installment,
    InstallmentStatus,
    Loan,
    LoanStatus,
    LoanType,
    Periodicity,
)


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if is_dataclass(obj):
        return dataclass_to_dict(obj)
    elif isinstance(obj, dict):
        return obj
    else:
        return {"value": str(obj)}


def dataclass_to_dict(obj: Any) -> dict:
    """Convert dataclass to dict with proper serialization."""
    result = {}
    for key, value in asdict(obj).items():
        result[key] = serialize_value(value)
    return result


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def installment_from_dict(data: dict) -> Installment:
    """Rebuild an installment from its serialized form."""
    return Installment(
        installment_id=data["installment_id"],
        loan_id=data["loan_id"],
        due_date=date.fromisoformat(data["due_date"]),
        amount=Decimal(str(data["amount"])),
        amount_paid=Decimal(str(data.get("amount_paid") or "0")),
        paid_date=_parse_date(data.get("paid_date")),
        registered_by=data.get("registered_by"),
        status=InstallmentStatus(data.get("status", InstallmentStatus.PENDING.value)),
    )


def loan_from_dict(data: dict) -> Loan:
    """Rebuild a loan and its schedule from its serialized form."""
    periodicity = data.get("periodicity")
    installment_count = data.get("installment_count")
    return Loan(
        loan_id=data["loan_id"],
        borrower_id=data["borrower_id"],
        principal=Decimal(str(data["principal"])),
        monthly_rate_percent=Decimal(str(data["monthly_rate_percent"])),
        loan_type=LoanType(data["loan_type"]),
        installment_count=int(installment_count) if installment_count is not None else None,
        periodicity=Periodicity(periodicity) if periodicity else None,
        start_date=date.fromisoformat(data["start_date"]),
        end_date=_parse_date(data.get("end_date")),
        outstanding_balance=Decimal(str(data["outstanding_balance"])),
        status=LoanStatus(data["status"]),
        payment_schedule=[installment_from_dict(item) for item in data.get("payment_schedule", [])],
        fund_source=data.get("fund_source", ""),
        observations=data.get("observations", ""),
        created_at=_parse_datetime(data.get("created_at")),
        updated_at=_parse_datetime(data.get("updated_at")),
    )


def borrower_from_dict(data: dict) -> Borrower:
    """Rebuild a borrower from its serialized form."""
    return Borrower(
        borrower_id=data["borrower_id"],
        first_name=data["first_name"],
        last_name=data["last_name"],
        id_number=data["id_number"],
        phone=data["phone"],
        address=data["address"],
        status=BorrowerStatus(data["status"]),
        created_at=datetime.fromisoformat(data["created_at"]),
        updated_at=_parse_datetime(data.get("updated_at")),
    )
