"""Enumeration types for ledger entities."""

from enum import Enum


class BorrowerStatus(str, Enum):
    ACTIVE = "ACTIVE"
    DELINQUENT = "DELINQUENT"
    BLOCKED = "BLOCKED"
    FINISHED = "FINISHED"


class LoanType(str, Enum):
    AMORTIZED = "AMORTIZED"
    INTEREST_ONLY = "INTEREST_ONLY"
    FIXED_MONTHLY_INTEREST = "FIXED_MONTHLY_INTEREST"


class Periodicity(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"


class LoanStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAID = "PAID"
    DELINQUENT = "DELINQUENT"
    CANCELLED = "CANCELLED"


class InstallmentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    TRANSFER = "TRANSFER"
    DEPOSIT = "DEPOSIT"
    OTHER = "OTHER"
