"""Synthetic data generators for the ledger."""

from microledger.generators.borrower import BorrowerGenerator
from microledger.generators.loan import LoanTermsGenerator, PaymentBehavior

__all__ = ["BorrowerGenerator", "LoanTermsGenerator", "PaymentBehavior"]
