"""Custom exception hierarchy for microledger."""


class LedgerError(Exception):
    """Base exception for all microledger errors."""


class InvalidLoanParametersError(LedgerError):
    """Raised when loan terms cannot produce a payment schedule."""


class PaymentError(LedgerError):
    """Base exception for payment allocation failures."""


class InvalidAmountError(PaymentError):
    """Raised when a payment amount is not a positive, finite number."""


class NoPendingInstallmentError(PaymentError):
    """Raised when a loan has no installment left to pay."""


class EntityNotFoundError(LedgerError):
    """Raised when a referenced entity does not exist."""


class LoanNotFoundError(EntityNotFoundError):
    """Raised when a loan ID is unknown to the store."""


class BorrowerNotFoundError(EntityNotFoundError):
    """Raised when a borrower ID is unknown to the store."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class ConcurrentModificationError(LedgerError):
    """Raised when a loan is written from a stale snapshot."""


class ConfigurationError(LedgerError):
    """Raised when configuration is invalid or missing."""


class SinkError(LedgerError):
    """Raised when a sink operation fails."""


class DuplicateEntityError(LedgerError):
    """Raised when an entity ID is already taken."""
