"""Borrower model."""

from dataclasses import dataclass
from datetime import datetime

from microledger.models.enums import BorrowerStatus


@dataclass
class Borrower:
    """Person holding one or more loans."""

    borrower_id: str
    first_name: str
    last_name: str
    id_number: str  # National ID document
    phone: str
    address: str
    status: BorrowerStatus
    created_at: datetime
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
