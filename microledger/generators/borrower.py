"""Borrower generator."""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Iterator

from microledger.generators.base import BaseGenerator
from microledger.models import Borrower, BorrowerStatus


class BorrowerGenerator(BaseGenerator):
    """Generate synthetic borrowers."""

    def generate(self) -> Borrower:
        """Generate a single borrower.

        Returns
        -------
        Borrower
            Generated borrower, always active.
        """
        days_ago = random.randint(0, 3 * 365)
        return Borrower(
            borrower_id=self.fake.uuid4(),
            first_name=self.fake.first_name(),
            last_name=self.fake.last_name(),
            id_number=self.fake.numerify("##########"),
            phone=self.fake.numerify("3#########"),
            address=self.fake.street_address(),
            status=BorrowerStatus.ACTIVE,
            created_at=datetime.now() - timedelta(days=days_ago),
        )

    def generate_batch(self, count: int) -> Iterator[Borrower]:
        """Generate multiple borrowers.

        Parameters
        ----------
        count : int
            Number of borrowers to generate.

        Yields
        ------
        Borrower
            Generated borrowers.
        """
        for _ in range(count):
            yield self.generate()
