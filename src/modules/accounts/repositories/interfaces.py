"""Account repository interface.

Extends ``IRepository[Account]`` with the ledger/counter primitives used
when an order is delivered.
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import Account


class IAccountRepository(IRepository["Account"]):
    """Repository contract for the Account aggregate."""

    @abstractmethod
    def add_ledger_entry(
        self,
        order_id: UUID,
        manufacturer_id: UUID,
        item_count: int,
        amount: Decimal,
    ) -> bool:
        """Insert the sales ledger row for ``order_id``.

        Returns ``False`` without writing when the order was already booked.
        """

    @abstractmethod
    def increment_sales(
        self, manufacturer_id: UUID, item_count: int, amount: Decimal
    ) -> int:
        """Atomically add to ``total_sales`` / ``revenue``; returns rows updated."""

    @abstractmethod
    def total_revenue(self) -> Decimal:
        """Sum of ``revenue`` across all manufacturer accounts."""
