"""Order repository interface.

Extends ``IRepository[Order]`` with methods required by the Order
aggregate: atomic creation with items, conditional status transitions,
status history tracking, and idempotency-key look-up.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes OrderItem children and
    OrderStatusHistory records.  Mutations must be atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` must include ``customer_id``, ``manufacturer_id``,
        ``status``, ``payment_method`` and ``items`` (list of dicts with
        ``product_id``, ``product_name``, ``quantity``, ``unit_price``);
        optionally ``transaction_id``, ``account_name`` and
        ``idempotency_key``.  Domain events already collected on the new
        order are not known yet, so callers ``save`` afterwards.
        """

    @abstractmethod
    def apply_transition(self, order: Order, new_status: str) -> bool:
        """Write ``new_status`` only if the stored row still has the
        ``status`` and ``version`` held by ``order``.

        Returns ``False`` when zero rows matched.  On success ``order`` is
        updated in place and its collected domain events are recorded.
        """

    @abstractmethod
    def add_history(
        self,
        order_id: UUID,
        new_status: str,
        old_status: Optional[str] = None,
        actor_id: Optional[UUID] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def list_history(self, order_id: UUID) -> List[OrderStatusHistory]:
        """Oldest-first audit trail of one order."""

    @abstractmethod
    def list_for_party(
        self, account_id: UUID, statuses: Optional[set[str]] = None
    ) -> List[Order]:
        """Orders where ``account_id`` is customer or manufacturer."""

    @abstractmethod
    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        """Retrieve an order by its idempotency key."""
