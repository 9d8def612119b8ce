"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.

Concurrency control on status changes is two-layered: the service reads
the row with ``select_for_update()`` and the write is an ``UPDATE ...
WHERE status = %s AND version = %s``, so a transition is never applied
against a state other than the one it was validated against.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from modules.core.outbox import record_events
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


def _next_timestamp(previous: Optional[datetime]) -> datetime:
    """``now()``, nudged forward if the clock has not moved past ``previous``."""
    now = timezone.now()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        order = Order(
            customer_id=data["customer_id"],
            manufacturer_id=data["manufacturer_id"],
            status=data["status"],
            payment_method=data["payment_method"],
            transaction_id=data.get("transaction_id") or "",
            account_name=data.get("account_name") or "",
            idempotency_key=data.get("idempotency_key"),
        )
        order.save()

        total = Decimal("0.00")
        items = data.get("items", [])
        for item_data in items:
            item = OrderItem(
                order=order,
                product_id=item_data["product_id"],
                product_name=item_data.get("product_name", ""),
                quantity=item_data["quantity"],
                unit_price=item_data["unit_price"],
            )
            item.save()
            total += item.subtotal

        order.total_amount = total
        order.save(update_fields=["total_amount"])

        logger.info("order.persisted", order_id=str(order.id), line_count=len(items))
        return order

    # ------------------------------------------------------------------
    # Conditional transition
    # ------------------------------------------------------------------

    @transaction.atomic
    def apply_transition(self, order: Order, new_status: str) -> bool:
        updated_at = _next_timestamp(order.updated_at)
        rows = Order.objects.filter(
            id=order.id, status=order.status, version=order.version
        ).update(
            status=new_status,
            version=F("version") + 1,
            updated_at=updated_at,
        )
        if not rows:
            logger.warning(
                "order.conditional_update_missed",
                order_id=str(order.id),
                expected_status=order.status,
                expected_version=order.version,
            )
            return False

        order.status = new_status
        order.version += 1
        order.updated_at = updated_at
        record_events(order, topic="orders")
        return True

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded items and status history.

        Returns ``None`` for non-existent or malformed IDs.
        """
        try:
            return (
                Order.objects.prefetch_related("items", "status_history")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Only the order row is locked; items are read lazily since they
        never change after placement.
        """
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        queryset = Order.objects.prefetch_related("items")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_for_party(
        self, account_id: UUID, statuses: Optional[set[str]] = None
    ) -> List[Order]:
        queryset = Order.objects.prefetch_related("items").filter(
            Q(customer_id=account_id) | Q(manufacturer_id=account_id)
        )
        if statuses is not None:
            queryset = queryset.filter(status__in=statuses)
        return list(queryset)

    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        return (
            Order.objects.prefetch_related("items", "status_history")
            .filter(idempotency_key=key)
            .first()
        )

    # ------------------------------------------------------------------
    # Save (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist an order and its pending domain events."""
        entity.save()
        rows = record_events(entity, topic="orders")
        logger.info("order.saved", order_id=str(entity.id), event_count=len(rows))
        return entity

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def add_history(
        self,
        order_id: UUID,
        new_status: str,
        old_status: Optional[str] = None,
        actor_id: Optional[UUID] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
            actor_id=actor_id,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=new_status,
        )
        return history

    def list_history(self, order_id: UUID) -> List[OrderStatusHistory]:
        return list(OrderStatusHistory.objects.filter(order_id=order_id))
