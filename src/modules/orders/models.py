"""Order, OrderItem, and OrderStatusHistory models.

Business rules implemented:
- Status only moves along the edges in ``constants.TRANSITION_PERMISSIONS``
  (enforced at service layer, see ``state_machine``).
- Every status change generates a history record with the acting account.
- ``version`` is bumped by every transition; writes are conditioned on the
  expected ``(status, version)`` pair.
- Items and ``total_amount`` are fixed at creation.
- Orders are never deleted: terminal statuses are kept for audit.
- Idempotency via ``idempotency_key`` unique constraint.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import OrderStatus, PaymentMethod
from shared.domain.events import DomainEventMixin


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    Orders are displayed as ``#`` plus the first eight characters of the
    UUIDv7 ``id`` (``short_reference``).

    ``idempotency_key`` is nullable: only orders placed through the public
    API carry a client-provided key.
    """

    customer: models.ForeignKey = models.ForeignKey(
        "accounts.Account",
        on_delete=models.PROTECT,
        related_name="orders_placed",
    )
    manufacturer: models.ForeignKey = models.ForeignKey(
        "accounts.Account",
        on_delete=models.PROTECT,
        related_name="orders_received",
    )
    status: models.CharField = models.CharField(
        max_length=30,
        choices=OrderStatus.choices,
        default=OrderStatus.AWAITING_VERIFICATION,
    )
    payment_method: models.CharField = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
    )
    transaction_id: models.CharField = models.CharField(
        max_length=100, blank=True, default=""
    )
    account_name: models.CharField = models.CharField(
        max_length=255, blank=True, default=""
    )
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    version: models.PositiveIntegerField = models.PositiveIntegerField(default=0)
    idempotency_key: models.CharField = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(
                fields=["customer", "status"], name="orders_customer_status_idx"
            ),
            models.Index(
                fields=["manufacturer", "status"], name="orders_mfr_status_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                check=models.Q(total_amount__gte=0),
                name="orders_total_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def short_reference(self) -> str:
        return str(self.id)[:8]

    @property
    def item_count(self) -> int:
        """Units across all lines; what a delivery adds to ``total_sales``."""
        return sum(item.quantity for item in self.items.all())

    def __str__(self) -> str:
        return f"#{self.short_reference} ({self.status})"


class OrderItem(BaseModel):
    """Line item snapshotting a catalog product at checkout.

    The catalog is an external collaborator, so ``product_id`` is a plain
    UUID and ``product_name`` / ``unit_price`` are copies taken when the
    order was placed.  ``subtotal`` is always ``quantity * unit_price``.
    Items are written once and never updated.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="items",
    )
    product_id: models.UUIDField = models.UUIDField()
    product_name: models.CharField = models.CharField(
        max_length=255, blank=True, default=""
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )
    subtotal: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                check=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self._state.adding:
            raise ValidationError("Order items are immutable once created.")
        self.subtotal = self.quantity * self.unit_price
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_name or self.product_id} x{self.quantity} (${self.subtotal})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``old_status`` is ``None`` for the record written at placement.
    ``actor`` is the account that drove the change.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="status_history",
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=30,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(
        max_length=30,
        choices=OrderStatus.choices,
    )
    actor: models.ForeignKey = models.ForeignKey(
        "accounts.Account",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["order", "created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"
