"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``PlaceOrderItemDTO``: one priced line handed over by checkout.
- ``PlaceOrderDTO``: input for order placement (nested items).
- ``OrderSummaryDTO``: flat read model used by the dashboards.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, List, Optional, Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

if TYPE_CHECKING:
    from modules.orders.models import Order


# ---------------------------------------------------------------------------
# Enum (framework-agnostic, not Django TextChoices)
# ---------------------------------------------------------------------------


class PaymentMethodEnum(StrEnum):
    """How the customer paid at checkout."""

    CARD = "card"
    BANK_TRANSFER = "bank_transfer"


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class PlaceOrderItemDTO(BaseModel):
    """Immutable DTO for a single priced line.

    Checkout owns the catalog, so the price arrives already resolved and is
    stored as a snapshot.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    product_name: str = ""
    unit_price: Decimal
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v

    @field_validator("unit_price")
    @classmethod
    def price_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Unit price must be greater than zero.")
        return v.quantize(Decimal("0.01"))

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class PlaceOrderDTO(BaseModel):
    """Immutable DTO for order placement requests.

    Validates:
    - ``items`` must contain at least one item, without duplicate products.
    - bank transfers carry the ``transaction_id`` the manufacturer will
      verify against.
    - customer and manufacturer are different accounts.
    """

    model_config = ConfigDict(frozen=True)

    customer_id: UUID
    manufacturer_id: UUID
    items: List[PlaceOrderItemDTO]
    payment_method: PaymentMethodEnum
    transaction_id: Optional[str] = None
    account_name: Optional[str] = None
    idempotency_key: Optional[str] = None

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[PlaceOrderItemDTO]
    ) -> List[PlaceOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @field_validator("transaction_id", "account_name", mode="before")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str):
            v = v.strip()
        return v or None

    @model_validator(mode="after")
    def check_consistency(self) -> Self:
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("Duplicate product IDs are not allowed in the same order.")
        if (
            self.payment_method == PaymentMethodEnum.BANK_TRANSFER
            and not self.transaction_id
        ):
            raise ValueError("Bank transfer orders require a transaction_id.")
        if self.customer_id == self.manufacturer_id:
            raise ValueError("Customer and manufacturer must be different accounts.")
        return self

    @property
    def total_amount(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal("0.00"))


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderSummaryDTO(BaseModel):
    """Immutable row for dashboard order lists."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    reference: str
    customer_id: UUID
    manufacturer_id: UUID
    status: str
    payment_method: str
    total_amount: Decimal
    item_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> OrderSummaryDTO:
        """Build a summary from an Order; assumes ``items`` is prefetched."""
        return cls(
            id=order.id,
            reference=order.short_reference,
            customer_id=order.customer_id,
            manufacturer_id=order.manufacturer_id,
            status=order.status,
            payment_method=order.payment_method,
            total_amount=order.total_amount,
            item_count=order.item_count,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
