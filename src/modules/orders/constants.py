"""Order domain constants.

Defines status choices and the order state machine: which edges exist and
which order party may drive each of them.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    AWAITING_VERIFICATION = "awaiting_verification", "Awaiting verification"
    PROCESSING = "processing", "Processing"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    DECLINED = "declined", "Declined"
    CANCELLED = "cancelled", "Cancelled"


class PaymentMethod(models.TextChoices):
    CARD = "card", "Card"
    BANK_TRANSFER = "bank_transfer", "Bank transfer"


class OrderParty(models.TextChoices):
    CUSTOMER = "customer", "Customer"
    MANUFACTURER = "manufacturer", "Manufacturer"


class RejectionReason(models.TextChoices):
    PAYMENT_NOT_RECEIVED = "payment_not_received", "Payment failed verification"
    ORDER_CANCELLED = "order_cancelled", "Order cancelled outright"


# (current, target) -> parties allowed to drive the edge
TRANSITION_PERMISSIONS: dict[tuple[str, str], frozenset[str]] = {
    (OrderStatus.AWAITING_VERIFICATION, OrderStatus.PROCESSING): frozenset(
        {OrderParty.MANUFACTURER}
    ),
    (OrderStatus.AWAITING_VERIFICATION, OrderStatus.DECLINED): frozenset(
        {OrderParty.MANUFACTURER}
    ),
    (OrderStatus.AWAITING_VERIFICATION, OrderStatus.CANCELLED): frozenset(
        {OrderParty.MANUFACTURER}
    ),
    (OrderStatus.PROCESSING, OrderStatus.SHIPPED): frozenset(
        {OrderParty.MANUFACTURER}
    ),
    (OrderStatus.SHIPPED, OrderStatus.DELIVERED): frozenset(
        {OrderParty.MANUFACTURER, OrderParty.CUSTOMER}
    ),
}

VALID_TRANSITIONS: dict[str, set[str]] = {status: set() for status in OrderStatus}
for _current, _target in TRANSITION_PERMISSIONS:
    VALID_TRANSITIONS[_current].add(_target)

TERMINAL_STATES: set[str] = {
    OrderStatus.DELIVERED,
    OrderStatus.DECLINED,
    OrderStatus.CANCELLED,
}

ACTIVE_STATES: set[str] = {
    OrderStatus.AWAITING_VERIFICATION,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
}

# Card payments are verified by the processor before the order exists.
INITIAL_STATUS_BY_PAYMENT: dict[str, str] = {
    PaymentMethod.CARD: OrderStatus.PROCESSING,
    PaymentMethod.BANK_TRANSFER: OrderStatus.AWAITING_VERIFICATION,
}

REJECTION_TARGETS: dict[str, str] = {
    RejectionReason.PAYMENT_NOT_RECEIVED: OrderStatus.DECLINED,
    RejectionReason.ORDER_CANCELLED: OrderStatus.CANCELLED,
}

# Targets reachable through ``advance_status``; payment outcomes go through
# ``verify_payment``.
ADVANCEABLE_TARGETS: set[str] = {OrderStatus.SHIPPED, OrderStatus.DELIVERED}
