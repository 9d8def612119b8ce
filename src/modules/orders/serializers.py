"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import OrderStatus, PaymentMethod, RejectionReason
from modules.orders.models import Order, OrderItem, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class PlaceOrderItemSerializer(serializers.Serializer):
    """Validates a single priced line in a placement request."""

    product_id = serializers.UUIDField()
    product_name = serializers.CharField(required=False, default="", allow_blank=True)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    quantity = serializers.IntegerField(min_value=1)


class PlaceOrderSerializer(serializers.Serializer):
    """Validates the order placement payload; the customer is the caller."""

    manufacturer_id = serializers.UUIDField()
    items = PlaceOrderItemSerializer(many=True, allow_empty=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    transaction_id = serializers.CharField(required=False, allow_blank=True, default="")
    account_name = serializers.CharField(required=False, allow_blank=True, default="")


class VerifyPaymentSerializer(serializers.Serializer):
    approved = serializers.BooleanField()
    reason = serializers.ChoiceField(
        choices=RejectionReason.choices,
        default=RejectionReason.PAYMENT_NOT_RECEIVED,
    )


class AdvanceStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for order lines (price snapshot)."""

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "quantity",
            "unit_price",
            "subtotal",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    """Read serializer for order status history records."""

    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "actor_id",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items and history."""

    reference = serializers.CharField(source="short_reference", read_only=True)
    item_count = serializers.IntegerField(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "reference",
            "customer_id",
            "manufacturer_id",
            "status",
            "payment_method",
            "transaction_id",
            "account_name",
            "total_amount",
            "item_count",
            "version",
            "created_at",
            "updated_at",
            "items",
            "status_history",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists (no nested relations)."""

    reference = serializers.CharField(source="short_reference", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "reference",
            "customer_id",
            "manufacturer_id",
            "status",
            "payment_method",
            "total_amount",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
