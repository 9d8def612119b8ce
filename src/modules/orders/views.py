"""Order API views.

Exposes the ``OrderLifecycleService`` via HTTP using DRF ViewSets.
Domain exceptions propagate to ``modules.core.api.exception_handler``,
which renders them with the right status and a message naming the
rejected transition.
"""

from __future__ import annotations

from django.db.models import Q, QuerySet
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.permissions import HasMarketplaceAccount, current_account
from modules.core.pagination import StandardResultsSetPagination
from modules.orders.dtos import PlaceOrderDTO, PlaceOrderItemDTO
from modules.orders.exceptions import NotOrderParty
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.serializers import (
    AdvanceStatusSerializer,
    OrderListSerializer,
    OrderSerializer,
    PlaceOrderSerializer,
    StatusHistorySerializer,
    VerifyPaymentSerializer,
)
from modules.orders.services import build_order_service


class OrderViewSet(GenericViewSet):
    """ViewSet for the order lifecycle.

    The acting account is the one linked to the authenticated user.
    Admins see every order; customers and manufacturers see their own.
    """

    queryset = Order.objects.all()
    permission_classes = [HasMarketplaceAccount]
    pagination_class = StandardResultsSetPagination
    filterset_class = OrderFilter
    search_fields = ["id", "customer__name", "manufacturer__name"]
    ordering_fields = ["created_at", "updated_at", "total_amount", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_throttles(self) -> list[BaseThrottle]:
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_placement"
        elif self.action in {"list", "retrieve", "active"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self) -> QuerySet[Order]:
        account = current_account(self.request)
        queryset = Order.objects.prefetch_related("items")
        if account.is_admin:
            return queryset
        return queryset.filter(Q(customer=account) | Q(manufacturer=account))

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Checkout hand-off.  An ``Idempotency-Key`` header makes retries
        return the order created by the first attempt.
        """
        serializer = PlaceOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dto = PlaceOrderDTO(
            customer_id=current_account(request).id,
            manufacturer_id=data["manufacturer_id"],
            items=[PlaceOrderItemDTO(**item) for item in data["items"]],
            payment_method=data["payment_method"],
            transaction_id=data.get("transaction_id"),
            account_name=data.get("account_name"),
            idempotency_key=request.headers.get("Idempotency-Key"),
        )
        order = self._service.place_order(dto)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/"""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        order = self._service.get_order(pk)
        self._ensure_visible(request, order)
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"])
    def active(self, request: Request) -> Response:
        """GET /api/v1/orders/active/: the caller's non-terminal orders."""
        orders = self._service.get_active_orders(current_account(request).id)
        return Response(OrderListSerializer(orders, many=True).data)

    @action(detail=True, methods=["get"])
    def history(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/history/"""
        order = self._service.get_order(pk)
        self._ensure_visible(request, order)
        entries = self._service.get_history(order.id)
        return Response(StatusHistorySerializer(entries, many=True).data)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"], url_path="verify-payment")
    def verify_payment(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/verify-payment/"""
        serializer = VerifyPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = self._service.verify_payment(
            order_id=pk,
            approved=serializer.validated_data["approved"],
            actor_id=current_account(request).id,
            reason=serializer.validated_data["reason"],
        )
        return Response(OrderSerializer(self._service.get_order(order.id)).data)

    @action(detail=True, methods=["post"])
    def advance(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/advance/"""
        serializer = AdvanceStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = self._service.advance_status(
            order_id=pk,
            target_status=serializer.validated_data["status"],
            actor_id=current_account(request).id,
        )
        return Response(OrderSerializer(self._service.get_order(order.id)).data)

    @staticmethod
    def _ensure_visible(request: Request, order: Order) -> None:
        account = current_account(request)
        if account.is_admin or account.id in (order.customer_id, order.manufacturer_id):
            return
        raise NotOrderParty(f"Account {account.id} is not a party to order {order.id}.")
