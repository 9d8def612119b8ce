"""Order lifecycle service layer (Use Cases).

Orchestrates order placement and every status transition.  All write
operations are atomic: the service defines the unit-of-work boundary, so a
transition commits together with its history record, its notifications,
its sales booking and its outbox rows, or not at all.

Business rules enforced:
- Only active accounts may place orders or drive transitions.
- Only the order's customer or manufacturer may drive a transition, and
  only along the edges that party is allowed on.
- Each transition is validated against the state read under a row lock
  and written conditionally on ``(status, version)``.
- Entering ``delivered`` books the order into the manufacturer's
  ``total_sales`` / ``revenue`` exactly once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple
from uuid import UUID

import structlog

from modules.accounts.constants import AccountRole
from modules.accounts.exceptions import RoleRequired
from modules.core import channels
from modules.core.db import unit_of_work
from modules.notifications.constants import NotificationType
from modules.orders.constants import (
    ACTIVE_STATES,
    ADVANCEABLE_TARGETS,
    INITIAL_STATUS_BY_PAYMENT,
    OrderParty,
    OrderStatus,
    RejectionReason,
)
from modules.orders.events import OrderPlaced, OrderStatusChanged
from modules.orders.exceptions import (
    InvalidOrderStatus,
    NotOrderParty,
    OrderNotFound,
    StaleOrder,
)
from modules.orders.state_machine import check_transition, party_of, payment_outcome

if TYPE_CHECKING:
    from modules.accounts.models import Account
    from modules.accounts.services import AccountService
    from modules.notifications.services import NotificationService
    from modules.orders.dtos import PlaceOrderDTO
    from modules.orders.models import Order, OrderStatusHistory
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

PAYMENT_MESSAGES: Dict[str, Tuple[str, str]] = {
    OrderStatus.PROCESSING: (
        "Payment Approved",
        "Payment for Order #{ref} has been verified. Your order is now being processed.",
    ),
    OrderStatus.DECLINED: (
        "Payment Declined",
        "Payment for Order #{ref} could not be verified and the order was declined.",
    ),
    OrderStatus.CANCELLED: (
        "Order Cancelled",
        "Order #{ref} has been cancelled by the manufacturer.",
    ),
}

ADVANCE_MESSAGES: Dict[str, Tuple[str, str]] = {
    OrderStatus.SHIPPED: (
        "Order Shipped",
        "Order #{ref} has been shipped and is on its way.",
    ),
    OrderStatus.DELIVERED: (
        "Order Delivered",
        "Order #{ref} was marked as delivered by the {party}.",
    ),
}


def order_channels(order: Order) -> Tuple[str, ...]:
    """Every channel a change to ``order`` must be signalled on."""
    return (
        channels.order(order.id),
        channels.customer_orders(order.customer_id),
        channels.manufacturer_orders(order.manufacturer_id),
        channels.ALL_ORDERS,
    )


class OrderLifecycleService:
    """Application service for the order lifecycle.

    Receives its repository and collaborating services via constructor
    injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        account_service: AccountService,
        notification_service: NotificationService,
    ) -> None:
        self._order_repo = order_repository
        self._accounts = account_service
        self._notifications = notification_service

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @unit_of_work
    def place_order(self, dto: PlaceOrderDTO) -> Order:
        """Create an order handed over by checkout.

        Card orders start in ``processing`` (the processor already verified
        the payment); bank transfers start in ``awaiting_verification``.
        The manufacturer is notified of the new order.

        Raises:
            AccountNotFound: customer or manufacturer does not exist.
            InactiveAccount: either account is restricted.
            RoleRequired: the accounts do not have the expected roles.
        """
        log = logger.bind(
            customer_id=str(dto.customer_id),
            manufacturer_id=str(dto.manufacturer_id),
        )

        if dto.idempotency_key:
            existing = self._order_repo.get_by_idempotency_key(dto.idempotency_key)
            if existing:
                log.info(
                    "order.idempotency_hit",
                    order_id=str(existing.id),
                    key=dto.idempotency_key,
                )
                return existing

        customer = self._accounts.require_active(dto.customer_id)
        if customer.role != AccountRole.CUSTOMER:
            raise RoleRequired(f"Account {dto.customer_id} is not a customer.")
        manufacturer = self._accounts.require_active(dto.manufacturer_id)
        if manufacturer.role != AccountRole.MANUFACTURER:
            raise RoleRequired(f"Account {dto.manufacturer_id} is not a manufacturer.")

        status = INITIAL_STATUS_BY_PAYMENT[dto.payment_method]
        order = self._order_repo.create(
            {
                "customer_id": customer.id,
                "manufacturer_id": manufacturer.id,
                "status": status,
                "payment_method": dto.payment_method,
                "transaction_id": dto.transaction_id,
                "account_name": dto.account_name,
                "idempotency_key": dto.idempotency_key,
                "items": [
                    {
                        "product_id": item.product_id,
                        "product_name": item.product_name,
                        "quantity": item.quantity,
                        "unit_price": item.unit_price,
                    }
                    for item in dto.items
                ],
            }
        )
        order.add_domain_event(
            OrderPlaced(aggregate_id=order.id, channels=order_channels(order))
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            new_status=status,
            actor_id=customer.id,
            notes="Order placed",
        )

        units = sum(item.quantity for item in dto.items)
        self._notifications.notify(
            manufacturer.id,
            "New Order Received!",
            f"Order #{order.short_reference} placed with {units} items.",
            NotificationType.ORDER,
        )

        log.info(
            "order.placed",
            order_id=str(order.id),
            status=status,
            payment_method=dto.payment_method,
            total_amount=str(order.total_amount),
        )
        return self._order_repo.get_by_id(str(order.id)) or order

    @unit_of_work
    def verify_payment(
        self,
        order_id: UUID,
        approved: bool,
        actor_id: UUID,
        reason: str = RejectionReason.PAYMENT_NOT_RECEIVED,
    ) -> Order:
        """Manufacturer decision on a bank-transfer payment.

        Approval moves the order to ``processing``.  Rejection moves it to
        ``declined`` (``PAYMENT_NOT_RECEIVED``) or ``cancelled``
        (``ORDER_CANCELLED``).  The customer is notified of the outcome.
        A repeated call after the order has moved on fails; nothing is
        deduplicated silently.

        Raises:
            OrderNotFound: order does not exist.
            NotOrderParty / ActorNotPermitted / InactiveAccount: actor may
                not verify this order's payment.
            InvalidOrderStatus: order is not awaiting verification.
            StaleOrder: order changed concurrently.
        """
        target = payment_outcome(approved, reason)
        order, old_status, _ = self._transition(
            order_id,
            target,
            actor_id,
            notes="Payment approved" if approved else f"Payment rejected: {reason}",
        )

        title, message = PAYMENT_MESSAGES[target]
        self._notifications.notify(
            order.customer_id,
            title,
            message.format(ref=order.short_reference),
            NotificationType.PAYMENT,
        )
        logger.info(
            "order.payment_verified",
            order_id=str(order.id),
            approved=approved,
            reason=None if approved else reason,
            old_status=old_status,
            new_status=order.status,
        )
        return order

    @unit_of_work
    def advance_status(
        self, order_id: UUID, target_status: str, actor_id: UUID
    ) -> Order:
        """Move an order to ``shipped`` or ``delivered``.

        The counterparty of the actor is notified.  Entering ``delivered``
        books the order's units and total into the manufacturer's sales in
        the same transaction.

        Raises:
            OrderNotFound: order does not exist.
            NotOrderParty / ActorNotPermitted / InactiveAccount: actor may
                not drive this edge.
            InvalidOrderStatus: target is not reachable from the current
                status through this operation.
            StaleOrder: order changed concurrently.
        """
        order, old_status, party = self._transition(
            order_id, target_status, actor_id, allowed_targets=ADVANCEABLE_TARGETS
        )

        if order.status == OrderStatus.DELIVERED:
            booked = self._accounts.record_delivery(
                order_id=order.id,
                manufacturer_id=order.manufacturer_id,
                item_count=order.item_count,
                amount=order.total_amount,
            )
            if not booked:
                raise StaleOrder(f"Order {order.id} has already been booked as delivered.")

        counterparty = (
            order.manufacturer_id if party == OrderParty.CUSTOMER else order.customer_id
        )
        title, message = ADVANCE_MESSAGES[order.status]
        self._notifications.notify(
            counterparty,
            title,
            message.format(ref=order.short_reference, party=party),
            NotificationType.ORDER,
        )
        logger.info(
            "order.status_advanced",
            order_id=str(order.id),
            actor_party=party,
            old_status=old_status,
            new_status=order.status,
        )
        return order

    def _transition(
        self,
        order_id: UUID,
        target: str,
        actor_id: UUID,
        notes: str = "",
        allowed_targets: Optional[set[str]] = None,
    ) -> Tuple[Order, str, str]:
        """Lock, validate and conditionally write one transition.

        Returns the updated order, its previous status and the actor's
        party.  Must run inside the caller's unit of work.
        """
        actor = self._accounts.require_active(actor_id)
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")

        subject = f"order #{order.short_reference}"
        log = logger.bind(
            order_id=str(order.id),
            current_status=order.status,
            requested_status=target,
            actor_id=str(actor.id),
        )

        party = self._party(order, actor)
        if allowed_targets is not None and target not in allowed_targets:
            log.warning("order.invalid_transition")
            raise InvalidOrderStatus(
                requested=target,
                current=order.status,
                reason="only shipped or delivered can be requested here",
                subject=subject,
            )
        try:
            check_transition(order.status, target, party, subject=subject)
        except InvalidOrderStatus:
            log.warning("order.invalid_transition")
            raise

        old_status = order.status
        order.add_domain_event(
            OrderStatusChanged(aggregate_id=order.id, channels=order_channels(order))
        )
        if not self._order_repo.apply_transition(order, target):
            raise StaleOrder(
                f"Order {order.id} changed while moving from {old_status} to {target}; "
                "re-read it and try again."
            )
        self._order_repo.add_history(
            order_id=order.id,
            new_status=target,
            old_status=old_status,
            actor_id=actor.id,
            notes=notes,
        )
        return order, old_status, party

    @staticmethod
    def _party(order: Order, actor: Account) -> str:
        party = party_of(order.customer_id, order.manufacturer_id, actor.id)
        if party is None:
            raise NotOrderParty(
                f"Account {actor.id} is not a party to order {order.id}."
            )
        return party

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        return self._order_repo.list(filters)

    def get_active_orders(self, account_id: UUID) -> List[Order]:
        """Non-terminal orders where the account is customer or manufacturer.

        Reads committed state straight from the store.

        Raises:
            AccountNotFound: unknown account.
        """
        account = self._accounts.require_account(account_id)
        return self._order_repo.list_for_party(account.id, statuses=ACTIVE_STATES)

    def list_orders_for(
        self, account_id: UUID, statuses: Optional[set[str]] = None
    ) -> List[Order]:
        return self._order_repo.list_for_party(account_id, statuses=statuses)

    def get_history(self, order_id: UUID) -> List[OrderStatusHistory]:
        """Oldest-first status history of one order.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self.get_order(str(order_id))
        return self._order_repo.list_history(order.id)


def build_order_service() -> OrderLifecycleService:
    """Service wired to the Django ORM repositories."""
    from modules.accounts.services import build_account_service
    from modules.notifications.services import build_notification_service
    from modules.orders.repositories import OrderDjangoRepository

    return OrderLifecycleService(
        order_repository=OrderDjangoRepository(),
        account_service=build_account_service(),
        notification_service=build_notification_service(),
    )
