"""Live dashboard state driven by the change feed.

A ``DashboardWatcher`` loads a dashboard once, subscribes to the channels
that dashboard depends on, and on ``sync()`` re-reads only the aggregates
named by the invalidation signals received since the previous sync.
Signals never carry state: every refresh goes back to the stores.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, FrozenSet, List, Tuple, Union
from uuid import UUID

import structlog

from modules.core import channels
from modules.dashboards.dtos import (
    AdminConsoleDTO,
    CustomerDashboardDTO,
    DashboardKind,
    ManufacturerHubDTO,
)
from modules.dashboards.projections import admin_view, customer_view, manufacturer_view
from shared.infrastructure.subscribers import CoalescingSubscriber, ResourceKey

if TYPE_CHECKING:
    from modules.accounts.dtos import AccountSummaryDTO
    from modules.dashboards.services import DashboardService
    from modules.disputes.dtos import ComplaintSummaryDTO
    from modules.orders.dtos import OrderSummaryDTO
    from shared.domain.bus import IChangeFeed, ISubscription

logger = structlog.get_logger(__name__)

Snapshot = Union[CustomerDashboardDTO, ManufacturerHubDTO, AdminConsoleDTO]


def channels_for(kind: DashboardKind, account_id: UUID) -> Tuple[str, ...]:
    """Channels a dashboard of ``kind`` owned by ``account_id`` listens on."""
    if kind == DashboardKind.CUSTOMER:
        orders = channels.customer_orders(account_id)
    elif kind == DashboardKind.MANUFACTURER:
        orders = channels.manufacturer_orders(account_id)
    else:
        return (
            channels.ALL_ORDERS,
            channels.ALL_COMPLAINTS,
            channels.ALL_ACCOUNTS,
            channels.user_notifications(account_id),
        )
    return (
        orders,
        channels.account(account_id),
        channels.user_notifications(account_id),
    )


class DashboardWatcher:
    """Keeps one dashboard's state converged with the stores.

    ``eager=True`` refreshes inside the publishing call; otherwise signals
    accumulate until ``sync()`` and a burst for one resource costs one read.
    """

    def __init__(
        self,
        feed: IChangeFeed,
        service: DashboardService,
        kind: DashboardKind,
        account_id: UUID,
        eager: bool = False,
    ) -> None:
        self.kind = DashboardKind(kind)
        self._service = service
        self._viewer: AccountSummaryDTO = service.viewer(self.kind, account_id)
        self._orders: Dict[str, OrderSummaryDTO] = {}
        self._complaints: Dict[str, ComplaintSummaryDTO] = {}
        self._accounts: Dict[str, AccountSummaryDTO] = {}
        self._unread = 0
        self.refetch_count = 0
        self._load()

        self._subscriber = CoalescingSubscriber(self._refetch, eager=eager)
        self._subscriptions: List[ISubscription] = [
            feed.subscribe(channel, self._subscriber)
            for channel in channels_for(self.kind, self._viewer.id)
        ]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def stale(self) -> bool:
        """``True`` while signals are waiting for a ``sync()``."""
        return bool(self._subscriber.pending)

    def sync(self) -> bool:
        """Apply pending invalidations; returns whether anything was re-read."""
        return self._subscriber.flush() is not None

    def snapshot(self) -> Snapshot:
        if self.kind == DashboardKind.CUSTOMER:
            return customer_view(self._viewer, self._orders.values(), self._unread)
        if self.kind == DashboardKind.MANUFACTURER:
            return manufacturer_view(self._viewer, self._orders.values(), self._unread)
        return admin_view(
            self._complaints.values(),
            self._accounts.values(),
            self._orders.values(),
            self._unread,
        )

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []

    def __enter__(self) -> DashboardWatcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load(self) -> None:
        viewer_id = self._viewer.id
        self._orders = {
            str(o.id): o for o in self._service.orders_for(self.kind, viewer_id)
        }
        if self.kind == DashboardKind.ADMIN:
            self._complaints = {str(c.id): c for c in self._service.complaints()}
            self._accounts = {str(a.id): a for a in self._service.accounts()}
        self._unread = self._service.unread(viewer_id)

    def _refetch(self, keys: FrozenSet[ResourceKey]) -> None:
        inbox_changed = False
        for resource_type, resource_id in keys:
            if resource_type == "order":
                self._orders[resource_id] = self._service.order(resource_id)
            elif resource_type == "complaint":
                self._complaints[resource_id] = self._service.complaint(resource_id)
            elif resource_type == "account":
                self._refetch_account(resource_id)
            elif resource_type in ("notification", "notification_inbox"):
                inbox_changed = True
        if inbox_changed:
            self._unread = self._service.unread(self._viewer.id)

        self.refetch_count += 1
        logger.info(
            "dashboard.refetched",
            kind=str(self.kind),
            account_id=str(self._viewer.id),
            resources=len(keys),
        )

    def _refetch_account(self, account_id: str) -> None:
        account = self._service.account(account_id)
        if str(account.id) == str(self._viewer.id):
            self._viewer = account
        if self.kind == DashboardKind.ADMIN:
            self._accounts[str(account.id)] = account
