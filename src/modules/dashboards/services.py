"""Dashboard read service.

Pure read side: every method re-reads committed state from the stores
through the owning services and never writes.  ``DashboardWatcher`` uses
the per-aggregate loaders to refresh only what a signal names.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from modules.accounts.constants import AccountRole
from modules.accounts.dtos import AccountSummaryDTO
from modules.accounts.exceptions import RoleRequired
from modules.dashboards.dtos import (
    AdminConsoleDTO,
    CustomerDashboardDTO,
    DashboardKind,
    ManufacturerHubDTO,
)
from modules.dashboards.projections import admin_view, customer_view, manufacturer_view
from modules.disputes.dtos import ComplaintSummaryDTO
from modules.orders.dtos import OrderSummaryDTO

if TYPE_CHECKING:
    from modules.accounts.services import AccountService
    from modules.disputes.services import DisputeResolutionService
    from modules.notifications.services import NotificationService
    from modules.orders.services import OrderLifecycleService

ROLE_FOR_KIND = {
    DashboardKind.CUSTOMER: AccountRole.CUSTOMER,
    DashboardKind.MANUFACTURER: AccountRole.MANUFACTURER,
    DashboardKind.ADMIN: AccountRole.ADMIN,
}


class DashboardService:
    def __init__(
        self,
        order_service: OrderLifecycleService,
        dispute_service: DisputeResolutionService,
        account_service: AccountService,
        notification_service: NotificationService,
    ) -> None:
        self._orders = order_service
        self._disputes = dispute_service
        self._accounts = account_service
        self._notifications = notification_service

    # ------------------------------------------------------------------
    # Full snapshots
    # ------------------------------------------------------------------

    def customer_dashboard(self, account_id: UUID) -> CustomerDashboardDTO:
        account = self.viewer(DashboardKind.CUSTOMER, account_id)
        return customer_view(
            account,
            self.orders_for(DashboardKind.CUSTOMER, account.id),
            self.unread(account.id),
        )

    def manufacturer_hub(self, account_id: UUID) -> ManufacturerHubDTO:
        account = self.viewer(DashboardKind.MANUFACTURER, account_id)
        return manufacturer_view(
            account,
            self.orders_for(DashboardKind.MANUFACTURER, account.id),
            self.unread(account.id),
        )

    def admin_console(self, admin_id: UUID) -> AdminConsoleDTO:
        admin = self.viewer(DashboardKind.ADMIN, admin_id)
        return admin_view(
            self.complaints(),
            self.accounts(),
            self.orders_for(DashboardKind.ADMIN, admin.id),
            self.unread(admin.id),
        )

    # ------------------------------------------------------------------
    # Loaders
    # ------------------------------------------------------------------

    def viewer(self, kind: DashboardKind, account_id: UUID) -> AccountSummaryDTO:
        """The dashboard owner's account.

        Raises:
            AccountNotFound: unknown account.
            RoleRequired: the account cannot open this dashboard.
        """
        account = self._accounts.get_account(account_id)
        if account.role != ROLE_FOR_KIND[kind]:
            raise RoleRequired(f"Account {account_id} cannot open the {kind} dashboard.")
        return AccountSummaryDTO.from_entity(account)

    def orders_for(self, kind: DashboardKind, account_id: UUID) -> List[OrderSummaryDTO]:
        if kind == DashboardKind.ADMIN:
            orders = self._orders.list_orders()
        else:
            orders = self._orders.list_orders_for(account_id)
        return [OrderSummaryDTO.from_entity(order) for order in orders]

    def order(self, order_id: UUID) -> OrderSummaryDTO:
        return OrderSummaryDTO.from_entity(self._orders.get_order(str(order_id)))

    def complaints(self) -> List[ComplaintSummaryDTO]:
        return [ComplaintSummaryDTO.from_entity(c) for c in self._disputes.list_complaints()]

    def complaint(self, complaint_id: UUID) -> ComplaintSummaryDTO:
        return ComplaintSummaryDTO.from_entity(self._disputes.get_complaint(complaint_id))

    def accounts(self, role: Optional[str] = None) -> List[AccountSummaryDTO]:
        filters = {"role": role} if role else None
        return [AccountSummaryDTO.from_entity(a) for a in self._accounts.list_accounts(filters)]

    def account(self, account_id: UUID) -> AccountSummaryDTO:
        return AccountSummaryDTO.from_entity(self._accounts.get_account(account_id))

    def unread(self, account_id: UUID) -> int:
        return self._notifications.unread_count(account_id)


def build_dashboard_service() -> DashboardService:
    """Service wired to the Django ORM repositories."""
    from modules.accounts.services import build_account_service
    from modules.disputes.services import build_dispute_service
    from modules.notifications.services import build_notification_service
    from modules.orders.services import build_order_service

    return DashboardService(
        order_service=build_order_service(),
        dispute_service=build_dispute_service(),
        account_service=build_account_service(),
        notification_service=build_notification_service(),
    )
