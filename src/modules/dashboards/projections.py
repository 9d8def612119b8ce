"""Pure projections from summaries to dashboard snapshots."""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List

from modules.accounts.constants import AccountRole, AccountStatus
from modules.accounts.dtos import AccountSummaryDTO
from modules.dashboards.dtos import (
    AdminConsoleDTO,
    CustomerDashboardDTO,
    CustomerStatsDTO,
    ManufacturerHubDTO,
)
from modules.disputes.constants import ComplaintStatus
from modules.disputes.dtos import ComplaintSummaryDTO
from modules.orders.constants import ACTIVE_STATES, OrderStatus
from modules.orders.dtos import OrderSummaryDTO


def _newest_first(rows: Iterable[OrderSummaryDTO]) -> List[OrderSummaryDTO]:
    return sorted(rows, key=lambda row: (row.created_at, str(row.id)), reverse=True)


def customer_view(
    account: AccountSummaryDTO, orders: Iterable[OrderSummaryDTO], unread: int
) -> CustomerDashboardDTO:
    mine = _newest_first(o for o in orders if o.customer_id == account.id)
    pending = [o for o in mine if o.status in ACTIVE_STATES]
    past = [o for o in mine if o.status not in ACTIVE_STATES]
    return CustomerDashboardDTO(
        account=account,
        pending_orders=pending,
        past_orders=past,
        delivered_count=sum(1 for o in past if o.status == OrderStatus.DELIVERED),
        active_count=len(pending),
        cancelled_count=sum(
            1 for o in past if o.status in (OrderStatus.CANCELLED, OrderStatus.DECLINED)
        ),
        unread_notifications=unread,
    )


def manufacturer_view(
    account: AccountSummaryDTO, orders: Iterable[OrderSummaryDTO], unread: int
) -> ManufacturerHubDTO:
    mine = _newest_first(o for o in orders if o.manufacturer_id == account.id)
    return ManufacturerHubDTO(
        account=account,
        pending_payments=[
            o for o in mine if o.status == OrderStatus.AWAITING_VERIFICATION
        ],
        active_orders=[
            o for o in mine if o.status in (OrderStatus.PROCESSING, OrderStatus.SHIPPED)
        ],
        completed_orders=[o for o in mine if o.status == OrderStatus.DELIVERED],
        total_sales=account.total_sales,
        revenue=account.revenue,
        unread_notifications=unread,
    )


def admin_view(
    complaints: Iterable[ComplaintSummaryDTO],
    accounts: Iterable[AccountSummaryDTO],
    orders: Iterable[OrderSummaryDTO],
    unread: int,
) -> AdminConsoleDTO:
    complaints = sorted(complaints, key=lambda c: c.created_at, reverse=True)
    accounts = sorted(accounts, key=lambda a: a.name.lower())

    counts: Dict = defaultdict(int)
    totals: Dict = defaultdict(lambda: Decimal("0.00"))
    for order in orders:
        counts[order.customer_id] += 1
        totals[order.customer_id] += order.total_amount

    return AdminConsoleDTO(
        open_complaints=[c for c in complaints if c.status == ComplaintStatus.OPEN],
        resolved_complaints=[
            c for c in complaints if c.status == ComplaintStatus.RESOLVED
        ],
        accounts=accounts,
        inactive_accounts=sum(1 for a in accounts if a.status == AccountStatus.INACTIVE),
        customer_stats=[
            CustomerStatsDTO(
                customer_id=customer_id,
                order_count=counts[customer_id],
                total_amount=totals[customer_id],
            )
            for customer_id in sorted(counts, key=str)
        ],
        platform_gmv=sum(
            (a.revenue for a in accounts if a.role == AccountRole.MANUFACTURER),
            Decimal("0.00"),
        ),
        unread_notifications=unread,
    )
