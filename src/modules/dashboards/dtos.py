"""Dashboard read models.

One immutable snapshot per dashboard.  They are built by the pure
functions in ``projections`` from already-fetched summaries, either in a
single request (``DashboardService``) or incrementally by a
``DashboardWatcher``.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from modules.accounts.dtos import AccountSummaryDTO
from modules.disputes.dtos import ComplaintSummaryDTO
from modules.orders.dtos import OrderSummaryDTO


class DashboardKind(StrEnum):
    CUSTOMER = "customer"
    MANUFACTURER = "manufacturer"
    ADMIN = "admin"


class CustomerDashboardDTO(BaseModel):
    """Customer profile: orders in flight, order history and counters."""

    model_config = ConfigDict(frozen=True)

    account: AccountSummaryDTO
    pending_orders: List[OrderSummaryDTO]
    past_orders: List[OrderSummaryDTO]
    delivered_count: int
    active_count: int
    cancelled_count: int
    unread_notifications: int


class ManufacturerHubDTO(BaseModel):
    """Manufacturer hub: payments to verify, work in progress, sales."""

    model_config = ConfigDict(frozen=True)

    account: AccountSummaryDTO
    pending_payments: List[OrderSummaryDTO]
    active_orders: List[OrderSummaryDTO]
    completed_orders: List[OrderSummaryDTO]
    total_sales: int
    revenue: Decimal
    unread_notifications: int


class CustomerStatsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    customer_id: UUID
    order_count: int
    total_amount: Decimal


class AdminConsoleDTO(BaseModel):
    """Admin console: complaint queue, account registry, platform totals."""

    model_config = ConfigDict(frozen=True)

    open_complaints: List[ComplaintSummaryDTO]
    resolved_complaints: List[ComplaintSummaryDTO]
    accounts: List[AccountSummaryDTO]
    inactive_accounts: int
    customer_stats: List[CustomerStatsDTO]
    platform_gmv: Decimal
    unread_notifications: int
