"""Dashboards converging on committed state through the change feed.

Every scenario commits a write with ``django_capture_on_commit_callbacks``
so the outbox relay runs exactly as it does after a real commit.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.accounts.exceptions import RoleRequired
from modules.dashboards.dtos import DashboardKind
from modules.dashboards.services import build_dashboard_service
from modules.dashboards.watcher import DashboardWatcher, channels_for
from modules.disputes.dtos import FileComplaintDTO
from modules.disputes.services import build_dispute_service
from modules.notifications.services import build_notification_service
from modules.orders.constants import OrderStatus

pytestmark = pytest.mark.unit


@pytest.fixture()
def dashboards():
    return build_dashboard_service()


@pytest.fixture()
def watch(change_feed, dashboards):
    opened = []

    def _watch(kind, account, eager=False):
        watcher = DashboardWatcher(change_feed, dashboards, kind, account.id, eager=eager)
        opened.append(watcher)
        return watcher

    yield _watch
    for watcher in opened:
        watcher.close()


@pytest.fixture()
def committed(django_capture_on_commit_callbacks):
    """Run a callable and relay what it committed."""

    def _run(func, *args, **kwargs):
        with django_capture_on_commit_callbacks(execute=True):
            return func(*args, **kwargs)

    return _run


class TestCustomerDashboard:
    def test_payment_approval_reaches_customer(
        self, watch, committed, order_service, place_order, customer, manufacturer
    ):
        order = place_order()
        watcher = watch(DashboardKind.CUSTOMER, customer)
        assert watcher.snapshot().pending_orders[0].status == "awaiting_verification"

        committed(order_service.verify_payment, order.id, True, manufacturer.id)

        assert watcher.stale
        assert watcher.sync() is True
        snapshot = watcher.snapshot()
        assert snapshot.pending_orders[0].status == "processing"
        assert snapshot.unread_notifications == 1
        assert watcher.refetch_count == 1
        assert not watcher.stale

    def test_new_order_appears(self, watch, committed, place_order, customer):
        watcher = watch(DashboardKind.CUSTOMER, customer)
        assert watcher.snapshot().active_count == 0

        order = committed(place_order, "card")
        watcher.sync()

        assert [o.id for o in watcher.snapshot().pending_orders] == [order.id]

    def test_burst_on_one_order_is_one_refetch(
        self, watch, committed, order_service, place_order, customer, manufacturer
    ):
        order = place_order()
        watcher = watch(DashboardKind.CUSTOMER, customer)

        committed(order_service.verify_payment, order.id, True, manufacturer.id)
        committed(order_service.advance_status, order.id, OrderStatus.SHIPPED, manufacturer.id)
        watcher.sync()

        assert watcher.refetch_count == 1
        assert watcher.snapshot().pending_orders[0].status == "shipped"

    def test_eager_watcher_needs_no_sync(
        self, watch, committed, order_service, place_order, customer, manufacturer
    ):
        order = place_order("card")
        watcher = watch(DashboardKind.CUSTOMER, customer, eager=True)

        committed(order_service.advance_status, order.id, OrderStatus.SHIPPED, manufacturer.id)

        assert not watcher.stale
        assert watcher.snapshot().pending_orders[0].status == "shipped"

    def test_unrelated_orders_do_not_wake_the_dashboard(
        self, watch, committed, order_service, place_order, customer, manufacturer,
        other_customer,
    ):
        order = place_order("card")
        watcher = watch(DashboardKind.CUSTOMER, other_customer)

        committed(order_service.advance_status, order.id, OrderStatus.SHIPPED, manufacturer.id)

        assert not watcher.stale
        assert watcher.sync() is False

    def test_mark_all_read_resets_unread(
        self, watch, committed, order_service, place_order, customer, manufacturer
    ):
        order = place_order()
        committed(order_service.verify_payment, order.id, True, manufacturer.id)
        watcher = watch(DashboardKind.CUSTOMER, customer)
        assert watcher.snapshot().unread_notifications == 1

        committed(build_notification_service().mark_all_read, customer.id)
        watcher.sync()

        assert watcher.snapshot().unread_notifications == 0


class TestManufacturerHub:
    def test_delivery_updates_sales(
        self, watch, committed, order_service, place_order, customer, manufacturer
    ):
        order = place_order("card")
        order_service.advance_status(order.id, OrderStatus.SHIPPED, manufacturer.id)
        watcher = watch(DashboardKind.MANUFACTURER, manufacturer)
        assert watcher.snapshot().revenue == Decimal("0.00")

        committed(order_service.advance_status, order.id, OrderStatus.DELIVERED, customer.id)
        watcher.sync()

        snapshot = watcher.snapshot()
        assert snapshot.total_sales == 3
        assert snapshot.revenue == Decimal("150.00")
        assert [o.id for o in snapshot.completed_orders] == [order.id]
        assert snapshot.active_orders == []


class TestAdminConsole:
    def test_complaint_lifecycle(
        self, watch, committed, admin_account, customer, manufacturer
    ):
        disputes = build_dispute_service()
        watcher = watch(DashboardKind.ADMIN, admin_account)

        complaint = committed(
            disputes.file_complaint,
            FileComplaintDTO(
                from_user_id=customer.id,
                to_user_id=manufacturer.id,
                subject="Late delivery",
                message="Two weeks late.",
            ),
        )
        watcher.sync()
        assert [c.id for c in watcher.snapshot().open_complaints] == [complaint.id]

        committed(disputes.restrict_account, complaint.id, admin_account.id)
        committed(disputes.resolve, complaint.id, admin_account.id)
        watcher.sync()

        snapshot = watcher.snapshot()
        assert snapshot.open_complaints == []
        assert [c.id for c in snapshot.resolved_complaints] == [complaint.id]
        assert snapshot.inactive_accounts == 1


class TestWatcherLifecycle:
    def test_close_unsubscribes(self, change_feed, dashboards, customer):
        watcher = DashboardWatcher(change_feed, dashboards, DashboardKind.CUSTOMER, customer.id)
        channels = channels_for(DashboardKind.CUSTOMER, customer.id)
        assert all(change_feed.subscriber_count(c) == 1 for c in channels)

        with watcher:
            pass

        assert all(change_feed.subscriber_count(c) == 0 for c in channels)

    def test_wrong_dashboard_for_role(self, change_feed, dashboards, customer):
        with pytest.raises(RoleRequired):
            DashboardWatcher(change_feed, dashboards, DashboardKind.MANUFACTURER, customer.id)

    def test_snapshot_matches_fresh_read(
        self, watch, committed, order_service, place_order, customer, manufacturer, dashboards
    ):
        order = place_order()
        watcher = watch(DashboardKind.CUSTOMER, customer)
        committed(order_service.verify_payment, order.id, False, manufacturer.id)
        watcher.sync()

        assert watcher.snapshot() == dashboards.customer_dashboard(customer.id)
