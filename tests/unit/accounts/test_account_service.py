"""Unit tests for AccountService: status toggling, sales booking and guards."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.accounts.constants import AccountRole, AccountStatus
from modules.accounts.exceptions import AccountNotFound, InactiveAccount, RoleRequired
from modules.accounts.models import SalesLedgerEntry
from modules.accounts.services import build_account_service
from modules.core.models import OutboxEvent

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return build_account_service()


class TestToggleStatus:
    def test_toggle_deactivates(self, service, customer):
        account = service.toggle_status(customer.id)
        assert account.status == AccountStatus.INACTIVE
        customer.refresh_from_db()
        assert customer.status == AccountStatus.INACTIVE

    def test_second_toggle_restores(self, service, customer):
        service.toggle_status(customer.id)
        account = service.toggle_status(customer.id)
        assert account.status == AccountStatus.ACTIVE

    def test_toggle_records_account_change(self, service, customer):
        service.toggle_status(customer.id)
        row = OutboxEvent.objects.get(event_type="AccountStatusToggled")
        assert row.aggregate_id == str(customer.id)
        assert f"account:{customer.id}" in row.payload["channels"]
        assert "accounts" in row.payload["channels"]

    def test_unknown_account(self, service):
        with pytest.raises(AccountNotFound):
            service.toggle_status(uuid4())


class TestRecordDelivery:
    def test_books_once_per_order(self, service, place_order, manufacturer):
        order = place_order("card")

        assert service.record_delivery(order.id, manufacturer.id, 3, Decimal("150.00"))
        assert not service.record_delivery(order.id, manufacturer.id, 3, Decimal("150.00"))

        manufacturer.refresh_from_db()
        assert manufacturer.total_sales == 3
        assert manufacturer.revenue == Decimal("150.00")
        assert SalesLedgerEntry.objects.count() == 1

    def test_signals_manufacturer_sales(self, service, place_order, manufacturer):
        order = place_order("card")
        service.record_delivery(order.id, manufacturer.id, 3, Decimal("150.00"))
        row = OutboxEvent.objects.get(event_type="ManufacturerSalesRecorded")
        assert row.aggregate_id == str(manufacturer.id)

    def test_platform_gmv_sums_manufacturers(self, service, place_order, manufacturer):
        order = place_order("card")
        service.record_delivery(order.id, manufacturer.id, 3, Decimal("150.00"))
        assert service.platform_gmv() == Decimal("150.00")

    def test_platform_gmv_without_sales(self, service):
        assert service.platform_gmv() == Decimal("0.00")


class TestGuards:
    def test_require_account_unknown(self, service):
        with pytest.raises(AccountNotFound):
            service.require_account(uuid4())

    def test_require_active_rejects_restricted(self, service, make_account):
        account = make_account(status=AccountStatus.INACTIVE)
        with pytest.raises(InactiveAccount):
            service.require_active(account.id)

    def test_require_admin(self, service, admin_account, customer):
        assert service.require_admin(admin_account.id) == admin_account
        with pytest.raises(RoleRequired):
            service.require_admin(customer.id)

    def test_restricted_admin_cannot_act(self, service, make_account):
        admin = make_account(AccountRole.ADMIN, status=AccountStatus.INACTIVE)
        with pytest.raises(InactiveAccount):
            service.require_admin(admin.id)

    def test_list_accounts_by_role(self, service, customer, manufacturer, admin_account):
        manufacturers = service.list_accounts({"role": AccountRole.MANUFACTURER})
        assert manufacturers == [manufacturer]
