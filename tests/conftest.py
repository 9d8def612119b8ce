import itertools
from decimal import Decimal
from uuid import uuid4

import pytest

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.accounts.constants import AccountRole, AccountStatus
from modules.accounts.models import Account
from modules.core.changefeed import get_change_feed, reset_change_feed

_sequence = itertools.count(1)


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def change_feed():
    """A fresh in-memory change feed per test."""
    reset_change_feed()
    yield get_change_feed()
    reset_change_feed()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_account():
    def _make(role=AccountRole.CUSTOMER, status=AccountStatus.ACTIVE, **kwargs):
        n = next(_sequence)
        kwargs.setdefault("name", f"{role.title()} {n}")
        kwargs.setdefault("email", f"{role}-{n}@example.com")
        return Account.objects.create(role=role, status=status, **kwargs)

    return _make


@pytest.fixture()
def customer(make_account):
    return make_account(AccountRole.CUSTOMER, name="Carla Customer")


@pytest.fixture()
def other_customer(make_account):
    return make_account(AccountRole.CUSTOMER, name="Otto Outsider")


@pytest.fixture()
def manufacturer(make_account):
    return make_account(AccountRole.MANUFACTURER, name="Mona Maker")


@pytest.fixture()
def admin_account(make_account):
    return make_account(AccountRole.ADMIN, name="Ada Admin")


@pytest.fixture()
def client_for():
    """APIClient authenticated as a Django user linked to ``account``."""

    def _client(account):
        user = get_user_model().objects.create_user(
            username=f"user-{account.id}", password="testpass123"
        )
        account.user = user
        account.save(update_fields=["user"])
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service():
    from modules.orders.services import build_order_service

    return build_order_service()


@pytest.fixture()
def place_order(order_service, customer, manufacturer):
    """Place an order between ``customer`` and ``manufacturer``.

    Defaults to a bank transfer with one line of 3 x $50.00.
    """
    from modules.orders.dtos import PlaceOrderDTO, PlaceOrderItemDTO

    def _place(
        payment_method="bank_transfer",
        items=None,
        customer_id=None,
        manufacturer_id=None,
        **kwargs,
    ):
        if items is None:
            items = [
                PlaceOrderItemDTO(
                    product_id=uuid4(),
                    product_name="Oak Side Table",
                    unit_price=Decimal("50.00"),
                    quantity=3,
                )
            ]
        if payment_method == "bank_transfer":
            kwargs.setdefault("transaction_id", "TRX-000123")
        dto = PlaceOrderDTO(
            customer_id=customer_id or customer.id,
            manufacturer_id=manufacturer_id or manufacturer.id,
            items=items,
            payment_method=payment_method,
            **kwargs,
        )
        return order_service.place_order(dto)

    return _place
