"""Integration tests for the order endpoints.

Drives the full lifecycle over HTTP as each party would from its dashboard
and checks that rejected transitions come back as 403 / 404 / 409 with a
message naming what was refused.
"""

from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from modules.notifications.models import Notification

pytestmark = pytest.mark.integration

ORDERS_URL = "/api/v1/orders/"


def _payload(manufacturer, payment_method="bank_transfer", **overrides):
    data = {
        "manufacturer_id": str(manufacturer.id),
        "payment_method": payment_method,
        "transaction_id": "TRX-7781" if payment_method == "bank_transfer" else "",
        "items": [
            {
                "product_id": str(uuid4()),
                "product_name": "Walnut Chair",
                "unit_price": "50.00",
                "quantity": 3,
            }
        ],
    }
    data.update(overrides)
    return data


@pytest.fixture()
def customer_client(client_for, customer):
    return client_for(customer)


@pytest.fixture()
def manufacturer_client(client_for, manufacturer):
    return client_for(manufacturer)


@pytest.fixture()
def placed(customer_client, manufacturer):
    response = customer_client.post(ORDERS_URL, _payload(manufacturer), format="json")
    assert response.status_code == 201, response.json()
    return response.json()


class TestPlaceOrder:
    def test_bank_transfer_awaits_verification(self, placed):
        assert placed["status"] == "awaiting_verification"
        assert Decimal(placed["total_amount"]) == Decimal("150.00")
        assert placed["item_count"] == 3
        assert placed["reference"] == placed["id"][:8]
        assert len(placed["status_history"]) == 1

    def test_card_starts_processing(self, customer_client, manufacturer):
        response = customer_client.post(
            ORDERS_URL, _payload(manufacturer, "card"), format="json"
        )
        assert response.status_code == 201
        assert response.json()["status"] == "processing"

    def test_idempotency_key(self, customer_client, manufacturer):
        first = customer_client.post(
            ORDERS_URL, _payload(manufacturer), format="json", HTTP_IDEMPOTENCY_KEY="k-1"
        )
        second = customer_client.post(
            ORDERS_URL, _payload(manufacturer), format="json", HTTP_IDEMPOTENCY_KEY="k-1"
        )
        assert first.json()["id"] == second.json()["id"]

    def test_bank_transfer_without_transaction_id(self, customer_client, manufacturer):
        response = customer_client.post(
            ORDERS_URL, _payload(manufacturer, transaction_id=""), format="json"
        )
        assert response.status_code == 400
        assert response.json()["type"] == "validation_error"

    def test_empty_items(self, customer_client, manufacturer):
        response = customer_client.post(
            ORDERS_URL, _payload(manufacturer, items=[]), format="json"
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "items"

    def test_unknown_manufacturer(self, customer_client):
        ghost = SimpleNamespace(id=uuid4())
        response = customer_client.post(ORDERS_URL, _payload(ghost), format="json")
        assert response.status_code == 404
        assert response.json()["errors"][0]["code"] == "not_found"

    def test_anonymous_rejected(self, api_client, manufacturer):
        response = api_client.post(ORDERS_URL, _payload(manufacturer), format="json")
        assert response.status_code == 401

    def test_user_without_account_rejected(self, api_client, manufacturer, django_user_model):
        user = django_user_model.objects.create_user(username="drifter", password="x")
        api_client.force_authenticate(user=user)
        response = api_client.post(ORDERS_URL, _payload(manufacturer), format="json")
        assert response.status_code == 403


class TestLifecycle:
    def test_full_lifecycle(self, placed, customer_client, manufacturer_client, manufacturer):
        url = f"{ORDERS_URL}{placed['id']}/"

        response = manufacturer_client.post(
            f"{url}verify-payment/", {"approved": True}, format="json"
        )
        assert response.status_code == 200
        assert response.json()["status"] == "processing"

        response = manufacturer_client.post(f"{url}advance/", {"status": "shipped"}, format="json")
        assert response.json()["status"] == "shipped"

        response = customer_client.post(f"{url}advance/", {"status": "delivered"}, format="json")
        assert response.status_code == 200
        assert response.json()["status"] == "delivered"
        assert response.json()["version"] == 3

        manufacturer.refresh_from_db()
        assert manufacturer.total_sales == 3
        assert manufacturer.revenue == Decimal("150.00")

        history = customer_client.get(f"{url}history/").json()
        assert [h["new_status"] for h in history] == [
            "awaiting_verification",
            "processing",
            "shipped",
            "delivered",
        ]

    def test_repeated_verification_conflicts(self, placed, manufacturer_client):
        url = f"{ORDERS_URL}{placed['id']}/verify-payment/"
        manufacturer_client.post(url, {"approved": True}, format="json")

        response = manufacturer_client.post(url, {"approved": True}, format="json")

        assert response.status_code == 409
        body = response.json()
        assert body["retryable"] is False
        error = body["errors"][0]
        assert error["code"] == "invalid_transition"
        assert error["current"] == "processing"
        assert error["requested"] == "processing"
        assert "from processing to processing" in error["detail"]

    def test_rejection_with_cancel_reason(self, placed, manufacturer_client, customer):
        response = manufacturer_client.post(
            f"{ORDERS_URL}{placed['id']}/verify-payment/",
            {"approved": False, "reason": "order_cancelled"},
            format="json",
        )
        assert response.json()["status"] == "cancelled"
        assert Notification.objects.get(user=customer).title == "Order Cancelled"

    def test_customer_cannot_verify(self, placed, customer_client):
        response = customer_client.post(
            f"{ORDERS_URL}{placed['id']}/verify-payment/", {"approved": True}, format="json"
        )
        assert response.status_code == 403
        assert response.json()["errors"][0]["code"] == "unauthorized"

    def test_skipping_shipping_conflicts(self, customer_client, manufacturer_client, manufacturer):
        order = customer_client.post(
            ORDERS_URL, _payload(manufacturer, "card"), format="json"
        ).json()
        response = manufacturer_client.post(
            f"{ORDERS_URL}{order['id']}/advance/", {"status": "delivered"}, format="json"
        )
        assert response.status_code == 409
        assert "allowed next statuses are shipped" in response.json()["errors"][0]["detail"]

    def test_invalid_status_value(self, placed, manufacturer_client):
        response = manufacturer_client.post(
            f"{ORDERS_URL}{placed['id']}/advance/", {"status": "teleported"}, format="json"
        )
        assert response.status_code == 400


class TestVisibility:
    def test_outsider_cannot_read(self, placed, client_for, other_customer):
        response = client_for(other_customer).get(f"{ORDERS_URL}{placed['id']}/")
        assert response.status_code == 403

    def test_outsider_cannot_advance(self, placed, client_for, other_customer):
        response = client_for(other_customer).post(
            f"{ORDERS_URL}{placed['id']}/advance/", {"status": "shipped"}, format="json"
        )
        assert response.status_code == 403

    def test_unknown_order(self, customer_client):
        response = customer_client.get(f"{ORDERS_URL}{uuid4()}/")
        assert response.status_code == 404

    def test_list_shows_own_orders_only(self, placed, client_for, other_customer, manufacturer_client):
        assert client_for(other_customer).get(ORDERS_URL).json()["count"] == 0
        listing = manufacturer_client.get(ORDERS_URL).json()
        assert [o["id"] for o in listing["results"]] == [placed["id"]]

    def test_admin_sees_everything(self, placed, client_for, admin_account):
        assert client_for(admin_account).get(ORDERS_URL).json()["count"] == 1

    def test_filter_by_status(self, placed, customer_client):
        response = customer_client.get(ORDERS_URL, {"status": "processing"})
        assert response.json()["count"] == 0
        response = customer_client.get(ORDERS_URL, {"status": "awaiting_verification"})
        assert response.json()["count"] == 1

    def test_active_orders(self, placed, customer_client, manufacturer_client):
        manufacturer_client.post(
            f"{ORDERS_URL}{placed['id']}/verify-payment/", {"approved": False}, format="json"
        )
        assert customer_client.get(f"{ORDERS_URL}active/").json() == []
