"""Integration tests for the complaint endpoints and admin verdicts."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.accounts.constants import AccountStatus
from modules.disputes.constants import RESOLVED_TITLE
from modules.notifications.models import Notification

pytestmark = pytest.mark.integration

COMPLAINTS_URL = "/api/v1/complaints/"


@pytest.fixture()
def customer_client(client_for, customer):
    return client_for(customer)


@pytest.fixture()
def admin_client(client_for, admin_account):
    return client_for(admin_account)


@pytest.fixture()
def filed(customer_client, manufacturer):
    response = customer_client.post(
        COMPLAINTS_URL,
        {
            "to_user_id": str(manufacturer.id),
            "subject": "Wrong colour",
            "message": "Ordered oak, got pine.",
        },
        format="json",
    )
    assert response.status_code == 201, response.json()
    return response.json()


class TestFileComplaint:
    def test_direct_complaint(self, filed, customer):
        assert filed["status"] == "open"
        assert filed["is_direct"] is True
        assert filed["from_user_id"] == str(customer.id)

    def test_order_linked_complaint(self, customer_client, place_order, manufacturer):
        order = place_order()
        response = customer_client.post(
            COMPLAINTS_URL,
            {
                "to_user_id": str(manufacturer.id),
                "order_id": str(order.id),
                "subject": "Late",
                "message": "Still waiting.",
            },
            format="json",
        )
        assert response.status_code == 201
        assert response.json()["order_reference"] == order.short_reference

    def test_complaint_against_self(self, customer_client, customer):
        response = customer_client.post(
            COMPLAINTS_URL,
            {"to_user_id": str(customer.id), "subject": "Me", "message": "Myself"},
            format="json",
        )
        assert response.status_code == 400

    def test_missing_subject(self, customer_client, manufacturer):
        response = customer_client.post(
            COMPLAINTS_URL, {"to_user_id": str(manufacturer.id), "message": "Hi"}, format="json"
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "subject"


class TestVisibility:
    def test_parties_see_their_complaint(self, filed, client_for, manufacturer):
        response = client_for(manufacturer).get(f"{COMPLAINTS_URL}{filed['id']}/")
        assert response.status_code == 200

    def test_outsider_gets_404(self, filed, client_for, other_customer):
        response = client_for(other_customer).get(f"{COMPLAINTS_URL}{filed['id']}/")
        assert response.status_code == 404

    def test_outsider_list_is_empty(self, filed, client_for, other_customer):
        response = client_for(other_customer).get(COMPLAINTS_URL)
        assert response.json()["count"] == 0

    def test_admin_filters_by_status(self, filed, admin_client):
        assert admin_client.get(COMPLAINTS_URL, {"status": "open"}).json()["count"] == 1
        assert admin_client.get(COMPLAINTS_URL, {"status": "resolved"}).json()["count"] == 0


class TestVerdicts:
    def test_restrict_then_resolve(self, filed, admin_client, customer, manufacturer):
        url = f"{COMPLAINTS_URL}{filed['id']}/"

        response = admin_client.post(f"{url}restrict/")
        assert response.status_code == 200
        assert response.json()["status"] == AccountStatus.INACTIVE

        response = admin_client.post(f"{url}resolve/", {}, format="json")
        assert response.status_code == 200
        assert response.json()["status"] == "resolved"

        manufacturer.refresh_from_db()
        assert manufacturer.status == AccountStatus.INACTIVE
        assert Notification.objects.filter(user=customer, title=RESOLVED_TITLE).count() == 1

    def test_resolve_twice_conflicts(self, filed, admin_client):
        url = f"{COMPLAINTS_URL}{filed['id']}/resolve/"
        admin_client.post(url, {}, format="json")

        response = admin_client.post(url, {}, format="json")

        assert response.status_code == 409
        error = response.json()["errors"][0]
        assert error["current"] == "resolved"
        assert error["requested"] == "resolved"

    def test_warnings(self, filed, admin_client, customer, manufacturer):
        url = f"{COMPLAINTS_URL}{filed['id']}/"
        accused = admin_client.post(
            f"{url}warn-accused/", {"admin_response": "Final warning."}, format="json"
        )
        complainant = admin_client.post(f"{url}warn-complainant/", {}, format="json")

        assert accused.json()["user_id"] == str(manufacturer.id)
        assert accused.json()["message"] == "Final warning."
        assert complainant.json()["user_id"] == str(customer.id)

    def test_verdicts_are_admin_only(self, filed, customer_client):
        response = customer_client.post(f"{COMPLAINTS_URL}{filed['id']}/resolve/", {}, format="json")
        assert response.status_code == 403

    def test_unknown_complaint(self, admin_client):
        response = admin_client.post(f"{COMPLAINTS_URL}{uuid4()}/resolve/", {}, format="json")
        assert response.status_code == 404
