import logging
import uuid

import pytest

pytestmark = pytest.mark.integration


class TestCorrelationIdMiddleware:
    def test_returns_provided_request_id(self, client):
        custom_id = "my-custom-request-id-123"
        response = client.get("/health", HTTP_X_REQUEST_ID=custom_id)
        assert response["X-Request-ID"] == custom_id

    def test_generates_uuid_when_no_request_id(self, client):
        response = client.get("/health")
        request_id = response["X-Request-ID"]
        parsed = uuid.UUID(request_id, version=4)
        assert str(parsed) == request_id

    def test_correlation_id_in_logs(self, client, caplog):
        custom_id = "log-test-correlation-456"
        with caplog.at_level(logging.INFO):
            client.get("/health", HTTP_X_REQUEST_ID=custom_id)
        found = any(custom_id in record.getMessage() for record in caplog.records)
        assert found, (
            f"correlation_id '{custom_id}' not found in log records: "
            f"{[r.getMessage() for r in caplog.records]}"
        )

    def test_service_events_carry_correlation_id(
        self, api_client_with_correlation, customer, manufacturer, place_order, caplog
    ):
        from django.contrib.auth import get_user_model

        client, cid = api_client_with_correlation
        order = place_order()
        user = get_user_model().objects.create_user(username="maker", password="x")
        manufacturer.user = user
        manufacturer.save(update_fields=["user"])
        client.force_authenticate(user=user)

        with caplog.at_level(logging.INFO):
            client.post(
                f"/api/v1/orders/{order.id}/verify-payment/",
                {"approved": True},
                format="json",
            )

        verified = [
            r.getMessage()
            for r in caplog.records
            if "order.payment_verified" in r.getMessage()
        ]
        assert verified
        assert all(cid in message for message in verified)
