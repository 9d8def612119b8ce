import pytest

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_card_number_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "detail": "charged card 4111 1111 1111 1111 ok"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "4111 1111 1111 1111" not in result["detail"]
        assert "***MASKED***" in result["detail"]

    def test_dashed_card_number_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "detail": "5500-0000-0000-0004"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["detail"] == "***MASKED***"

    def test_transaction_id_key_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "transaction_id": "TRX-889231"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["transaction_id"] == "***MASKED***"

    def test_transaction_id_inline_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "transaction_id=TRX-889231"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "TRX-889231" not in result["data"]

    def test_password_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_token_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "header": "token=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["header"]
        assert "***MASKED***" in result["header"]

    def test_short_numbers_unchanged(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "order.placed", "total_amount": "150.00", "units": 3}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["total_amount"] == "150.00"
        assert result["units"] == 3

    def test_non_sensitive_data_unchanged(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "order.placed", "order_id": "ORD-001"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["order_id"] == "ORD-001"
        assert result["event"] == "order.placed"

    def test_uuid_with_numeric_tail_unchanged(self):
        from config.settings import mask_sensitive_data

        order_id = "01a1522d-d263-7757-a2d5-123456789012"
        event_dict = {"event": "order.placed", "order_id": order_id}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["order_id"] == order_id

    def test_uuid_inline_unchanged(self):
        from config.settings import mask_sensitive_data

        detail = "order 01a1522d-7757-1234-5678-123456789012 shipped"
        event_dict = {"event": "test", "detail": detail}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["detail"] == detail
