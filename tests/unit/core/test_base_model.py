"""Unit tests for BaseModel, exercised through ``Account``."""

from __future__ import annotations

import uuid

import pytest

from modules.accounts.models import Account

pytestmark = pytest.mark.unit


class TestBaseModel:
    """Tests for UUIDv7 PK and timestamp behaviour."""

    def test_id_is_uuid_version_7(self, make_account):
        obj = make_account()
        assert isinstance(obj.id, uuid.UUID)
        assert obj.id.version == 7

    def test_ids_are_time_ordered(self, make_account):
        """UUIDv7 encodes timestamp, so sequential creates yield ordered IDs."""
        a = make_account()
        b = make_account()
        assert a.id != b.id
        assert str(a.id) < str(b.id)

    def test_timestamps_set_on_create(self, make_account):
        obj = make_account()
        assert obj.created_at is not None
        assert obj.updated_at is not None

    def test_updated_at_changes_on_save(self, make_account):
        obj = make_account()
        original_updated = obj.updated_at
        original_created = obj.created_at
        obj.name = "Renamed"
        obj.save()
        obj.refresh_from_db()
        assert obj.updated_at > original_updated
        assert obj.created_at == original_created

    def test_save_with_update_fields_includes_updated_at(self, make_account):
        """The save() guard must inject updated_at into update_fields."""
        obj = make_account()
        original_updated = obj.updated_at
        obj.name = "Renamed"
        obj.save(update_fields=["name"])
        obj.refresh_from_db()
        assert obj.updated_at > original_updated

    def test_id_is_not_editable(self):
        assert Account._meta.get_field("id").editable is False
