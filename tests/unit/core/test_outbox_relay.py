"""Unit tests for outbox writing and relaying.

Signals are published only after the write commits, one per channel, and
a failed publish leaves the business data intact while the row waits for
the periodic sweep.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from modules.core.models import EventStatus, OutboxEvent
from modules.core.outbox import OutboxRelay
from modules.orders.constants import OrderStatus
from shared.infrastructure.bus import InMemoryChangeFeed

pytestmark = pytest.mark.unit


class Recorder:
    def __init__(self):
        self.signals = []

    def handle(self, signal):
        self.signals.append(signal)


class Exploding:
    def handle(self, signal):
        raise RuntimeError("subscriber crashed")


class TestRelayOnCommit:
    def test_nothing_published_before_commit(
        self, change_feed, order_service, place_order, manufacturer
    ):
        handler = Recorder()
        change_feed.subscribe("orders", handler)

        order = place_order("card")
        order_service.advance_status(order.id, OrderStatus.SHIPPED, manufacturer.id)

        assert handler.signals == []
        assert OutboxEvent.objects.filter(status=EventStatus.PENDING).exists()

    def test_commit_publishes_on_every_channel(
        self,
        change_feed,
        order_service,
        place_order,
        customer,
        manufacturer,
        django_capture_on_commit_callbacks,
    ):
        order = place_order("card")
        recorders = {
            channel: Recorder()
            for channel in (
                f"order:{order.id}",
                f"orders:customer:{customer.id}",
                f"orders:manufacturer:{manufacturer.id}",
                "orders",
            )
        }
        for channel, recorder in recorders.items():
            change_feed.subscribe(channel, recorder)

        with django_capture_on_commit_callbacks(execute=True):
            order_service.advance_status(order.id, OrderStatus.SHIPPED, manufacturer.id)

        for recorder in recorders.values():
            assert [(s.resource_type, s.change_kind) for s in recorder.signals] == [
                ("order", "status_changed")
            ]
        row = OutboxEvent.objects.get(event_type="OrderStatusChanged")
        assert row.status == EventStatus.PUBLISHED

    def test_failed_publish_keeps_the_transition(
        self,
        change_feed,
        order_service,
        place_order,
        manufacturer,
        django_capture_on_commit_callbacks,
    ):
        order = place_order("card")
        change_feed.subscribe("orders", Exploding())

        with django_capture_on_commit_callbacks(execute=True):
            order_service.advance_status(order.id, OrderStatus.SHIPPED, manufacturer.id)

        order.refresh_from_db()
        assert order.status == OrderStatus.SHIPPED
        row = OutboxEvent.objects.get(event_type="OrderStatusChanged")
        assert row.status == EventStatus.FAILED
        assert row.retry_count == 1
        assert "subscriber crashed" in row.error_message


class TestRelayPending:
    def _pending_rows(self, place_order):
        place_order("card")
        return list(OutboxEvent.objects.all())

    def test_sweeps_pending_rows(self, place_order):
        rows = self._pending_rows(place_order)
        feed = InMemoryChangeFeed()
        handler = Recorder()
        feed.subscribe("orders", handler)

        published = OutboxRelay(feed).relay_pending()

        assert published == len(rows)
        assert len(handler.signals) == 1
        assert not OutboxEvent.objects.exclude(status=EventStatus.PUBLISHED).exists()

    def test_retries_failed_rows_until_budget(self, place_order):
        self._pending_rows(place_order)
        feed = MagicMock()
        feed.publish.side_effect = ConnectionError("redis down")
        relay = OutboxRelay(feed)

        for _ in range(5):
            relay.relay_pending(max_retries=3)

        counts = set(OutboxEvent.objects.values_list("retry_count", flat=True))
        assert counts == {3}

    def test_published_rows_are_not_resent(self, place_order):
        self._pending_rows(place_order)
        feed = MagicMock()
        relay = OutboxRelay(feed)
        relay.relay_pending()
        feed.reset_mock()

        assert relay.relay_pending() == 0
        feed.publish.assert_not_called()

    def test_relay_by_ids_skips_published(self, place_order):
        rows = self._pending_rows(place_order)
        rows[0].mark_as_published()
        feed = MagicMock()

        published = OutboxRelay(feed).relay([row.id for row in rows])

        assert published == len(rows) - 1
