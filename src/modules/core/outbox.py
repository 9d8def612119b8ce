"""Outbox writing and relaying.

Repositories call ``record_events`` inside their transaction.  Once the
transaction commits, ``OutboxRelay`` turns each stored row into one
``ChangeSignal`` per channel and publishes them.  A failed publish never
touches the committed business data: the row is marked ``FAILED`` with the
error and picked up again by ``core.relay_pending_changes``.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction

from modules.core.changefeed import get_change_feed
from modules.core.models import EventStatus, OutboxEvent
from shared.domain.bus import IChangeFeed
from shared.domain.events import ChangeSignal, DomainEvent

logger = structlog.get_logger(__name__)

RELAYABLE_STATUSES = (EventStatus.PENDING, EventStatus.FAILED)


def record_events(entity: object, topic: str) -> List[OutboxEvent]:
    """Persist the domain events collected on ``entity`` and schedule relay."""
    events: List[DomainEvent] = getattr(entity, "domain_events", [])
    rows = record(events, topic)
    if hasattr(entity, "clear_domain_events"):
        entity.clear_domain_events()
    return rows


def record(events: Iterable[DomainEvent], topic: str) -> List[OutboxEvent]:
    """Persist ``events`` in the current transaction and schedule relay."""
    rows = [
        OutboxEvent.objects.create(
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
            payload=event.to_outbox_payload(),
            topic=topic,
        )
        for event in events
    ]
    if rows:
        ids = [row.id for row in rows]
        transaction.on_commit(lambda: OutboxRelay().relay(ids))
    return rows


class OutboxRelay:
    """Publishes committed outbox rows to the change feed."""

    def __init__(self, feed: Optional[IChangeFeed] = None) -> None:
        self._feed = feed or get_change_feed()

    def relay(self, event_ids: Sequence[UUID]) -> int:
        """Publish the given rows; returns how many were published."""
        rows = OutboxEvent.objects.filter(
            id__in=event_ids, status__in=RELAYABLE_STATUSES
        ).order_by("created_at")
        return sum(1 for row in rows if self._publish(row))

    def relay_pending(
        self, max_retries: Optional[int] = None, limit: int = 500
    ) -> int:
        """Sweep rows left ``PENDING`` or ``FAILED`` below the retry budget."""
        if max_retries is None:
            max_retries = settings.OUTBOX_MAX_RETRIES
        rows = OutboxEvent.objects.filter(
            status__in=RELAYABLE_STATUSES, retry_count__lt=max_retries
        ).order_by("created_at")[:limit]
        return sum(1 for row in rows if self._publish(row))

    def _publish(self, row: OutboxEvent) -> bool:
        try:
            for signal in ChangeSignal.from_outbox_payload(row.payload):
                self._feed.publish(signal)
        except Exception as exc:
            logger.error(
                "changefeed.publish_failed",
                outbox_id=str(row.id),
                event_type=row.event_type,
                aggregate_id=row.aggregate_id,
                retry_count=row.retry_count,
                error=str(exc),
            )
            row.mark_as_failed(str(exc))
            return False
        row.mark_as_published()
        logger.info(
            "changefeed.published",
            outbox_id=str(row.id),
            event_type=row.event_type,
            aggregate_id=row.aggregate_id,
            channels=len(row.payload.get("channels", [])),
        )
        return True
