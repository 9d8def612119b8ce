"""Asynchronous tasks for the core module."""

import structlog
from celery import shared_task

from modules.core.outbox import OutboxRelay

logger = structlog.get_logger(__name__)


@shared_task(name="core.relay_pending_changes")
def relay_pending_changes(limit: int = 500):
    """Re-publish change signals whose first relay failed or never ran."""
    published = OutboxRelay().relay_pending(limit=limit)
    logger.info("relay_pending_changes.executed", published=published)
    return {"status": "ok", "published": published}
