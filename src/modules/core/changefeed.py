"""Process-wide change feed, selected by ``settings.CHANGE_FEED_BACKEND``."""

from __future__ import annotations

import threading
from typing import Optional

import redis
import structlog
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from shared.domain.bus import IChangeFeed
from shared.infrastructure.bus import InMemoryChangeFeed, RedisChangeFeed

logger = structlog.get_logger(__name__)

_feed: Optional[IChangeFeed] = None
_lock = threading.Lock()


def get_change_feed() -> IChangeFeed:
    global _feed
    with _lock:
        if _feed is None:
            _feed = _build_change_feed()
        return _feed


def reset_change_feed() -> None:
    """Close and drop the cached feed; the next ``get_change_feed`` rebuilds it."""
    global _feed
    with _lock:
        if isinstance(_feed, RedisChangeFeed):
            _feed.close()
        _feed = None


def _build_change_feed() -> IChangeFeed:
    backend = getattr(settings, "CHANGE_FEED_BACKEND", "memory")
    if backend == "memory":
        logger.info("changefeed.configured", backend=backend)
        return InMemoryChangeFeed()
    if backend == "redis":
        logger.info("changefeed.configured", backend=backend)
        feed = RedisChangeFeed(
            redis.Redis.from_url(settings.REDIS_URL),
            prefix=settings.CHANGE_FEED_PREFIX,
        )
        feed.start(timeout=settings.CHANGE_FEED_POLL_TIMEOUT)
        return feed
    raise ImproperlyConfigured(f"Unknown CHANGE_FEED_BACKEND {backend!r}.")
