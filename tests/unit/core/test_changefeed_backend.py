"""Unit tests for selecting the process-wide change feed."""

from unittest.mock import MagicMock, patch

import pytest
from django.core.exceptions import ImproperlyConfigured

from modules.core.changefeed import get_change_feed, reset_change_feed
from shared.infrastructure.bus import InMemoryChangeFeed, RedisChangeFeed

pytestmark = pytest.mark.unit


class TestChangeFeedBackend:
    def test_memory_backend(self, settings):
        settings.CHANGE_FEED_BACKEND = "memory"
        reset_change_feed()

        feed = get_change_feed()

        assert isinstance(feed, InMemoryChangeFeed)
        assert get_change_feed() is feed

    def test_redis_backend_starts_listener(self, settings):
        settings.CHANGE_FEED_BACKEND = "redis"
        settings.CHANGE_FEED_POLL_TIMEOUT = 0.25
        reset_change_feed()

        with (
            patch("modules.core.changefeed.redis.Redis.from_url", return_value=MagicMock()),
            patch.object(RedisChangeFeed, "start") as start,
        ):
            feed = get_change_feed()

        assert isinstance(feed, RedisChangeFeed)
        start.assert_called_once_with(timeout=0.25)

    def test_reset_closes_redis_feed(self, settings):
        settings.CHANGE_FEED_BACKEND = "redis"
        reset_change_feed()

        with (
            patch("modules.core.changefeed.redis.Redis.from_url", return_value=MagicMock()),
            patch.object(RedisChangeFeed, "start"),
            patch.object(RedisChangeFeed, "close") as close,
        ):
            get_change_feed()
            reset_change_feed()

        close.assert_called_once_with()

    def test_unknown_backend(self, settings):
        settings.CHANGE_FEED_BACKEND = "carrier-pigeon"
        reset_change_feed()

        with pytest.raises(ImproperlyConfigured):
            get_change_feed()
