"""Change-feed implementations.

``InMemoryChangeFeed`` serves dashboards living in the same process (and the
test-suite).  ``RedisChangeFeed`` fans signals out through Redis pub/sub so
dashboards in other processes converge too; it keeps an in-memory feed for
its own local subscribers and feeds it from ``pump()``.
"""

from __future__ import annotations

import json
import threading
from typing import Any, Dict, List, Optional

import structlog

from shared.domain.bus import IChangeFeed, ISignalHandler
from shared.domain.events import ChangeSignal

logger = structlog.get_logger(__name__)


class SignalDeliveryError(Exception):
    """One or more subscribers raised while handling a signal."""

    def __init__(self, signal: ChangeSignal, errors: List[BaseException]) -> None:
        self.signal = signal
        self.errors = errors
        super().__init__(
            f"{len(errors)} handler(s) failed on channel {signal.channel!r} "
            f"for {signal.resource_type} {signal.resource_id}: "
            + "; ".join(repr(e) for e in errors)
        )


class Subscription:
    """Handle returned by ``subscribe``; ``cancel()`` detaches the handler."""

    def __init__(
        self, feed: InMemoryChangeFeed, channel: str, handler: ISignalHandler
    ) -> None:
        self._feed = feed
        self.channel = channel
        self.handler = handler

    def cancel(self) -> None:
        self._feed._unsubscribe(self.channel, self.handler)


class InMemoryChangeFeed(IChangeFeed):
    """Thread-safe in-process change feed."""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[ISignalHandler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, channel: str, handler: ISignalHandler) -> Subscription:
        with self._lock:
            handlers = self._handlers.setdefault(channel, [])
            if handler not in handlers:
                handlers.append(handler)
        return Subscription(self, channel, handler)

    def publish(self, signal: ChangeSignal) -> None:
        """Deliver ``signal`` to every handler of its channel.

        All handlers are attempted; failures are collected and raised together
        so the caller can record the delivery as failed and retry it.
        """
        with self._lock:
            handlers = list(self._handlers.get(signal.channel, []))

        errors: List[BaseException] = []
        for handler in handlers:
            try:
                handler.handle(signal)
            except Exception as exc:
                logger.warning(
                    "changefeed.handler_failed",
                    channel=signal.channel,
                    resource_type=signal.resource_type,
                    resource_id=signal.resource_id,
                    error=str(exc),
                )
                errors.append(exc)
        if errors:
            raise SignalDeliveryError(signal, errors)

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._handlers.get(channel, []))

    def _unsubscribe(self, channel: str, handler: ISignalHandler) -> None:
        with self._lock:
            handlers = self._handlers.get(channel, [])
            if handler in handlers:
                handlers.remove(handler)
            if not handlers:
                self._handlers.pop(channel, None)


class RedisSubscription(Subscription):
    """Subscription that also releases the Redis channel with its last handler."""

    def __init__(
        self, feed: RedisChangeFeed, channel: str, handler: ISignalHandler
    ) -> None:
        super().__init__(feed._local, channel, handler)
        self._redis_feed = feed

    def cancel(self) -> None:
        self._redis_feed._unsubscribe(self.channel, self.handler)


class RedisChangeFeed(IChangeFeed):
    """Change feed backed by Redis pub/sub.

    ``client`` is a ``redis.Redis`` instance.  Channel names are namespaced
    with ``prefix`` so several deployments can share one Redis.  A Redis
    channel stays subscribed only while at least one local handler listens
    on it.  ``start()`` runs ``pump()`` on a daemon thread.
    """

    def __init__(self, client: Any, prefix: str = "marketplace:") -> None:
        self._client = client
        self._prefix = prefix
        self._local = InMemoryChangeFeed()
        self._pubsub: Optional[Any] = None
        self._pubsub_lock = threading.RLock()
        self._stopped = threading.Event()
        self._listener: Optional[threading.Thread] = None

    def publish(self, signal: ChangeSignal) -> None:
        self._client.publish(
            self._prefix + signal.channel, json.dumps(signal.to_dict())
        )

    def subscribe(self, channel: str, handler: ISignalHandler) -> RedisSubscription:
        with self._pubsub_lock:
            first = self._local.subscriber_count(channel) == 0
            self._local.subscribe(channel, handler)
            if first:
                if self._pubsub is None:
                    self._pubsub = self._client.pubsub(ignore_subscribe_messages=True)
                self._pubsub.subscribe(self._prefix + channel)
        return RedisSubscription(self, channel, handler)

    def subscriber_count(self, channel: str) -> int:
        return self._local.subscriber_count(channel)

    def _unsubscribe(self, channel: str, handler: ISignalHandler) -> None:
        with self._pubsub_lock:
            self._local._unsubscribe(channel, handler)
            if self._pubsub is not None and self._local.subscriber_count(channel) == 0:
                self._pubsub.unsubscribe(self._prefix + channel)

    def pump(self, timeout: float = 1.0, max_messages: int = 100) -> int:
        """Hand messages received from Redis to local subscribers.

        Returns the number of signals delivered.  A signal whose handlers
        fail is logged and skipped; the handlers' owners re-fetch on their
        next signal.
        """
        delivered = 0
        while delivered < max_messages:
            with self._pubsub_lock:
                if self._pubsub is None:
                    break
                message = self._pubsub.get_message(timeout=timeout)
            if message is None:
                break
            if message.get("type") != "message":
                continue
            data = message["data"]
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            try:
                self._local.publish(ChangeSignal.from_dict(json.loads(data)))
            except SignalDeliveryError as exc:
                logger.warning("changefeed.redis_delivery_failed", error=str(exc))
            delivered += 1
        return delivered

    def start(self, timeout: float = 1.0) -> None:
        """Deliver Redis messages to local subscribers from a daemon thread."""
        if self._listener is not None and self._listener.is_alive():
            return
        self._stopped.clear()
        self._listener = threading.Thread(
            target=self._listen,
            args=(timeout,),
            name="changefeed-redis-listener",
            daemon=True,
        )
        self._listener.start()

    def _listen(self, timeout: float) -> None:
        while not self._stopped.is_set():
            try:
                if self.pump(timeout=timeout) == 0 and self._pubsub is None:
                    self._stopped.wait(timeout)
            except Exception as exc:
                logger.error("changefeed.redis_listener_error", error=str(exc))
                self._stopped.wait(timeout)

    def close(self) -> None:
        self._stopped.set()
        if self._listener is not None:
            self._listener.join(timeout=5)
            self._listener = None
        with self._pubsub_lock:
            if self._pubsub is not None:
                self._pubsub.unsubscribe()
                self._pubsub.close()
                self._pubsub = None
