"""Subscriber-side helpers for the change feed."""

from __future__ import annotations

import threading
from typing import Callable, Dict, FrozenSet, Optional, Tuple

import structlog

from shared.domain.events import ChangeSignal

logger = structlog.get_logger(__name__)

ResourceKey = Tuple[str, str]


class CoalescingSubscriber:
    """Collects invalidations and re-fetches once per batch.

    ``handle`` only records which resources changed.  ``flush`` hands the
    distinct set of changed resources to ``refetch`` in a single call, so a
    burst of signals for the same order becomes one re-read.  With
    ``eager=True`` every signal flushes immediately.
    """

    def __init__(
        self,
        refetch: Callable[[FrozenSet[ResourceKey]], None],
        eager: bool = False,
    ) -> None:
        self._refetch = refetch
        self._eager = eager
        self._pending: Dict[ResourceKey, ChangeSignal] = {}
        self._lock = threading.Lock()

    def handle(self, signal: ChangeSignal) -> None:
        with self._lock:
            self._pending[signal.key] = signal
        if self._eager:
            self.flush()

    @property
    def pending(self) -> FrozenSet[ResourceKey]:
        with self._lock:
            return frozenset(self._pending)

    def flush(self) -> Optional[FrozenSet[ResourceKey]]:
        """Run one re-fetch for everything signalled since the last flush."""
        with self._lock:
            if not self._pending:
                return None
            batch = dict(self._pending)
            self._pending.clear()
        keys = frozenset(batch)
        logger.debug("changefeed.refetch", resources=len(keys))
        try:
            self._refetch(keys)
        except Exception:
            # Put the batch back so the next flush retries it.
            with self._lock:
                for key, signal in batch.items():
                    self._pending.setdefault(key, signal)
            raise
        return keys
