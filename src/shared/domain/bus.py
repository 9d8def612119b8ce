"""Change-feed interfaces for in-process and cross-process propagation."""

from __future__ import annotations

from typing import Protocol

from shared.domain.events import ChangeSignal


class ISignalHandler(Protocol):
    """Handler interface for change signals."""

    def handle(self, signal: ChangeSignal) -> None: ...


class ISubscription(Protocol):
    channel: str

    def cancel(self) -> None: ...


class IChangeFeed(Protocol):
    """Publish/subscribe channel per logical resource group.

    Delivery is at-least-once and unordered across channels.  Handlers must
    treat every signal as "something changed" and re-read authoritative
    state.
    """

    def publish(self, signal: ChangeSignal) -> None: ...

    def subscribe(self, channel: str, handler: ISignalHandler) -> ISubscription: ...
