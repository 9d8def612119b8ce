"""Domain events primitives for the modular monolith.

Two kinds of message live here:

- ``DomainEvent``: what happened to an aggregate, collected in memory on the
  aggregate and written to the transactional outbox with the state change.
- ``ChangeSignal``: the low-information invalidation that the propagation
  layer pushes to dashboards once the write has committed.  It names a
  resource and a kind of change, never the new state; listeners re-read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Tuple
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent:
    """Base domain event (immutable).

    Subclasses set ``resource_type`` / ``change_kind`` and the emitting
    service fills ``channels`` with every channel interested in the change.
    """

    aggregate_id: UUID
    channels: Tuple[str, ...] = ()
    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_name: str = field(init=False)

    resource_type: ClassVar[str] = "resource"
    change_kind: ClassVar[str] = "updated"

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", self.__class__.__name__)

    def to_outbox_payload(self) -> Dict[str, Any]:
        return {
            "event_id": str(self.event_id),
            "resource_type": self.resource_type,
            "resource_id": str(self.aggregate_id),
            "change_kind": self.change_kind,
            "channels": list(self.channels),
            "occurred_on": self.occurred_on.isoformat(),
        }


@dataclass(frozen=True)
class ChangeSignal:
    """Invalidation signal: "``resource_type`` ``resource_id`` changed, go look"."""

    resource_type: str
    resource_id: str
    change_kind: str
    channel: str
    occurred_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def key(self) -> Tuple[str, str]:
        """Identity used by subscribers to coalesce repeated signals."""
        return (self.resource_type, self.resource_id)

    def to_dict(self) -> Dict[str, str]:
        return {
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "change_kind": self.change_kind,
            "channel": self.channel,
            "occurred_on": self.occurred_on.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ChangeSignal:
        return cls(
            resource_type=data["resource_type"],
            resource_id=data["resource_id"],
            change_kind=data["change_kind"],
            channel=data["channel"],
            occurred_on=datetime.fromisoformat(data["occurred_on"]),
        )

    @classmethod
    def from_outbox_payload(cls, payload: Dict[str, Any]) -> List[ChangeSignal]:
        """Expand a stored outbox payload into one signal per channel."""
        occurred_on = datetime.fromisoformat(payload["occurred_on"])
        return [
            cls(
                resource_type=payload["resource_type"],
                resource_id=payload["resource_id"],
                change_kind=payload["change_kind"],
                channel=channel,
                occurred_on=occurred_on,
            )
            for channel in payload.get("channels", [])
        ]


class DomainEventMixin:
    """Mixin for aggregate roots that collect domain events in memory."""

    _domain_events: list[DomainEvent]

    def add_domain_event(self, event: DomainEvent) -> None:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        self._domain_events.append(event)

    def clear_domain_events(self) -> None:
        if hasattr(self, "_domain_events"):
            self._domain_events.clear()

    @property
    def domain_events(self) -> list[DomainEvent]:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        return list(self._domain_events)
