"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderPlaced(DomainEvent):
    """Raised when checkout creates an order."""

    resource_type = "order"
    change_kind = "created"


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised when an order moves along a state-machine edge."""

    resource_type = "order"
    change_kind = "status_changed"
