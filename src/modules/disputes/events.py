"""Domain events for the Disputes bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class ComplaintFiled(DomainEvent):
    resource_type = "complaint"
    change_kind = "created"


@dataclass(frozen=True)
class ComplaintResolved(DomainEvent):
    resource_type = "complaint"
    change_kind = "resolved"
