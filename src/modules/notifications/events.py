"""Domain events for the Notifications bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class NotificationCreated(DomainEvent):
    resource_type = "notification"
    change_kind = "created"


@dataclass(frozen=True)
class NotificationRead(DomainEvent):
    resource_type = "notification"
    change_kind = "read"


@dataclass(frozen=True)
class NotificationsCleared(DomainEvent):
    """Every unread notification of one user was marked read at once."""

    resource_type = "notification_inbox"
    change_kind = "read"
