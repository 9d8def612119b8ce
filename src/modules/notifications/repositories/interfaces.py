"""Notification repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.notifications.models import Notification


class INotificationRepository(IRepository["Notification"]):
    """Repository contract for notifications."""

    @abstractmethod
    def list_for_user(self, user_id: UUID, unread_only: bool = False) -> List[Notification]:
        """Newest-first notifications addressed to ``user_id``."""

    @abstractmethod
    def count_unread(self, user_id: UUID) -> int:
        """Number of unread notifications for ``user_id``."""

    @abstractmethod
    def mark_all_read(self, user_id: UUID) -> int:
        """Flip every unread notification of ``user_id``; returns rows changed."""
