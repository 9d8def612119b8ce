"""Notification service layer (Use Cases)."""

from __future__ import annotations

from typing import TYPE_CHECKING, List
from uuid import UUID

import structlog

from modules.core import channels
from modules.core.db import unit_of_work
from modules.core.outbox import record
from modules.notifications.constants import NotificationType
from modules.notifications.events import (
    NotificationCreated,
    NotificationRead,
    NotificationsCleared,
)
from modules.notifications.exceptions import NotificationNotFound, NotRecipient
from modules.notifications.models import Notification

if TYPE_CHECKING:
    from modules.accounts.services import AccountService
    from modules.notifications.repositories.interfaces import INotificationRepository

logger = structlog.get_logger(__name__)


class NotificationService:
    """Creates notifications as workflow side effects and manages read flags.

    ``notify`` does not open its own transaction boundary beyond the
    repository's: callers invoke it inside their unit of work so the
    notification commits (or rolls back) with the transition that caused it.
    """

    def __init__(
        self,
        repository: INotificationRepository,
        account_service: AccountService,
    ) -> None:
        self._repo = repository
        self._accounts = account_service

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def notify(
        self,
        user_id: UUID,
        title: str,
        message: str,
        type: str = NotificationType.GENERAL,
    ) -> Notification:
        """Append a notification for ``user_id``.

        Raises:
            AccountNotFound: the recipient does not exist.
        """
        self._accounts.require_account(user_id)
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
        )
        notification.add_domain_event(
            NotificationCreated(
                aggregate_id=notification.id,
                channels=(channels.user_notifications(user_id),),
            )
        )
        self._repo.save(notification)
        logger.info(
            "notification.created",
            notification_id=str(notification.id),
            user_id=str(user_id),
            type=type,
        )
        return notification

    @unit_of_work
    def send_admin_notice(
        self, admin_id: UUID, user_id: UUID, title: str, message: str
    ) -> Notification:
        """Direct notice from the admin console to any user.

        Raises:
            RoleRequired / InactiveAccount: ``admin_id`` is not an active admin.
            AccountNotFound: either account does not exist.
        """
        self._accounts.require_admin(admin_id)
        return self.notify(user_id, title, message, NotificationType.GENERAL)

    @unit_of_work
    def mark_read(self, notification_id: UUID, user_id: UUID) -> Notification:
        """Flip ``is_read``; a no-op when already read.

        Raises:
            NotificationNotFound: unknown notification.
            NotRecipient: ``user_id`` is not the recipient.
        """
        notification = self._repo.get_for_update(str(notification_id))
        if not notification:
            raise NotificationNotFound(f"Notification {notification_id} not found.")
        if str(notification.user_id) != str(user_id):
            raise NotRecipient(
                f"Notification {notification_id} does not belong to {user_id}."
            )
        if notification.is_read:
            return notification

        notification.is_read = True
        notification.add_domain_event(
            NotificationRead(
                aggregate_id=notification.id,
                channels=(channels.user_notifications(user_id),),
            )
        )
        self._repo.save(notification)
        return notification

    @unit_of_work
    def mark_all_read(self, user_id: UUID) -> int:
        self._accounts.require_account(user_id)
        changed = self._repo.mark_all_read(user_id)
        if changed:
            record(
                [
                    NotificationsCleared(
                        aggregate_id=user_id,
                        channels=(channels.user_notifications(user_id),),
                    )
                ],
                topic="notifications",
            )
        logger.info("notification.all_read", user_id=str(user_id), changed=changed)
        return changed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_for_user(self, user_id: UUID, unread_only: bool = False) -> List[Notification]:
        return self._repo.list_for_user(user_id, unread_only=unread_only)

    def unread_count(self, user_id: UUID) -> int:
        return self._repo.count_unread(user_id)


def build_notification_service() -> NotificationService:
    """Service wired to the Django ORM repositories."""
    from modules.accounts.services import build_account_service
    from modules.notifications.repositories import NotificationDjangoRepository

    return NotificationService(
        repository=NotificationDjangoRepository(),
        account_service=build_account_service(),
    )
