"""Django ORM implementation of the Notification repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from modules.core.outbox import record_events
from modules.notifications.models import Notification
from modules.notifications.repositories.interfaces import INotificationRepository

logger = structlog.get_logger(__name__)


class NotificationDjangoRepository(INotificationRepository):
    """Concrete Notification repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Notification]:
        try:
            return Notification.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Notification]:
        try:
            return Notification.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Notification]:
        queryset = Notification.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_for_user(self, user_id: UUID, unread_only: bool = False) -> List[Notification]:
        queryset = Notification.objects.filter(user_id=user_id)
        if unread_only:
            queryset = queryset.filter(is_read=False)
        return list(queryset.order_by("-created_at"))

    def count_unread(self, user_id: UUID) -> int:
        return Notification.objects.filter(user_id=user_id, is_read=False).count()

    def mark_all_read(self, user_id: UUID) -> int:
        return Notification.objects.filter(user_id=user_id, is_read=False).update(
            is_read=True, updated_at=timezone.now()
        )

    @transaction.atomic
    def save(self, entity: Notification) -> Notification:
        entity.save()
        rows = record_events(entity, topic="notifications")
        logger.info(
            "notification.saved",
            notification_id=str(entity.id),
            user_id=str(entity.user_id),
            event_count=len(rows),
        )
        return entity
