"""Notification model.

Notifications are append-mostly: created as side effects of lifecycle and
dispute operations, later mutated only to flip ``is_read``.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel
from modules.notifications.constants import NotificationType
from shared.domain.events import DomainEventMixin


class Notification(DomainEventMixin, BaseModel):
    user: models.ForeignKey = models.ForeignKey(
        "accounts.Account",
        on_delete=models.PROTECT,
        related_name="notifications",
    )
    title: models.CharField = models.CharField(max_length=255)
    message: models.TextField = models.TextField()
    is_read: models.BooleanField = models.BooleanField(default=False)
    type: models.CharField = models.CharField(
        max_length=20,
        choices=NotificationType.choices,
        default=NotificationType.GENERAL,
    )

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_read"], name="notif_user_read_idx"),
            models.Index(fields=["user", "-created_at"], name="notif_user_created_idx"),
        ]

    def __str__(self) -> str:
        flag = "read" if self.is_read else "unread"
        return f"{self.title} -> {self.user_id} ({flag})"
