"""Complaint model.

Business rules implemented:
- ``subject`` and ``message`` are fixed once filed.
- ``status`` moves ``open -> resolved`` exactly once and never back.
- ``order`` is optional: a direct complaint between two accounts is a
  valid complaint, not a broken one.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel
from modules.disputes.constants import ComplaintStatus
from shared.domain.events import DomainEventMixin


class Complaint(DomainEventMixin, BaseModel):
    from_user: models.ForeignKey = models.ForeignKey(
        "accounts.Account",
        on_delete=models.PROTECT,
        related_name="complaints_filed",
    )
    to_user: models.ForeignKey = models.ForeignKey(
        "accounts.Account",
        on_delete=models.PROTECT,
        related_name="complaints_received",
    )
    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="complaints",
    )
    subject: models.CharField = models.CharField(max_length=255)
    message: models.TextField = models.TextField()
    status: models.CharField = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        default=ComplaintStatus.OPEN,
    )
    resolved_by: models.ForeignKey = models.ForeignKey(
        "accounts.Account",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    resolved_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    resolution_notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "complaints"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "-created_at"], name="complaints_status_idx"),
        ]

    @property
    def is_open(self) -> bool:
        return self.status == ComplaintStatus.OPEN

    @property
    def is_direct(self) -> bool:
        """No order attached."""
        return self.order_id is None

    @property
    def order_reference(self) -> str | None:
        return str(self.order_id)[:8] if self.order_id else None

    def __str__(self) -> str:
        return f"{self.subject} ({self.status})"
