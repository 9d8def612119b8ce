"""Django ORM implementation of the Complaint repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from modules.core.outbox import record_events
from modules.disputes.constants import ComplaintStatus
from modules.disputes.models import Complaint
from modules.disputes.repositories.interfaces import IComplaintRepository

logger = structlog.get_logger(__name__)


class ComplaintDjangoRepository(IComplaintRepository):
    """Concrete Complaint repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Complaint]:
        try:
            return Complaint.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Complaint]:
        try:
            return Complaint.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Complaint]:
        queryset = Complaint.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_filtered(
        self, status: Optional[str] = None, party_id: Optional[UUID] = None
    ) -> List[Complaint]:
        queryset = Complaint.objects.all()
        if status:
            queryset = queryset.filter(status=status)
        if party_id:
            queryset = queryset.filter(Q(from_user_id=party_id) | Q(to_user_id=party_id))
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Complaint) -> Complaint:
        entity.save()
        rows = record_events(entity, topic="disputes")
        logger.info("complaint.saved", complaint_id=str(entity.id), event_count=len(rows))
        return entity

    @transaction.atomic
    def mark_resolved(self, complaint: Complaint, admin_id: UUID, notes: str) -> bool:
        now = timezone.now()
        rows = Complaint.objects.filter(
            id=complaint.id, status=ComplaintStatus.OPEN
        ).update(
            status=ComplaintStatus.RESOLVED,
            resolved_by_id=admin_id,
            resolved_at=now,
            resolution_notes=notes,
            updated_at=now,
        )
        if not rows:
            return False

        complaint.status = ComplaintStatus.RESOLVED
        complaint.resolved_by_id = admin_id
        complaint.resolved_at = now
        complaint.resolution_notes = notes
        complaint.updated_at = now
        record_events(complaint, topic="disputes")
        return True
