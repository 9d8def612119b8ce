"""Complaint repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.disputes.models import Complaint


class IComplaintRepository(IRepository["Complaint"]):
    """Repository contract for complaints."""

    @abstractmethod
    def list_filtered(
        self, status: Optional[str] = None, party_id: Optional[UUID] = None
    ) -> List[Complaint]:
        """Newest-first complaints, optionally by status and/or involved party."""

    @abstractmethod
    def mark_resolved(
        self, complaint: Complaint, admin_id: UUID, notes: str
    ) -> bool:
        """Resolve ``complaint`` only if the stored row is still open.

        Returns ``False`` when zero rows matched.  On success ``complaint``
        is updated in place and its collected domain events are recorded.
        """
