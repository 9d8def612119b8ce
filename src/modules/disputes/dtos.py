"""Dispute DTOs for the Service Layer.

- ``FileComplaintDTO``: input for filing a complaint.
- ``ComplaintSummaryDTO``: flat read model used by the admin console.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional, Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

if TYPE_CHECKING:
    from modules.disputes.models import Complaint


class FileComplaintDTO(BaseModel):
    """Immutable DTO for complaint filing requests."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    from_user_id: UUID
    to_user_id: UUID
    order_id: Optional[UUID] = None
    subject: str
    message: str

    @field_validator("subject")
    @classmethod
    def subject_must_fit(cls, v: str) -> str:
        if not v:
            raise ValueError("Subject must not be empty.")
        if len(v) > 255:
            raise ValueError("Subject must be at most 255 characters.")
        return v

    @field_validator("message")
    @classmethod
    def message_must_not_be_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Message must not be empty.")
        return v

    @model_validator(mode="after")
    def parties_must_differ(self) -> Self:
        if self.from_user_id == self.to_user_id:
            raise ValueError("A complaint must be filed against another account.")
        return self


class ComplaintSummaryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    from_user_id: UUID
    to_user_id: UUID
    order_id: Optional[UUID]
    order_reference: Optional[str]
    subject: str
    status: str
    created_at: datetime
    resolved_at: Optional[datetime]

    @classmethod
    def from_entity(cls, complaint: Complaint) -> ComplaintSummaryDTO:
        return cls(
            id=complaint.id,
            from_user_id=complaint.from_user_id,
            to_user_id=complaint.to_user_id,
            order_id=complaint.order_id,
            order_reference=complaint.order_reference,
            subject=complaint.subject,
            status=complaint.status,
            created_at=complaint.created_at,
            resolved_at=complaint.resolved_at,
        )
