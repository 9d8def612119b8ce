"""Account DTOs for the Service Layer."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from modules.accounts.models import Account


class AccountSummaryDTO(BaseModel):
    """Immutable account row for dashboards."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    email: str
    role: str
    status: str
    total_sales: int
    revenue: Decimal

    @classmethod
    def from_entity(cls, account: Account) -> AccountSummaryDTO:
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            role=account.role,
            status=account.status,
            total_sales=account.total_sales,
            revenue=account.revenue,
        )
