"""Django ORM implementation of the Account repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, Sum
from django.utils import timezone

from modules.accounts.constants import AccountRole
from modules.accounts.models import Account, SalesLedgerEntry
from modules.accounts.repositories.interfaces import IAccountRepository
from modules.core.outbox import record_events

logger = structlog.get_logger(__name__)


class AccountDjangoRepository(IAccountRepository):
    """Concrete Account repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Account]:
        try:
            return Account.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Account]:
        try:
            return Account.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Account]:
        queryset = Account.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Account) -> Account:
        entity.save()
        rows = record_events(entity, topic="accounts")
        logger.info("account.saved", account_id=str(entity.id), event_count=len(rows))
        return entity

    # ------------------------------------------------------------------
    # Sales accounting
    # ------------------------------------------------------------------

    def add_ledger_entry(
        self,
        order_id: UUID,
        manufacturer_id: UUID,
        item_count: int,
        amount: Decimal,
    ) -> bool:
        _, created = SalesLedgerEntry.objects.get_or_create(
            order_id=order_id,
            defaults={
                "manufacturer_id": manufacturer_id,
                "item_count": item_count,
                "amount": amount,
            },
        )
        return created

    def increment_sales(
        self, manufacturer_id: UUID, item_count: int, amount: Decimal
    ) -> int:
        return Account.objects.filter(
            id=manufacturer_id, role=AccountRole.MANUFACTURER
        ).update(
            total_sales=F("total_sales") + item_count,
            revenue=F("revenue") + amount,
            updated_at=timezone.now(),
        )

    def total_revenue(self) -> Decimal:
        total = Account.objects.filter(role=AccountRole.MANUFACTURER).aggregate(
            total=Sum("revenue")
        )["total"]
        return total or Decimal("0.00")
