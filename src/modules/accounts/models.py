"""Account and SalesLedgerEntry models.

Business rules implemented:
- Accounts carry a role (customer, manufacturer, admin) and an
  ``active``/``inactive`` status toggled by admin verdicts.
- Manufacturer ``total_sales`` / ``revenue`` grow exactly once per
  delivered order: ``SalesLedgerEntry`` is unique per order and the
  counters are bumped with ``F()`` expressions, never read-modify-write.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models

from modules.accounts.constants import AccountRole, AccountStatus
from modules.core.models import BaseModel
from shared.domain.events import DomainEventMixin


class Account(DomainEventMixin, BaseModel):
    """Marketplace identity of a customer, manufacturer or admin.

    ``user`` links the account to the Django user that authenticates API
    calls; it is nullable so accounts can be provisioned before sign-up
    completes.
    """

    user: models.OneToOneField = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="marketplace_account",
    )
    name: models.CharField = models.CharField(max_length=255)
    email: models.EmailField = models.EmailField(max_length=254, unique=True)
    role: models.CharField = models.CharField(
        max_length=20, choices=AccountRole.choices
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=AccountStatus.choices,
        default=AccountStatus.ACTIVE,
    )
    total_sales: models.PositiveIntegerField = models.PositiveIntegerField(default=0)
    revenue: models.DecimalField = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    class Meta:
        db_table = "accounts"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["role"], name="accounts_role_idx"),
            models.Index(fields=["status"], name="accounts_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                check=models.Q(revenue__gte=0),
                name="accounts_revenue_non_negative",
            ),
        ]

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN

    def __str__(self) -> str:
        return f"{self.name} ({self.role}, {self.status})"


class SalesLedgerEntry(BaseModel):
    """Append-only record of one delivered order's contribution to sales.

    The one-to-one link to the order is the uniqueness guard: a second
    attempt to book the same delivery cannot insert a row, so the counters
    on ``Account`` are never bumped twice for one order.
    """

    order: models.OneToOneField = models.OneToOneField(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="sales_ledger_entry",
    )
    manufacturer: models.ForeignKey = models.ForeignKey(
        "accounts.Account",
        on_delete=models.PROTECT,
        related_name="sales_ledger",
    )
    item_count: models.PositiveIntegerField = models.PositiveIntegerField()
    amount: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
    )

    class Meta:
        db_table = "sales_ledger"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.order_id}: {self.item_count} item(s), ${self.amount}"
