"""Account service layer (Use Cases).

Owns the two mutations the workflow core performs on accounts:

- toggling ``status`` when an admin restricts (or un-restricts) a user;
- booking a delivered order into the manufacturer's ``total_sales`` /
  ``revenue``, exactly once per order.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

import structlog

from modules.accounts.constants import TOGGLED_STATUS, AccountRole
from modules.accounts.events import AccountStatusToggled, ManufacturerSalesRecorded
from modules.accounts.exceptions import AccountNotFound, InactiveAccount, RoleRequired
from modules.core import channels
from modules.core.db import unit_of_work
from modules.core.outbox import record

if TYPE_CHECKING:
    from modules.accounts.models import Account
    from modules.accounts.repositories.interfaces import IAccountRepository

logger = structlog.get_logger(__name__)


class AccountService:
    """Application service for the Account Registry.

    Receives an ``IAccountRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IAccountRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @unit_of_work
    def toggle_status(self, account_id: UUID) -> Account:
        """Flip ``active`` ↔ ``inactive`` under a row lock.

        A toggle, not a ban: calling it twice restores the original status.

        Raises:
            AccountNotFound: account does not exist.
        """
        account = self._repo.get_for_update(str(account_id))
        if not account:
            raise AccountNotFound(f"Account {account_id} not found.")

        old_status = account.status
        account.status = TOGGLED_STATUS[old_status]
        account.add_domain_event(
            AccountStatusToggled(
                aggregate_id=account.id,
                channels=(channels.account(account.id), channels.ALL_ACCOUNTS),
            )
        )
        self._repo.save(account)
        logger.info(
            "account.status_toggled",
            account_id=str(account.id),
            old_status=old_status,
            new_status=account.status,
        )
        return account

    def record_delivery(
        self,
        order_id: UUID,
        manufacturer_id: UUID,
        item_count: int,
        amount: Decimal,
    ) -> bool:
        """Book one delivered order into the manufacturer's totals.

        Must run inside the caller's transaction so the ledger row, the
        counter increment and the order's status change commit together.
        Returns ``False`` (and changes nothing) if the order is already
        booked.

        Raises:
            AccountNotFound: the manufacturer account does not exist.
        """
        log = logger.bind(order_id=str(order_id), manufacturer_id=str(manufacturer_id))

        if not self._repo.add_ledger_entry(order_id, manufacturer_id, item_count, amount):
            log.warning("account.delivery_already_recorded")
            return False

        updated = self._repo.increment_sales(manufacturer_id, item_count, amount)
        if not updated:
            raise AccountNotFound(f"Manufacturer {manufacturer_id} not found.")

        record(
            [
                ManufacturerSalesRecorded(
                    aggregate_id=manufacturer_id,
                    channels=(channels.account(manufacturer_id), channels.ALL_ACCOUNTS),
                )
            ],
            topic="accounts",
        )
        log.info("account.sales_recorded", item_count=item_count, amount=str(amount))
        return True

    # ------------------------------------------------------------------
    # Guards used by the workflow services
    # ------------------------------------------------------------------

    def require_account(self, account_id: UUID) -> Account:
        """Raises ``AccountNotFound`` for an unknown id."""
        account = self._repo.get_by_id(str(account_id))
        if not account:
            raise AccountNotFound(f"Account {account_id} not found.")
        return account

    def require_active(self, account_id: UUID) -> Account:
        """Raises ``InactiveAccount`` for a restricted account."""
        account = self.require_account(account_id)
        if not account.is_active:
            raise InactiveAccount(
                f"Account {account_id} is {account.status} and cannot perform this action."
            )
        return account

    def require_admin(self, account_id: UUID) -> Account:
        """Raises ``RoleRequired`` unless the account is an active admin."""
        account = self.require_active(account_id)
        if account.role != AccountRole.ADMIN:
            raise RoleRequired(f"Account {account_id} is not an admin.")
        return account

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_account(self, account_id: UUID) -> Account:
        return self.require_account(account_id)

    def list_accounts(self, filters: Optional[Dict[str, Any]] = None) -> List[Account]:
        return self._repo.list(filters)

    def platform_gmv(self) -> Decimal:
        """Gross merchandise value: revenue booked by every manufacturer."""
        return self._repo.total_revenue()


def build_account_service() -> AccountService:
    """Service wired to the Django ORM repository."""
    from modules.accounts.repositories import AccountDjangoRepository

    return AccountService(repository=AccountDjangoRepository())
