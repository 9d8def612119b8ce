"""Domain events for the Accounts bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class AccountStatusToggled(DomainEvent):
    """Raised when an admin flips an account between active and inactive."""

    resource_type = "account"
    change_kind = "status_changed"


@dataclass(frozen=True)
class ManufacturerSalesRecorded(DomainEvent):
    """Raised when a delivered order is booked into a manufacturer's totals."""

    resource_type = "account"
    change_kind = "sales_recorded"
