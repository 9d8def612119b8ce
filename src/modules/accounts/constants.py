"""Account domain constants."""

from django.db import models


class AccountRole(models.TextChoices):
    CUSTOMER = "customer", "Customer"
    MANUFACTURER = "manufacturer", "Manufacturer"
    ADMIN = "admin", "Admin"


class AccountStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


TOGGLED_STATUS: dict[str, str] = {
    AccountStatus.ACTIVE: AccountStatus.INACTIVE,
    AccountStatus.INACTIVE: AccountStatus.ACTIVE,
}
