"""Account domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import NotFound, Unauthorized


class AccountNotFound(NotFound):
    """The referenced user account does not exist."""


class InactiveAccount(Unauthorized):
    """The account is restricted and cannot act on the marketplace."""


class RoleRequired(Unauthorized):
    """The operation needs an account with a different role."""
