"""Resolve the acting marketplace account from an authenticated request."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rest_framework.permissions import BasePermission
from rest_framework.request import Request

from modules.accounts.constants import AccountRole

if TYPE_CHECKING:
    from modules.accounts.models import Account


def account_for(user: Any) -> Account | None:
    # Reverse one-to-one access raises RelatedObjectDoesNotExist, an
    # AttributeError subclass, when no account is linked.
    return getattr(user, "marketplace_account", None)


def current_account(request: Request) -> Account:
    """The ``Account`` linked to ``request.user``.

    Only call from views guarded by ``HasMarketplaceAccount``.
    """
    account = account_for(request.user)
    assert account is not None, "HasMarketplaceAccount must guard this view"
    return account


class HasMarketplaceAccount(BasePermission):
    """Authenticated user that is linked to a marketplace account."""

    message = "The authenticated user has no marketplace account."

    def has_permission(self, request: Request, view: Any) -> bool:
        user = request.user
        return bool(
            user and user.is_authenticated and account_for(user) is not None
        )


class IsPlatformAdmin(HasMarketplaceAccount):
    """Linked account with the admin role."""

    message = "This endpoint is restricted to platform admins."

    def has_permission(self, request: Request, view: Any) -> bool:
        if not super().has_permission(request, view):
            return False
        return account_for(request.user).role == AccountRole.ADMIN
