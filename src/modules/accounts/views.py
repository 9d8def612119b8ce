"""Account API views."""

from __future__ import annotations

from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.accounts.permissions import (
    HasMarketplaceAccount,
    IsPlatformAdmin,
    current_account,
)
from modules.accounts.serializers import AccountFilterSerializer, AccountSerializer
from modules.accounts.services import build_account_service
from modules.core.pagination import StandardResultsSetPagination


class AccountViewSet(ViewSet):
    """``me`` for every account; the registry for admins."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_account_service()

    def get_permissions(self):
        if self.action == "me":
            return [HasMarketplaceAccount()]
        return [IsPlatformAdmin()]

    @action(detail=False, methods=["get"])
    def me(self, request: Request) -> Response:
        """GET /api/v1/accounts/me/"""
        account = self._service.get_account(current_account(request).id)
        return Response(AccountSerializer(account).data)

    def list(self, request: Request) -> Response:
        """GET /api/v1/accounts/?role=manufacturer&status=inactive"""
        filters = AccountFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        accounts = self._service.list_accounts(dict(filters.validated_data))
        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(accounts, request, view=self)
        return paginator.get_paginated_response(AccountSerializer(page, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/accounts/{pk}/"""
        return Response(AccountSerializer(self._service.get_account(pk)).data)
