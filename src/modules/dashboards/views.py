"""Dashboard snapshot endpoints.

Each endpoint returns the full, freshly-read snapshot for the caller.
Clients watching the change feed call them again when signalled.
"""

from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.request import Request
from rest_framework.response import Response

from modules.accounts.permissions import (
    HasMarketplaceAccount,
    IsPlatformAdmin,
    current_account,
)
from modules.dashboards.services import build_dashboard_service


@api_view(["GET"])
@permission_classes([HasMarketplaceAccount])
def customer_dashboard(request: Request) -> Response:
    snapshot = build_dashboard_service().customer_dashboard(current_account(request).id)
    return Response(snapshot.model_dump(mode="json"))


@api_view(["GET"])
@permission_classes([HasMarketplaceAccount])
def manufacturer_hub(request: Request) -> Response:
    snapshot = build_dashboard_service().manufacturer_hub(current_account(request).id)
    return Response(snapshot.model_dump(mode="json"))


@api_view(["GET"])
@permission_classes([IsPlatformAdmin])
def admin_console(request: Request) -> Response:
    snapshot = build_dashboard_service().admin_console(current_account(request).id)
    return Response(snapshot.model_dump(mode="json"))
