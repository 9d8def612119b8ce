"""Notification API views: the caller's inbox plus the admin notice."""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.accounts.permissions import (
    HasMarketplaceAccount,
    IsPlatformAdmin,
    current_account,
)
from modules.core.pagination import StandardResultsSetPagination
from modules.notifications.serializers import (
    AdminNoticeSerializer,
    NotificationSerializer,
)
from modules.notifications.services import build_notification_service


class NotificationViewSet(ViewSet):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_notification_service()

    def get_permissions(self):
        if self.action == "admin_notice":
            return [IsPlatformAdmin()]
        return [HasMarketplaceAccount()]

    def list(self, request: Request) -> Response:
        """GET /api/v1/notifications/?unread=true"""
        unread_only = request.query_params.get("unread", "").lower() in ("1", "true")
        notifications = self._service.list_for_user(
            current_account(request).id, unread_only=unread_only
        )
        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(notifications, request, view=self)
        return paginator.get_paginated_response(
            NotificationSerializer(page, many=True).data
        )

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request: Request) -> Response:
        """GET /api/v1/notifications/unread-count/"""
        return Response({"unread": self._service.unread_count(current_account(request).id)})

    @action(detail=True, methods=["post"])
    def read(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/notifications/{pk}/read/"""
        notification = self._service.mark_read(pk, current_account(request).id)
        return Response(NotificationSerializer(notification).data)

    @action(detail=False, methods=["post"], url_path="read-all")
    def read_all(self, request: Request) -> Response:
        """POST /api/v1/notifications/read-all/"""
        changed = self._service.mark_all_read(current_account(request).id)
        return Response({"marked_read": changed})

    @action(detail=False, methods=["post"], url_path="admin-notice")
    def admin_notice(self, request: Request) -> Response:
        """POST /api/v1/notifications/admin-notice/"""
        serializer = AdminNoticeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        notification = self._service.send_admin_notice(
            admin_id=current_account(request).id, **serializer.validated_data
        )
        return Response(
            NotificationSerializer(notification).data, status=status.HTTP_201_CREATED
        )
