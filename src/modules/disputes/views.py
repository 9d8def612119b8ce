"""Complaint API views.

Any account may file a complaint and read the ones it is party to; the
verdict actions are restricted to platform admins.
"""

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
from modules.accounts.serializers import AccountSerializer
from modules.core.pagination import StandardResultsSetPagination
from modules.disputes.dtos import FileComplaintDTO
from modules.disputes.exceptions import ComplaintNotFound
from modules.disputes.serializers import (
    ComplaintFilterSerializer,
    ComplaintSerializer,
    FileComplaintSerializer,
    VerdictSerializer,
)
from modules.disputes.services import build_dispute_service
from modules.notifications.serializers import NotificationSerializer

VERDICT_ACTIONS = {"resolve", "warn_accused", "warn_complainant", "restrict"}


class ComplaintViewSet(ViewSet):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_dispute_service()

    def get_permissions(self):
        if self.action in VERDICT_ACTIONS:
            return [IsPlatformAdmin()]
        return [HasMarketplaceAccount()]

    def create(self, request: Request) -> Response:
        """POST /api/v1/complaints/"""
        serializer = FileComplaintSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = FileComplaintDTO(
            from_user_id=current_account(request).id, **serializer.validated_data
        )
        complaint = self._service.file_complaint(dto)
        return Response(ComplaintSerializer(complaint).data, status=status.HTTP_201_CREATED)

    def list(self, request: Request) -> Response:
        """GET /api/v1/complaints/?status=open&party=<uuid>

        Non-admins only ever see complaints they are party to.
        """
        filters = ComplaintFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        account = current_account(request)
        party = filters.validated_data.get("party")
        if not account.is_admin:
            party = account.id

        complaints = self._service.list_complaints(
            status=filters.validated_data.get("status"), party_id=party
        )
        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(complaints, request, view=self)
        return paginator.get_paginated_response(ComplaintSerializer(page, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/complaints/{pk}/"""
        complaint = self._service.get_complaint(pk)
        account = current_account(request)
        if not account.is_admin and account.id not in (
            complaint.from_user_id,
            complaint.to_user_id,
        ):
            raise ComplaintNotFound(f"Complaint {pk} not found.")
        return Response(ComplaintSerializer(complaint).data)

    # ------------------------------------------------------------------
    # Admin verdicts
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def resolve(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/complaints/{pk}/resolve/"""
        verdict = self._verdict(request)
        complaint = self._service.resolve(
            pk, current_account(request).id, verdict["admin_response"]
        )
        return Response(ComplaintSerializer(complaint).data)

    @action(detail=True, methods=["post"], url_path="warn-accused")
    def warn_accused(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/complaints/{pk}/warn-accused/"""
        verdict = self._verdict(request)
        notification = self._service.warn_accused(
            pk, current_account(request).id, verdict["admin_response"]
        )
        return Response(NotificationSerializer(notification).data)

    @action(detail=True, methods=["post"], url_path="warn-complainant")
    def warn_complainant(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/complaints/{pk}/warn-complainant/"""
        verdict = self._verdict(request)
        notification = self._service.warn_complainant(
            pk, current_account(request).id, verdict["admin_response"]
        )
        return Response(NotificationSerializer(notification).data)

    @action(detail=True, methods=["post"])
    def restrict(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/complaints/{pk}/restrict/"""
        account = self._service.restrict_account(pk, current_account(request).id)
        return Response(AccountSerializer(account).data)

    @staticmethod
    def _verdict(request: Request) -> dict:
        serializer = VerdictSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data
