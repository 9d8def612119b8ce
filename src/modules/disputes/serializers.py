"""Complaint DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.disputes.constants import ComplaintStatus
from modules.disputes.models import Complaint


class FileComplaintSerializer(serializers.Serializer):
    """The complainant is the caller."""

    to_user_id = serializers.UUIDField()
    order_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    subject = serializers.CharField(max_length=255)
    message = serializers.CharField()


class VerdictSerializer(serializers.Serializer):
    admin_response = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, default=None
    )


class ComplaintFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ComplaintStatus.choices, required=False)
    party = serializers.UUIDField(required=False)


class ComplaintSerializer(serializers.ModelSerializer):
    order_reference = serializers.CharField(read_only=True, allow_null=True)
    is_direct = serializers.BooleanField(read_only=True)

    class Meta:
        model = Complaint
        fields = [
            "id",
            "from_user_id",
            "to_user_id",
            "order_id",
            "order_reference",
            "is_direct",
            "subject",
            "message",
            "status",
            "resolved_by_id",
            "resolved_at",
            "resolution_notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
