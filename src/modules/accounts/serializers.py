"""Account DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.accounts.constants import AccountRole, AccountStatus
from modules.accounts.models import Account


class AccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = Account
        fields = [
            "id",
            "name",
            "email",
            "role",
            "status",
            "total_sales",
            "revenue",
            "created_at",
        ]
        read_only_fields = fields


class AccountFilterSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=AccountRole.choices, required=False)
    status = serializers.ChoiceField(choices=AccountStatus.choices, required=False)
