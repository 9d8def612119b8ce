"""Notification DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ["id", "user_id", "title", "message", "type", "is_read", "created_at"]
        read_only_fields = fields


class AdminNoticeSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    title = serializers.CharField(max_length=255)
    message = serializers.CharField()
