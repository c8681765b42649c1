"""
Serializers for the notification inbox API.
"""

from __future__ import annotations

from rest_framework import serializers

from notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    type_key = serializers.CharField(source="notification_type", read_only=True)

    class Meta:
        model = Notification
        fields = ["id", "type_key", "title", "body", "data", "is_read", "created_at"]
        read_only_fields = fields


class UnreadCountSerializer(serializers.Serializer):
    unread_count = serializers.IntegerField()


class MarkAllReadResponseSerializer(serializers.Serializer):
    marked_count = serializers.IntegerField()
