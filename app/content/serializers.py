"""
Serializers for post and live stream endpoints.
"""

from rest_framework import serializers

from content.models import LiveStream, Post, Visibility


class PostCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    body = serializers.CharField(required=False, allow_blank=True, default="")
    visibility = serializers.ChoiceField(choices=Visibility.choices, default=Visibility.SUBSCRIBER)
    price_cents = serializers.IntegerField(min_value=0, default=0)


class StreamCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    visibility = serializers.ChoiceField(choices=Visibility.choices, default=Visibility.SUBSCRIBER)
    price_cents = serializers.IntegerField(min_value=0, default=0)
    scheduled_at = serializers.DateTimeField(required=False, allow_null=True, default=None)


class PostSerializer(serializers.ModelSerializer):
    class Meta:
        model = Post
        fields = [
            "id",
            "creator",
            "title",
            "body",
            "visibility",
            "price_cents",
            "is_disabled",
            "created_at",
        ]
        read_only_fields = fields


class LiveStreamSerializer(serializers.ModelSerializer):
    class Meta:
        model = LiveStream
        fields = [
            "id",
            "creator",
            "title",
            "description",
            "visibility",
            "price_cents",
            "status",
            "scheduled_at",
            "is_disabled",
            "created_at",
        ]
        read_only_fields = fields
