"""
Serializers for creator account endpoints.
"""

from rest_framework import serializers

from authentication.models import User


class CreatorApplicationSerializer(serializers.Serializer):
    display_name = serializers.CharField(max_length=255)
    subscription_price_cents = serializers.IntegerField(min_value=0, default=0)


class CreatorDecisionSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class CreatorStatusSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "email", "display_name", "role", "creator_status", "subscription_price_cents"]
        read_only_fields = fields
