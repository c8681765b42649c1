"""
DRF serializers for the monetization API.

This module provides serializers for:
- Earnings summaries and ledger entries
- Payout requests, history and admin actions
- Subscriptions and checkout requests (subscribe, unlock, tip)
- Access decisions

Related files:
    - models/: PaymentTransaction, Subscription, Entitlement, Payout
    - views.py: Monetization API views

Usage:
    serializer = PayoutRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    PayoutService.request_payout(request.user, **serializer.validated_data)
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

from monetization.ledger.models import LedgerEntry
from monetization.models import Payout, Subscription
from monetization.money import MIN_PAYOUT_CENTS, format_cents
from monetization.state_machines import PayoutAction, PayoutMethod, PayoutState


# =============================================================================
# Earnings
# =============================================================================


class EarningsSummarySerializer(serializers.Serializer):
    """Read-only view of ledger.types.EarningsSummary.as_dict()."""

    total_gross_cents = serializers.IntegerField()
    total_fees_cents = serializers.IntegerField()
    total_earnings_cents = serializers.IntegerField()
    total_refunds_cents = serializers.IntegerField()
    total_payouts_cents = serializers.IntegerField()
    total_adjustments_cents = serializers.IntegerField()
    pending_balance_cents = serializers.IntegerField()
    available_balance_cents = serializers.IntegerField()
    entry_count = serializers.IntegerField()


class LedgerEntrySerializer(serializers.ModelSerializer):
    provider_transaction_id = serializers.CharField(
        source="transaction.provider_transaction_id",
        default=None,
        read_only=True,
    )

    class Meta:
        model = LedgerEntry
        fields = [
            "id",
            "entry_type",
            "gross_cents",
            "platform_fee_cents",
            "net_cents",
            "description",
            "transaction",
            "provider_transaction_id",
            "created_at",
        ]
        read_only_fields = fields


# =============================================================================
# Payouts
# =============================================================================


class PayoutSerializer(serializers.ModelSerializer):
    amount_display = serializers.SerializerMethodField()

    class Meta:
        model = Payout
        fields = [
            "id",
            "creator",
            "amount_cents",
            "amount_display",
            "method",
            "state",
            "admin_notes",
            "failure_reason",
            "processed_at",
            "created_at",
        ]
        read_only_fields = fields

    def get_amount_display(self, obj) -> str:
        return format_cents(obj.amount_cents)


class AdminPayoutSerializer(PayoutSerializer):
    creator_email = serializers.EmailField(source="creator.email", read_only=True)
    processed_by = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta(PayoutSerializer.Meta):
        fields = PayoutSerializer.Meta.fields + [
            "creator_email",
            "method_details",
            "processed_by",
            "ledger_entry",
        ]
        read_only_fields = fields


class PayoutRequestSerializer(serializers.Serializer):
    """
    Payout request from a creator.

    Fields:
        amount_cents: Amount to withdraw, at least MIN_PAYOUT_CENTS
        method: Payout method
        details: Account details for the method (email, IBAN, wallet)
    """

    amount_cents = serializers.IntegerField(min_value=1)
    method = serializers.ChoiceField(choices=PayoutMethod.choices, default=PayoutMethod.BANK_TRANSFER)
    details = serializers.DictField(required=False, default=dict)

    def validate_amount_cents(self, value: int) -> int:
        if value < MIN_PAYOUT_CENTS:
            raise serializers.ValidationError(
                f"Minimum payout is {format_cents(MIN_PAYOUT_CENTS)}"
            )
        return value


class PayoutActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=PayoutAction.choices)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    failure_reason = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, default=None
    )


class PayoutStatusFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PayoutState.choices, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=500, default=100)


# =============================================================================
# Subscriptions & Checkout
# =============================================================================


class SubscriptionSerializer(serializers.ModelSerializer):
    creator_display_name = serializers.CharField(source="creator.display_name", read_only=True)
    is_currently_active = serializers.BooleanField(read_only=True)

    class Meta:
        model = Subscription
        fields = [
            "id",
            "fan",
            "creator",
            "creator_display_name",
            "tier_name",
            "price_cents",
            "state",
            "is_currently_active",
            "auto_renew",
            "started_at",
            "expires_at",
            "canceled_at",
            "cancellation_reason",
        ]
        read_only_fields = fields


class SubscribeSerializer(serializers.Serializer):
    creator_id = serializers.PrimaryKeyRelatedField(
        queryset=get_user_model().objects.all(),
        source="creator",
    )
    tier_name = serializers.CharField(max_length=100, required=False, default="default")


class CancelSubscriptionSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    at_period_end = serializers.BooleanField(required=False, default=True)


class TipSerializer(serializers.Serializer):
    creator_id = serializers.PrimaryKeyRelatedField(
        queryset=get_user_model().objects.all(),
        source="creator",
    )
    amount_cents = serializers.IntegerField(min_value=1)


class CheckoutSessionSerializer(serializers.Serializer):
    """
    Result of a checkout.

    payment_url is set when the fan must pay on the provider's form;
    transaction_id is set when the charge already settled.
    """

    transaction_type = serializers.CharField()
    amount_cents = serializers.IntegerField()
    provider = serializers.CharField()
    payment_url = serializers.CharField(allow_null=True)
    transaction_id = serializers.UUIDField(source="transaction.id", default=None)
    subscription_id = serializers.UUIDField(source="subscription.id", default=None)
    is_settled = serializers.BooleanField()


class AccessDecisionSerializer(serializers.Serializer):
    content_id = serializers.UUIDField()
    allowed = serializers.BooleanField()
    reason = serializers.CharField()
