"""
Factory Boy factories for monetization test data.

Usage:
    from monetization.tests.factories import (
        PaymentTransactionFactory,
        PayoutFactory,
        SubscriptionFactory,
        WebhookEventFactory,
        build_payment_event,
        ccbill_payload,
    )

    # Pending subscription between a new fan and a new creator
    subscription = SubscriptionFactory()

    # Active subscription expiring in 30 days
    subscription = SubscriptionFactory(active=True)

    # Settlement event for a ppv purchase
    event = build_payment_event(fan, creator, transaction_type="ppv", content_id=post.id)
"""

import uuid
from datetime import timedelta

import factory
from django.utils import timezone

from authentication.tests.factories import CreatorFactory, UserFactory
from monetization.models import Entitlement, PaymentTransaction, Payout, Subscription, WebhookEvent
from monetization.state_machines import (
    EntitlementType,
    PayoutMethod,
    SubscriptionState,
    TransactionStatus,
    TransactionType,
    WebhookEventStatus,
)
from monetization.webhooks.events import PAYMENT_COMPLETED, EventMetadata, PaymentEvent


class SubscriptionFactory(factory.django.DjangoModelFactory):
    """
    Factory for Subscription. Defaults to PENDING.

    Examples:
        pending = SubscriptionFactory()
        active = SubscriptionFactory(active=True)
        lapsed = SubscriptionFactory(active=True, expires_at=timezone.now() - timedelta(days=1))
    """

    class Meta:
        model = Subscription

    class Params:
        active = factory.Trait(
            state=SubscriptionState.ACTIVE,
            started_at=factory.LazyFunction(timezone.now),
            expires_at=factory.LazyFunction(lambda: timezone.now() + timedelta(days=30)),
        )

    fan = factory.SubFactory(UserFactory)
    creator = factory.SubFactory(CreatorFactory)
    tier_name = "default"
    price_cents = 999
    state = SubscriptionState.PENDING


class PaymentTransactionFactory(factory.django.DjangoModelFactory):
    """Factory for PaymentTransaction. Defaults to a PENDING subscription charge."""

    class Meta:
        model = PaymentTransaction

    payer = factory.SubFactory(UserFactory)
    creator = factory.SubFactory(CreatorFactory)
    gross_amount_cents = 999
    currency = "usd"
    transaction_type = TransactionType.SUBSCRIPTION
    status = TransactionStatus.PENDING
    provider = "ccbill"
    provider_transaction_id = factory.Sequence(lambda n: f"031000{n:04d}")


class EntitlementFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Entitlement

    user = factory.SubFactory(UserFactory)
    creator = factory.SubFactory(CreatorFactory)
    content_id = factory.LazyFunction(uuid.uuid4)
    entitlement_type = EntitlementType.PPV_PURCHASE


class PayoutFactory(factory.django.DjangoModelFactory):
    """Factory for Payout. Defaults to a PENDING $80.00 bank transfer."""

    class Meta:
        model = Payout

    creator = factory.SubFactory(CreatorFactory)
    amount_cents = 8000
    method = PayoutMethod.BANK_TRANSFER
    method_details = factory.LazyFunction(lambda: {"iban": "DE89370400440532013000"})


class WebhookEventFactory(factory.django.DjangoModelFactory):
    """
    Factory for WebhookEvent.

    Example:
        event = WebhookEventFactory(payload=ccbill_payload(fan, creator))
        failed = WebhookEventFactory(status=WebhookEventStatus.FAILED, retry_count=2)
    """

    class Meta:
        model = WebhookEvent

    provider = "ccbill"
    event_type = PAYMENT_COMPLETED
    provider_transaction_id = factory.Sequence(lambda n: f"041000{n:04d}")
    event_key = factory.LazyAttribute(
        lambda o: f"ccbill:{o.event_type}:{o.provider_transaction_id}"
    )
    payload = factory.LazyAttribute(
        lambda o: {"eventType": o.event_type, "transactionId": o.provider_transaction_id}
    )
    status = WebhookEventStatus.PENDING


# =============================================================================
# Event Builders
# =============================================================================


def build_payment_event(
    payer,
    creator,
    transaction_type=TransactionType.SUBSCRIPTION,
    gross_cents=10000,
    event_type=PAYMENT_COMPLETED,
    provider_transaction_id=None,
    content_id=None,
    subscription_id=None,
    **kwargs,
) -> PaymentEvent:
    """Normalized event as the CCBill adapter would produce it."""
    return PaymentEvent(
        event_type=event_type,
        provider_transaction_id=provider_transaction_id or f"ccb_{uuid.uuid4().hex[:12]}",
        gross_cents=gross_cents,
        provider_status=kwargs.pop("provider_status", "completed"),
        metadata=EventMetadata(
            user_id=str(payer.pk),
            creator_id=str(creator.pk),
            transaction_type=transaction_type,
            content_id=str(content_id) if content_id else None,
        ),
        subscription_id=str(subscription_id) if subscription_id else None,
        **kwargs,
    )


def ccbill_payload(
    payer,
    creator,
    event_type=PAYMENT_COMPLETED,
    transaction_id="0312345678",
    amount="100.00",
    transaction_type=TransactionType.SUBSCRIPTION,
    **extra,
) -> dict:
    """Decoded CCBill webhook body."""
    payload = {
        "eventType": event_type,
        "transactionId": transaction_id,
        "amount": amount,
        "currency": "840",
        "status": "approved",
        "customUserId": str(payer.pk),
        "customCreatorId": str(creator.pk),
        "customTransactionType": transaction_type,
    }
    payload.update(extra)
    return payload
