"""
Normalized payment events.

Provider adapters turn raw webhook bodies into PaymentEvent instances;
the reconciler and its handlers only ever see this shape.

Event types:
    payment.completed, subscription.created, subscription.renewed
        A charge settled
    payment.failed          A charge was declined
    subscription.canceled   The provider stopped rebilling
    chargeback.created      A settled charge was reversed

Usage:
    from monetization.webhooks.events import EventMetadata, PaymentEvent

    event = PaymentEvent(
        event_type=PAYMENT_COMPLETED,
        provider_transaction_id="0312345678",
        gross_cents=999,
        provider_status="completed",
        metadata=EventMetadata(user_id="7", creator_id="3", transaction_type="subscription"),
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field

PAYMENT_COMPLETED = "payment.completed"
PAYMENT_FAILED = "payment.failed"
SUBSCRIPTION_CREATED = "subscription.created"
SUBSCRIPTION_RENEWED = "subscription.renewed"
SUBSCRIPTION_CANCELED = "subscription.canceled"
CHARGEBACK_CREATED = "chargeback.created"

SETTLEMENT_EVENTS = (PAYMENT_COMPLETED, SUBSCRIPTION_CREATED, SUBSCRIPTION_RENEWED)

# PaymentEvent.provider_status values
PROVIDER_COMPLETED = "completed"
PROVIDER_FAILED = "failed"
PROVIDER_PENDING = "pending"
PROVIDER_REFUNDED = "refunded"


@dataclass(frozen=True)
class EventMetadata:
    """
    Who paid whom, for what.

    Ids are kept as the provider echoed them back (strings); handlers
    convert them when they look rows up.
    """

    user_id: str | None = None
    creator_id: str | None = None
    transaction_type: str | None = None
    content_id: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.user_id and self.creator_id and self.transaction_type)


@dataclass(frozen=True)
class PaymentEvent:
    """
    A verified, provider-independent payment event.

    Attributes:
        event_type: One of the event type constants
        provider_transaction_id: Provider's id for the charge
        gross_cents: Charged amount in cents
        provider_status: completed, failed, refunded or pending
        metadata: Payer, creator, purchase type and content
        subscription_id: Our Subscription id, when the checkout carried one
        provider: Provider name
        currency: ISO 4217 code, lowercase
        failure_reason: Decline reason for failed charges
        raw: Decoded provider payload, kept for refund metadata
    """

    event_type: str
    provider_transaction_id: str
    gross_cents: int
    provider_status: str
    metadata: EventMetadata = field(default_factory=EventMetadata)
    subscription_id: str | None = None
    provider: str = "ccbill"
    currency: str = "usd"
    failure_reason: str | None = None
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_settlement(self) -> bool:
        return self.event_type in SETTLEMENT_EVENTS

    @property
    def is_settled(self) -> bool:
        """True when the provider reports the charge as captured."""
        return self.provider_status == PROVIDER_COMPLETED
