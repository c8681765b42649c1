"""
Subscription model: a fan's paid access to a creator.

Usage:
    from monetization.models import Subscription

    subscription = Subscription.objects.create(
        fan=fan,
        creator=creator,
        price_cents=creator.subscription_price_cents,
    )

    # State transitions using django-fsm
    subscription.activate(period_days=30)   # pending -> active
    subscription.save()

    Subscription.objects.currently_active().filter(fan=fan, creator=creator).exists()
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin, VersionedMixin
from core.models import BaseModel
from monetization.money import format_cents
from monetization.state_machines import SubscriptionState

if TYPE_CHECKING:
    from datetime import datetime


class SubscriptionQuerySet(models.QuerySet):
    def currently_active(self, now: datetime | None = None) -> SubscriptionQuerySet:
        """ACTIVE rows that have not yet run past expires_at."""
        now = now or timezone.now()
        return self.filter(state=SubscriptionState.ACTIVE).filter(
            Q(expires_at__isnull=True) | Q(expires_at__gt=now)
        )

    def stale(self, now: datetime | None = None) -> SubscriptionQuerySet:
        """ACTIVE rows whose expires_at has passed."""
        now = now or timezone.now()
        return self.filter(state=SubscriptionState.ACTIVE, expires_at__lte=now)


class Subscription(UUIDPrimaryKeyMixin, VersionedMixin, BaseModel):
    """
    A fan's subscription to one creator.

    State Flow:
        PENDING -> ACTIVE (first successful payment)
        ACTIVE -> ACTIVE (renewal payment, extends expires_at)
        PENDING/ACTIVE -> CANCELED (fan, provider cancel or chargeback)
        ACTIVE -> EXPIRED (expiry sweep)

    A canceled or expired row is terminal; subscribing again creates a
    new row.

    Fields:
        fan: Subscribing user
        creator: Creator subscribed to
        tier_name: Tier label (one tier per creator today)
        price_cents: Price per period in cents
        state: Current FSM state
        started_at: When the subscription first became active
        expires_at: End of the paid period
        canceled_at: When it was canceled
        cancellation_reason: Why it was canceled
        auto_renew: Whether the fan wants the next period billed
        version: Bumped on every save (VersionedMixin)
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    fan = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="subscriptions",
        help_text="User paying for the subscription",
    )

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="subscribers",
        help_text="Creator being subscribed to",
    )

    # ==========================================================================
    # Pricing
    # ==========================================================================

    tier_name = models.CharField(max_length=50, default="default")

    price_cents = models.PositiveIntegerField(
        help_text="Price per period in cents",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    state = FSMField(
        default=SubscriptionState.PENDING,
        choices=SubscriptionState.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the subscription (managed by FSM)",
    )

    # ==========================================================================
    # Period & Cancellation
    # ==========================================================================

    started_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True, db_index=True)
    canceled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(null=True, blank=True)
    auto_renew = models.BooleanField(default=True)

    objects = SubscriptionQuerySet.as_manager()

    class Meta:
        db_table = "monetization_subscription"
        ordering = ["-created_at"]
        verbose_name = "Subscription"
        verbose_name_plural = "Subscriptions"
        indexes = [
            models.Index(fields=["fan", "state"], name="sub_fan_state_idx"),
            models.Index(fields=["creator", "state"], name="sub_creator_state_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["fan", "creator"],
                condition=Q(state=SubscriptionState.ACTIVE),
                name="one_active_subscription_per_pair",
            ),
            models.CheckConstraint(
                condition=~Q(fan=F("creator")),
                name="subscription_fan_not_creator",
            ),
        ]

    def __str__(self) -> str:
        return f"Subscription({self.id}, {self.state}, {format_cents(self.price_cents)})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=state,
        source=SubscriptionState.PENDING,
        target=SubscriptionState.ACTIVE,
    )
    def activate(self, period_days: int):
        """
        Start the first paid period.

        Transition: PENDING -> ACTIVE
        """
        now = timezone.now()
        self.started_at = now
        self.expires_at = now + timedelta(days=period_days)

    @transition(
        field=state,
        source=SubscriptionState.ACTIVE,
        target=SubscriptionState.ACTIVE,
    )
    def renew(self, period_days: int):
        """
        Add one paid period.

        A renewal paid after a lapse starts counting from now, so the fan
        never pays for time already gone.
        """
        now = timezone.now()
        base = self.expires_at if self.expires_at and self.expires_at > now else now
        self.expires_at = base + timedelta(days=period_days)

    @transition(
        field=state,
        source=[SubscriptionState.PENDING, SubscriptionState.ACTIVE],
        target=SubscriptionState.CANCELED,
    )
    def cancel(self, reason: str | None = None):
        """
        Transition: PENDING/ACTIVE -> CANCELED

        Can be triggered by:
        - Fan cancellation
        - Provider subscription.canceled webhook
        - Chargeback on the payment that funded it
        """
        self.canceled_at = timezone.now()
        self.cancellation_reason = reason
        self.auto_renew = False

    @transition(
        field=state,
        source=SubscriptionState.ACTIVE,
        target=SubscriptionState.EXPIRED,
    )
    def expire(self):
        """Transition: ACTIVE -> EXPIRED"""
        self.auto_renew = False

    # ==========================================================================
    # Helper Properties
    # ==========================================================================

    @property
    def is_currently_active(self) -> bool:
        """ACTIVE and not past expires_at."""
        if self.state != SubscriptionState.ACTIVE:
            return False
        return self.expires_at is None or self.expires_at > timezone.now()

    @property
    def is_canceled(self) -> bool:
        return self.state == SubscriptionState.CANCELED
