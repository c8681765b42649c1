"""
Subscription service.

Owns the rules around a fan's subscription to a creator. State changes
go through the django-fsm transitions on Subscription; this service adds
validation, row locking and notifications.

Concurrency:
    activate() and cancel() lock the subscription row with
    select_for_update(), so two deliveries of the same payment cannot
    both extend one period. The partial unique constraint on ACTIVE rows
    stops two active rows for a pair when no row existed to lock.

Usage:
    from monetization.services import SubscriptionService

    result = SubscriptionService.create(fan, creator, price_cents=999)
    if result.success:
        SubscriptionService.activate(result.data.id)

    SubscriptionService.cancel(subscription.id, "Too expensive", at_period_end=True)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import IntegrityError
from django.utils import timezone
from django_fsm import TransitionNotAllowed

from authentication.services import CreatorService
from core.services import BaseService, ServiceResult
from monetization.models import Subscription
from monetization.state_machines import SubscriptionState
from notifications.models import NotificationType
from notifications.services import notify

if TYPE_CHECKING:
    from datetime import datetime
    from typing import Any

    from authentication.models import User


def subscription_period_days() -> int:
    return getattr(settings, "MONETIZATION_SUBSCRIPTION_PERIOD_DAYS", 30)


class SubscriptionService(BaseService):
    """
    Subscription lifecycle operations.

    Error codes:
        SELF_SUBSCRIPTION, INVALID_PRICE, CREATOR_NOT_APPROVED,
        ALREADY_SUBSCRIBED, SUBSCRIPTION_NOT_FOUND, INVALID_SUBSCRIPTION_STATE
    """

    @classmethod
    def create(
        cls,
        fan: User,
        creator: User,
        tier_name: str = "default",
        price_cents: int | None = None,
    ) -> ServiceResult[Subscription]:
        """
        Create a PENDING subscription.

        Args:
            fan: Subscribing user
            creator: Creator to subscribe to
            tier_name: Tier label
            price_cents: Price per period; defaults to the creator's price
        """
        if price_cents is None:
            price_cents = creator.subscription_price_cents

        if fan.pk == creator.pk:
            return ServiceResult.failure(
                "You cannot subscribe to yourself",
                error_code="SELF_SUBSCRIPTION",
            )
        if price_cents < 0:
            return ServiceResult.failure(
                "Subscription price cannot be negative",
                error_code="INVALID_PRICE",
            )
        if not CreatorService.is_creator_approved(creator.pk):
            return ServiceResult.failure(
                "This creator is not accepting subscriptions",
                error_code="CREATOR_NOT_APPROVED",
            )
        if cls.has_active_subscription(fan.pk, creator.pk):
            return ServiceResult.failure(
                "You already have an active subscription to this creator",
                error_code="ALREADY_SUBSCRIBED",
            )

        subscription = Subscription.objects.create(
            fan=fan,
            creator=creator,
            tier_name=tier_name,
            price_cents=price_cents,
        )
        cls.get_logger().info(
            "Subscription created",
            extra={
                "subscription_id": str(subscription.id),
                "fan_id": fan.pk,
                "creator_id": creator.pk,
                "price_cents": price_cents,
            },
        )
        return ServiceResult.success(subscription)

    @classmethod
    def activate(
        cls,
        subscription_id: Any,
        period_days: int | None = None,
    ) -> ServiceResult[Subscription]:
        """
        Move a PENDING subscription to ACTIVE.

        Idempotent: an already ACTIVE subscription is returned unchanged.
        Renewals go through renew(), which the reconciler calls once per
        provider transaction.

        Error codes:
            SUBSCRIPTION_NOT_FOUND, INVALID_SUBSCRIPTION_STATE, ALREADY_SUBSCRIBED
        """
        period_days = period_days or subscription_period_days()

        try:
            with cls.atomic():
                subscription = (
                    Subscription.objects.select_for_update().filter(pk=subscription_id).first()
                )
                if subscription is None:
                    return ServiceResult.failure(
                        "Subscription not found",
                        error_code="SUBSCRIPTION_NOT_FOUND",
                    )
                if subscription.state == SubscriptionState.ACTIVE:
                    return ServiceResult.success(subscription)

                cls.expire_lapsed_for_pair(subscription)
                subscription.activate(period_days)
                subscription.save()
        except TransitionNotAllowed:
            return ServiceResult.failure(
                f"Cannot activate a {subscription.state} subscription",
                error_code="INVALID_SUBSCRIPTION_STATE",
            )
        except IntegrityError:
            return ServiceResult.failure(
                "You already have an active subscription to this creator",
                error_code="ALREADY_SUBSCRIBED",
            )

        cls.get_logger().info(
            "Subscription activated",
            extra={
                "subscription_id": str(subscription.id),
                "expires_at": subscription.expires_at.isoformat(),
            },
        )
        return ServiceResult.success(subscription)

    @classmethod
    def cancel(
        cls,
        subscription_id: Any,
        reason: str | None = None,
        at_period_end: bool = False,
        requested_by: User | None = None,
    ) -> ServiceResult[Subscription]:
        """
        Cancel a subscription.

        With at_period_end the fan keeps access until expires_at and only
        auto-renew is switched off. Otherwise the row moves to CANCELED
        immediately. Canceling an already canceled row is a no-op.

        Args:
            subscription_id: Subscription to cancel
            reason: Stored as cancellation_reason
            at_period_end: Keep access until the paid period ends
            requested_by: When given, must be the subscribing fan

        Error codes:
            SUBSCRIPTION_NOT_FOUND, NOT_OWNER, INVALID_SUBSCRIPTION_STATE
        """
        with cls.atomic():
            subscription = (
                Subscription.objects.select_for_update().filter(pk=subscription_id).first()
            )
            if subscription is None:
                return ServiceResult.failure(
                    "Subscription not found",
                    error_code="SUBSCRIPTION_NOT_FOUND",
                )
            if requested_by is not None and subscription.fan_id != requested_by.pk:
                return ServiceResult.failure(
                    "You can only cancel your own subscriptions",
                    error_code="NOT_OWNER",
                )
            if subscription.state == SubscriptionState.CANCELED:
                return ServiceResult.success(subscription)

            if at_period_end:
                if subscription.state != SubscriptionState.ACTIVE:
                    return ServiceResult.failure(
                        f"Cannot cancel a {subscription.state} subscription",
                        error_code="INVALID_SUBSCRIPTION_STATE",
                    )
                subscription.auto_renew = False
                subscription.cancellation_reason = reason
                subscription.save(update_fields=["auto_renew", "cancellation_reason", "updated_at"])
            else:
                try:
                    subscription.cancel(reason)
                except TransitionNotAllowed:
                    return ServiceResult.failure(
                        f"Cannot cancel a {subscription.state} subscription",
                        error_code="INVALID_SUBSCRIPTION_STATE",
                    )
                subscription.save()

            notify(
                NotificationType.SUBSCRIPTION_CANCELED,
                subscription.creator_id,
                {
                    "subscription_id": subscription.id,
                    "fan_id": subscription.fan_id,
                    "at_period_end": at_period_end,
                },
            )

        cls.get_logger().info(
            "Subscription canceled",
            extra={
                "subscription_id": str(subscription.id),
                "at_period_end": at_period_end,
                "reason": reason,
            },
        )
        return ServiceResult.success(subscription)

    @classmethod
    def expire_stale(cls, now: datetime | None = None) -> int:
        """
        Move ACTIVE subscriptions past expires_at to EXPIRED.

        Access checks already ignore these rows; the sweep keeps the
        state column honest for reporting and for the unique constraint.

        Returns:
            Number of subscriptions expired
        """
        now = now or timezone.now()
        expired = 0
        for subscription_id in Subscription.objects.stale(now).values_list("id", flat=True):
            with cls.atomic():
                subscription = (
                    Subscription.objects.select_for_update()
                    .stale(now)
                    .filter(pk=subscription_id)
                    .first()
                )
                if subscription is None:
                    continue
                subscription.expire()
                subscription.save()
                expired += 1

        if expired:
            cls.get_logger().info("Expired subscriptions", extra={"count": expired})
        return expired

    @classmethod
    def expire_lapsed_for_pair(cls, subscription: Subscription) -> None:
        """Expire a lapsed ACTIVE row for the same pair so it frees the unique slot."""
        lapsed = (
            Subscription.objects.select_for_update()
            .stale()
            .filter(fan_id=subscription.fan_id, creator_id=subscription.creator_id)
            .exclude(pk=subscription.pk)
        )
        for row in lapsed:
            row.expire()
            row.save()

    @classmethod
    def has_active_subscription(cls, fan_id: Any, creator_id: Any) -> bool:
        return (
            Subscription.objects.currently_active()
            .filter(fan_id=fan_id, creator_id=creator_id)
            .exists()
        )

    @classmethod
    def list_for_fan(cls, fan: User):
        return Subscription.objects.filter(fan=fan).select_related("creator")
