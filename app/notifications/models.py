"""
In-app notification models.

- NotificationType: Code-defined notification kinds with their templates
- Notification: One rendered notification for one user

Design Decisions:
    - Types are TextChoices with templates in NOTIFICATION_TEMPLATES, not a
      lookup table: every type is emitted by code in this repository
    - Notification inherits from BaseModel (timestamps, newest first)
    - Rows are rendered once at creation; title and body are history
    - idempotency_key is unique when present so a retried delivery task
      cannot create the same notification twice

Usage:
    from notifications.models import Notification, NotificationType

    unread = Notification.objects.filter(recipient=user, is_read=False)
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.models import BaseModel


class NotificationType(models.TextChoices):
    PAYMENT_RECEIVED = "payment_received", "Payment received"
    SUBSCRIPTION_ACTIVATED = "subscription_activated", "Subscription activated"
    SUBSCRIPTION_RENEWED = "subscription_renewed", "Subscription renewed"
    SUBSCRIPTION_CANCELED = "subscription_canceled", "Subscription canceled"
    CONTENT_UNLOCKED = "content_unlocked", "Content unlocked"
    CHARGEBACK_RECEIVED = "chargeback_received", "Chargeback received"
    PAYOUT_COMPLETED = "payout_completed", "Payout completed"
    PAYOUT_FAILED = "payout_failed", "Payout failed"
    PAYOUT_CANCELLED = "payout_cancelled", "Payout cancelled"
    CREATOR_APPROVED = "creator_approved", "Creator approved"
    CREATOR_REJECTED = "creator_rejected", "Creator rejected"


# (title, body) format strings; placeholders come from the notification data.
# "{amount}" is derived from "amount_cents" when present.
NOTIFICATION_TEMPLATES: dict[str, tuple[str, str]] = {
    NotificationType.PAYMENT_RECEIVED: (
        "You received {amount}",
        "A {transaction_type} payment of {amount} was added to your earnings.",
    ),
    NotificationType.SUBSCRIPTION_ACTIVATED: (
        "Subscription active",
        "Your subscription is active until {expires_at}.",
    ),
    NotificationType.SUBSCRIPTION_RENEWED: (
        "Subscription renewed",
        "Your subscription was renewed until {expires_at}.",
    ),
    NotificationType.SUBSCRIPTION_CANCELED: (
        "Subscription canceled",
        "A subscription was canceled.",
    ),
    NotificationType.CONTENT_UNLOCKED: (
        "Content unlocked",
        "You now have access to the content you purchased.",
    ),
    NotificationType.CHARGEBACK_RECEIVED: (
        "Chargeback received",
        "A {amount} payment was charged back and removed from your earnings.",
    ),
    NotificationType.PAYOUT_COMPLETED: (
        "Payout sent",
        "Your payout of {amount} has been processed.",
    ),
    NotificationType.PAYOUT_FAILED: (
        "Payout failed",
        "Your payout of {amount} could not be processed: {failure_reason}",
    ),
    NotificationType.PAYOUT_CANCELLED: (
        "Payout cancelled",
        "Your payout request of {amount} was cancelled.",
    ),
    NotificationType.CREATOR_APPROVED: (
        "You're approved",
        "Your creator account is approved. You can now publish and earn.",
    ),
    NotificationType.CREATOR_REJECTED: (
        "Creator application declined",
        "Your creator application was not approved.",
    ),
}


class Notification(BaseModel):
    """
    Individual notification record for a user.

    Fields:
        recipient: User receiving the notification
        notification_type: One of NotificationType
        title: Fully rendered title
        body: Fully rendered body
        data: Context passed by the emitter (ids, amounts)
        is_read: Whether recipient has read this notification
        idempotency_key: Optional de-duplication key
    """

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
        help_text="User receiving this notification",
    )
    notification_type = models.CharField(
        max_length=50,
        choices=NotificationType.choices,
        db_index=True,
    )
    title = models.CharField(max_length=500)
    body = models.TextField(blank=True, default="")
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False, db_index=True)
    idempotency_key = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Idempotency key to prevent duplicate notifications",
    )

    class Meta:
        db_table = "notifications_notification"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["recipient", "is_read", "-created_at"],
                name="notif_recipient_unread_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["idempotency_key"],
                name="notif_idempotency_key_unique",
                condition=models.Q(idempotency_key__isnull=False),
            ),
        ]

    def __str__(self) -> str:
        read_status = "read" if self.is_read else "unread"
        return f"Notification({self.notification_type}) -> User {self.recipient_id} [{read_status}]"
