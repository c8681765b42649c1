"""
WebhookEvent model for provider webhook tracking.

Every verified webhook is stored before it is processed. The row is the
durable record of what arrived, what happened to it and why it failed,
and it is what the retry task works from.

Usage:
    from monetization.models import WebhookEvent

    event, created = WebhookEvent.objects.get_or_create(
        event_key="ccbill:payment.completed:0312345678",
        defaults={"provider": "ccbill", "event_type": "payment.completed", "payload": body},
    )
    if not created and event.is_processed:
        return JsonResponse({"received": True})
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from monetization.state_machines import WebhookEventStatus


class WebhookEvent(UUIDPrimaryKeyMixin, BaseModel):
    """
    Stored provider webhook.

    Processing Flow:
        1. Signature verified by the endpoint
        2. get_or_create by event_key
        3. Already PROCESSED -> acknowledged, nothing else happens
        4. mark_processing, normalize, reconcile
        5. mark_processed, or mark_failed with the error message
        6. FAILED rows are retried by retry_failed_webhook_events

    Fields:
        provider: Provider name
        event_key: provider:event_type:provider_transaction_id
        event_type: Normalized event type
        provider_transaction_id: Provider's transaction id, if any
        payload: Decoded webhook body
        status: Processing status
        processed_at: When processing succeeded
        error_message: Last failure
        retry_count: Number of processing attempts
    """

    provider = models.CharField(max_length=30, default="ccbill")

    event_key = models.CharField(
        max_length=255,
        unique=True,
        help_text="Unique per provider event - constraint for idempotency",
    )

    event_type = models.CharField(max_length=100, db_index=True)

    provider_transaction_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        db_index=True,
    )

    payload = models.JSONField(help_text="Decoded webhook body")

    status = models.CharField(
        max_length=20,
        choices=WebhookEventStatus.choices,
        default=WebhookEventStatus.PENDING,
        db_index=True,
    )

    processed_at = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(null=True, blank=True)
    retry_count = models.PositiveSmallIntegerField(default=0)

    class Meta:
        db_table = "monetization_webhook_event"
        ordering = ["-created_at"]
        verbose_name = "Webhook Event"
        verbose_name_plural = "Webhook Events"
        indexes = [
            models.Index(fields=["status", "retry_count"], name="webhook_status_retry_idx"),
            models.Index(fields=["status", "updated_at"], name="webhook_status_updated_idx"),
        ]

    def __str__(self) -> str:
        return f"WebhookEvent({self.event_key}, {self.status})"

    @property
    def is_processed(self) -> bool:
        return self.status == WebhookEventStatus.PROCESSED

    @property
    def can_retry(self) -> bool:
        max_retries = getattr(settings, "MONETIZATION_WEBHOOK_MAX_RETRIES", 5)
        return self.status == WebhookEventStatus.FAILED and self.retry_count < max_retries

    # ==========================================================================
    # Helper Methods (do not save - caller must save after calling)
    # ==========================================================================

    def mark_processing(self) -> None:
        self.status = WebhookEventStatus.PROCESSING
        self.retry_count += 1

    def mark_processed(self) -> None:
        self.status = WebhookEventStatus.PROCESSED
        self.processed_at = timezone.now()
        self.error_message = None

    def mark_failed(self, error_message: str) -> None:
        self.status = WebhookEventStatus.FAILED
        self.error_message = error_message[:2000]
