"""
Celery tasks for monetization.

This module provides async tasks for:
- Reprocessing stored webhook events
- Retrying failed webhook events
- Resetting webhook events stuck in PROCESSING
- Expiring subscriptions whose paid period has ended

The periodic tasks are registered with django-celery-beat by the
0002_periodic_tasks migration.

Usage:
    from monetization.tasks import process_webhook_event

    # Reprocess a stored webhook event
    process_webhook_event.delay(str(webhook_event.id))
"""

from __future__ import annotations

import logging
from datetime import timedelta
from uuid import UUID

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from monetization.models import WebhookEvent
from monetization.services.reconciliation_service import ReconciliationService
from monetization.services.subscription_service import SubscriptionService
from monetization.state_machines import WebhookEventStatus

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

STUCK_PROCESSING_THRESHOLD_MINUTES = 30
RETRY_BATCH_SIZE = 100


def max_webhook_retries() -> int:
    return getattr(settings, "MONETIZATION_WEBHOOK_MAX_RETRIES", 5)


# =============================================================================
# Webhook Processing Tasks
# =============================================================================


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=300,
    retry_kwargs={"max_retries": 5},
    acks_late=True,
)
def process_webhook_event(self, webhook_event_id: str) -> dict:
    """
    Reconcile a stored webhook event.

    Handler failures are recorded on the event and left to
    retry_failed_webhook_events; only errors outside reconciliation
    (loading the row, for instance) trigger a Celery retry.

    Args:
        webhook_event_id: UUID of the WebhookEvent to process

    Returns:
        Dict with processing result status
    """
    if isinstance(webhook_event_id, str):
        webhook_event_id = UUID(webhook_event_id)

    try:
        webhook_event = WebhookEvent.objects.get(id=webhook_event_id)
    except WebhookEvent.DoesNotExist:
        logger.error(
            "WebhookEvent not found",
            extra={"webhook_event_id": str(webhook_event_id)},
        )
        return {"status": "not_found", "webhook_event_id": str(webhook_event_id)}

    if webhook_event.is_processed:
        return {"status": "already_processed", "webhook_event_id": str(webhook_event_id)}

    result = ReconciliationService.process_webhook_event(webhook_event)
    if result.success:
        return {"status": "processed", "webhook_event_id": str(webhook_event_id)}

    return {
        "status": "failed",
        "webhook_event_id": str(webhook_event_id),
        "error": result.error,
    }


@shared_task
def retry_failed_webhook_events() -> dict:
    """
    Periodic task to re-queue failed webhook events.

    Events that reached MONETIZATION_WEBHOOK_MAX_RETRIES stay FAILED for
    manual review.

    Returns:
        Dict with count of webhook events queued for retry
    """
    failed_events = WebhookEvent.objects.filter(
        status=WebhookEventStatus.FAILED,
        retry_count__lt=max_webhook_retries(),
    ).order_by("created_at")[:RETRY_BATCH_SIZE]

    queued_count = 0
    for webhook_event in failed_events:
        process_webhook_event.delay(str(webhook_event.id))
        queued_count += 1
        logger.info(
            "Queued failed webhook event for retry",
            extra={
                "webhook_event_id": str(webhook_event.id),
                "event_key": webhook_event.event_key,
                "retry_count": webhook_event.retry_count,
            },
        )

    if queued_count:
        logger.info(
            f"Queued {queued_count} failed webhook events for retry",
            extra={"queued_count": queued_count},
        )
    return {"queued_count": queued_count}


@shared_task
def reset_stuck_webhook_events() -> dict:
    """
    Periodic task to fail webhook events stuck in PROCESSING.

    A worker that died mid-reconciliation leaves its event PROCESSING;
    after STUCK_PROCESSING_THRESHOLD_MINUTES it becomes FAILED so the
    retry task picks it up.

    Returns:
        Dict with count of webhook events reset
    """
    threshold = timezone.now() - timedelta(minutes=STUCK_PROCESSING_THRESHOLD_MINUTES)

    stuck_events = WebhookEvent.objects.filter(
        status=WebhookEventStatus.PROCESSING,
        updated_at__lt=threshold,
    )

    reset_count = 0
    for webhook_event in stuck_events:
        stuck_since = webhook_event.updated_at
        webhook_event.mark_failed("Processing timed out - reset for retry")
        webhook_event.save()
        reset_count += 1
        logger.warning(
            "Reset stuck webhook event",
            extra={
                "webhook_event_id": str(webhook_event.id),
                "event_key": webhook_event.event_key,
                "stuck_since": stuck_since.isoformat(),
            },
        )

    return {"reset_count": reset_count}


# =============================================================================
# Subscription Tasks
# =============================================================================


@shared_task
def expire_subscriptions() -> dict:
    """Periodic task moving lapsed ACTIVE subscriptions to EXPIRED."""
    expired_count = SubscriptionService.expire_stale()
    return {"expired_count": expired_count}
