"""
Reconciliation of provider payment events.

This module provides the ReconciliationService which turns normalized
PaymentEvents into transaction, subscription, entitlement and ledger
state. Provider webhooks may arrive more than once and out of order; the
handlers in monetization.webhooks.handlers make each event idempotent,
this service makes each event atomic.

Processing Flow:
    1. The webhook view stores a WebhookEvent (unique per provider event)
    2. process_webhook_event() marks it processing and normalizes the
       payload with the provider adapter
    3. reconcile() runs the registered handler inside one transaction
    4. The WebhookEvent is marked processed, or failed with the error so
       the periodic retry task picks it up again

Usage:
    from monetization.services import ReconciliationService

    # Reconcile an already normalized event
    result = ReconciliationService.reconcile(event)

    # Process a stored webhook event end to end
    result = ReconciliationService.process_webhook_event(webhook_event)
    if not result.success:
        logger.warning("Webhook failed: %s", result.error)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import transaction

from core.services import BaseService, ServiceResult
from monetization.adapters import CCBillAdapter
from monetization.webhooks import handlers

if TYPE_CHECKING:
    from monetization.models import WebhookEvent
    from monetization.webhooks.events import PaymentEvent


class ReconciliationService(BaseService):
    """
    Applies payment events atomically and records webhook outcomes.

    A handler that returns a failure result has its writes rolled back
    the same way as one that raises; only the WebhookEvent bookkeeping
    survives.
    """

    @classmethod
    def reconcile(cls, event: PaymentEvent) -> ServiceResult:
        """
        Dispatch one event to its handler inside a single transaction.

        Unknown event types are acknowledged with a successful result.
        Exceptions propagate after the transaction has rolled back.
        """
        logger = cls.get_logger()
        logger.info(
            "Reconciling payment event",
            extra={
                "event_type": event.event_type,
                "provider": event.provider,
                "provider_transaction_id": event.provider_transaction_id,
                "gross_cents": event.gross_cents,
            },
        )

        with transaction.atomic():
            result = handlers.dispatch_event(event)
            if not result.success:
                transaction.set_rollback(True)

        if not result.success:
            logger.warning(
                "Payment event not applied",
                extra={
                    "event_type": event.event_type,
                    "provider_transaction_id": event.provider_transaction_id,
                    "error": result.error,
                    "error_code": result.error_code,
                },
            )
        return result

    @classmethod
    def process_webhook_event(cls, webhook_event: WebhookEvent) -> ServiceResult:
        """
        Normalize and reconcile a stored webhook event.

        The event ends up PROCESSED or FAILED; an exception raised while
        reconciling is logged, stored as the error message and returned
        as a failed result instead of propagating.
        """
        logger = cls.get_logger()

        if webhook_event.is_processed:
            logger.info(
                "Webhook event already processed, skipping",
                extra={
                    "webhook_event_id": str(webhook_event.id),
                    "event_key": webhook_event.event_key,
                },
            )
            return ServiceResult.success(webhook_event)

        webhook_event.mark_processing()
        webhook_event.save()

        try:
            event = CCBillAdapter.from_settings().parse_event(webhook_event.payload)
            result = cls.reconcile(event)
        except Exception as e:
            error_msg = f"{type(e).__name__}: {e}"
            logger.exception(
                "Webhook processing failed with exception",
                extra={
                    "webhook_event_id": str(webhook_event.id),
                    "event_key": webhook_event.event_key,
                    "error": error_msg,
                },
            )
            webhook_event.mark_failed(error_msg)
            webhook_event.save()
            return ServiceResult.failure(error_msg, error_code="RECONCILIATION_ERROR")

        if result.success:
            webhook_event.mark_processed()
            webhook_event.save()
            logger.info(
                "Webhook event processed",
                extra={
                    "webhook_event_id": str(webhook_event.id),
                    "event_key": webhook_event.event_key,
                    "retry_count": webhook_event.retry_count,
                },
            )
            return ServiceResult.success(webhook_event)

        error_msg = result.error or "Handler returned failure"
        if result.error_code:
            error_msg = f"{result.error_code}: {error_msg}"
        webhook_event.mark_failed(error_msg)
        webhook_event.save()
        return ServiceResult.failure(error_msg, error_code=result.error_code)
