"""
Webhook endpoint for CCBill.

The view:
1. Refuses to run when CCBill is not configured (503)
2. Verifies the HMAC-SHA256 signature over the raw body (401)
3. Stores a WebhookEvent, unique per provider event
4. Processes it inline through ReconciliationService
5. Returns 200 once the event is on record, even if processing failed

A failed event stays FAILED with its error message and is picked up by
the retry_failed_webhook_events task, so CCBill never has to redeliver
an event we already hold.

Usage:
    # In urls.py
    from monetization.webhooks.views import ccbill_webhook

    urlpatterns = [
        path("webhooks/ccbill/", ccbill_webhook, name="ccbill-webhook"),
    ]
"""

from __future__ import annotations

import logging

from django.db import DatabaseError
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from monetization.adapters import CCBillAdapter
from monetization.exceptions import (
    InvalidWebhookPayloadError,
    ProviderNotConfiguredError,
    WebhookSignatureError,
)
from monetization.models import WebhookEvent
from monetization.services.reconciliation_service import ReconciliationService
from monetization.state_machines import WebhookEventStatus

logger = logging.getLogger(__name__)


def _error(exc) -> JsonResponse:
    return JsonResponse(exc.to_dict(), status=exc.http_status)


@csrf_exempt
@require_POST
def ccbill_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive a CCBill webhook.

    Returns:
        JsonResponse with status:
        - 200: Event recorded (new, duplicate, or failed during processing)
        - 400: Body is not a CCBill event
        - 401: Missing or invalid signature
        - 503: CCBill is not configured
        - 500: The event could not be recorded
    """
    adapter = CCBillAdapter.from_settings()
    if not adapter.is_configured:
        logger.error("CCBill webhook received but CCBill is not configured")
        return _error(ProviderNotConfiguredError("Payment provider is not configured"))

    body = request.body
    signature = adapter.signature_from_headers(request.META)
    if not adapter.verify_signature(body, signature):
        logger.warning(
            "CCBill webhook signature verification failed",
            extra={"has_signature": bool(signature), "remote_addr": request.META.get("REMOTE_ADDR")},
        )
        return _error(WebhookSignatureError("Invalid webhook signature"))

    try:
        payload = adapter.decode_payload(body, request.content_type or "")
        event_key = adapter.event_key(payload)
    except InvalidWebhookPayloadError as e:
        logger.warning("CCBill webhook payload rejected", extra={"error": e.message})
        return _error(e)

    event_type = str(payload["eventType"])
    logger.info(
        f"Received CCBill webhook: {event_type}",
        extra={"event_key": event_key, "event_type": event_type},
    )

    try:
        webhook_event, created = WebhookEvent.objects.get_or_create(
            event_key=event_key,
            defaults={
                "provider": adapter.provider,
                "event_type": event_type,
                "provider_transaction_id": str(payload["transactionId"]),
                "payload": payload,
                "status": WebhookEventStatus.PENDING,
            },
        )
    except DatabaseError:
        logger.exception("Failed to record CCBill webhook", extra={"event_key": event_key})
        return JsonResponse({"error": "Could not record event"}, status=500)

    if not created and webhook_event.status in (
        WebhookEventStatus.PROCESSED,
        WebhookEventStatus.PROCESSING,
    ):
        logger.info(
            f"Webhook already {webhook_event.status}, acknowledging",
            extra={"event_key": event_key, "webhook_event_id": str(webhook_event.id)},
        )
        return JsonResponse({"received": True, "duplicate": True})

    ReconciliationService.process_webhook_event(webhook_event)
    return JsonResponse({"received": True})
