"""
Celery tasks for notification delivery.

Tasks:
    deliver_notification: Render and store an in-app notification

Design:
    - Idempotent when an idempotency_key is given: a retried or duplicated
      task finds the existing row and stops
    - Push and email channels are not delivered from this service

Usage:
    # Scheduled by notifications.services.notify(); rarely called directly
    deliver_notification.delay("payout_completed", "42", {"amount_cents": 8000})
"""

from __future__ import annotations

import logging

from celery import shared_task

from notifications.services import NotificationService

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def deliver_notification(
    self,
    type_key: str,
    recipient_id: str,
    data: dict | None = None,
    idempotency_key: str | None = None,
) -> bool:
    """
    Create the in-app notification.

    Returns:
        True if created or already present, False for unknown types

    Raises:
        Exception: Database errors propagate and trigger a retry
    """
    result = NotificationService.create_notification(
        recipient_id=recipient_id,
        type_key=type_key,
        data=data,
        idempotency_key=idempotency_key,
    )
    if result.success or result.error_code == "DUPLICATE":
        return True

    logger.warning(
        "Notification not delivered",
        extra={
            "type_key": type_key,
            "recipient_id": recipient_id,
            "error_code": result.error_code,
        },
    )
    return False
