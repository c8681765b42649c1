"""
Notification service layer.

Services:
    NotificationService: Notification creation and read status management
    notify: Fire-and-forget entry point used by money and account code

Design Principles:
    - notify() never raises into its caller; a lost notification must not
      roll back the payment, payout or approval that triggered it
    - Delivery is scheduled with transaction.on_commit so a rolled-back
      reconciliation never notifies anyone
    - Rendering happens once, in the Celery task, from code-defined
      templates

Usage:
    from notifications.services import notify
    from notifications.models import NotificationType

    notify(
        NotificationType.PAYMENT_RECEIVED,
        creator.id,
        {"amount_cents": 10000, "transaction_type": "subscription"},
        idempotency_key=f"payment_received:{txn.id}",
    )
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from django.core.serializers.json import DjangoJSONEncoder
from django.db import IntegrityError, transaction

from core.services import BaseService, ServiceResult
from notifications.models import NOTIFICATION_TEMPLATES, Notification

if TYPE_CHECKING:
    from typing import Any

    from authentication.models import User

logger = logging.getLogger(__name__)


class _TemplateContext(dict):
    """Renders unknown placeholders as empty strings."""

    def __missing__(self, key: str) -> str:
        return ""


def _render_context(data: dict[str, Any]) -> _TemplateContext:
    context = _TemplateContext(data)
    amount_cents = data.get("amount_cents")
    if amount_cents is not None:
        context["amount"] = f"${int(amount_cents) / 100:,.2f}"
    return context


class NotificationService(BaseService):
    """
    Service for notification operations.

    Methods:
        create_notification: Render and store a notification (idempotent by key)
        mark_as_read: Mark a single notification as read
        mark_all_as_read: Mark all user's unread notifications as read
    """

    @classmethod
    def create_notification(
        cls,
        recipient_id: Any,
        type_key: str,
        data: dict[str, Any] | None = None,
        idempotency_key: str | None = None,
    ) -> ServiceResult[Notification]:
        """
        Create a notification for a user from its type template.

        Error codes:
            TYPE_NOT_FOUND: No template for type_key
            DUPLICATE: A notification with this idempotency_key exists
        """
        data = data or {}

        templates = NOTIFICATION_TEMPLATES.get(type_key)
        if templates is None:
            cls.get_logger().warning(
                "Notification type not found",
                extra={"type_key": type_key},
            )
            return ServiceResult.failure(
                f"Notification type not found: {type_key}",
                error_code="TYPE_NOT_FOUND",
            )

        if idempotency_key and Notification.objects.filter(
            idempotency_key=idempotency_key
        ).exists():
            return ServiceResult.failure(
                f"Notification with idempotency_key already exists: {idempotency_key}",
                error_code="DUPLICATE",
            )

        context = _render_context(data)
        title_template, body_template = templates

        try:
            with transaction.atomic():
                notification = Notification.objects.create(
                    recipient_id=recipient_id,
                    notification_type=type_key,
                    title=title_template.format_map(context),
                    body=body_template.format_map(context),
                    data=data,
                    idempotency_key=idempotency_key,
                )
        except IntegrityError:
            # Concurrent task run won the insert
            return ServiceResult.failure(
                f"Notification with idempotency_key already exists: {idempotency_key}",
                error_code="DUPLICATE",
            )

        cls.get_logger().info(
            "Created notification",
            extra={
                "notification_id": notification.pk,
                "type_key": type_key,
                "recipient_id": recipient_id,
            },
        )
        return ServiceResult.success(notification)

    @classmethod
    def mark_as_read(cls, notification: Notification, user: User) -> ServiceResult[Notification]:
        """
        Mark a single notification as read. Idempotent.

        Error codes:
            NOT_OWNER: User doesn't own the notification
        """
        if notification.recipient_id != user.pk:
            return ServiceResult.failure(
                "Cannot mark notification you don't own",
                error_code="NOT_OWNER",
            )

        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read", "updated_at"])

        return ServiceResult.success(notification)

    @classmethod
    def mark_all_as_read(cls, user: User) -> ServiceResult[int]:
        count = Notification.objects.filter(recipient=user, is_read=False).update(is_read=True)
        return ServiceResult.success(count)


def notify(
    event: str,
    recipient_id: Any,
    payload: dict[str, Any] | None = None,
    idempotency_key: str | None = None,
) -> None:
    """
    Schedule a notification once the current transaction commits.

    Outside a transaction the task is queued immediately. Any failure to
    queue is logged and dropped.
    """
    from notifications.tasks import deliver_notification

    try:
        # Celery needs plain JSON; UUIDs and datetimes become strings
        data = json.loads(json.dumps(payload or {}, cls=DjangoJSONEncoder))
        recipient = str(recipient_id)

        def _enqueue() -> None:
            deliver_notification.delay(event, recipient, data, idempotency_key)

        transaction.on_commit(_enqueue, robust=True)
    except Exception:
        logger.exception(
            "Failed to schedule notification",
            extra={"event": event, "recipient_id": recipient_id},
        )
