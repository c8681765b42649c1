"""
Notifications app for in-app notifications.

This app provides:
- Notification model storing rendered notifications per user
- notify(): fire-and-forget scheduling used by money and account code
- deliver_notification Celery task
- REST API for the notification inbox

Usage:
    from notifications.services import notify
    from notifications.models import NotificationType

    notify(NotificationType.PAYOUT_COMPLETED, creator.id, {"amount_cents": 8000})
"""
