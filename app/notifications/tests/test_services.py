"""
Tests for NotificationService, notify() and the delivery task.

Test Classes:
    TestCreateNotification: Rendering, unknown types, idempotency
    TestReadStatus: mark_as_read() and mark_all_as_read()
    TestNotify: Scheduling on commit
    TestDeliverNotification: Celery task outcomes
"""

import uuid
from unittest.mock import patch

import pytest
from django.db import transaction

from config import celery_app
from notifications.models import Notification, NotificationType
from notifications.services import NotificationService, notify
from notifications.tasks import deliver_notification
from notifications.tests.factories import NotificationFactory


@pytest.mark.django_db
class TestCreateNotification:
    def test_renders_templates(self, creator):
        result = NotificationService.create_notification(
            recipient_id=creator.pk,
            type_key=NotificationType.PAYMENT_RECEIVED,
            data={"amount_cents": 123456, "transaction_type": "tip"},
        )

        assert result.success
        notification = result.data
        assert notification.title == "You received $1,234.56"
        assert notification.body == "A tip payment of $1,234.56 was added to your earnings."
        assert notification.data == {"amount_cents": 123456, "transaction_type": "tip"}
        assert notification.recipient == creator

    def test_missing_placeholders_render_empty(self, creator):
        result = NotificationService.create_notification(
            recipient_id=creator.pk,
            type_key=NotificationType.PAYOUT_FAILED,
        )

        assert result.data.body == "Your payout of  could not be processed: "

    def test_unknown_type(self, fan):
        result = NotificationService.create_notification(fan.pk, "friend_request")

        assert result.error_code == "TYPE_NOT_FOUND"
        assert "friend_request" in result.error
        assert not Notification.objects.exists()

    def test_duplicate_key(self, fan):
        NotificationService.create_notification(
            fan.pk, NotificationType.CONTENT_UNLOCKED, idempotency_key="content_unlocked:1"
        )

        result = NotificationService.create_notification(
            fan.pk, NotificationType.CONTENT_UNLOCKED, idempotency_key="content_unlocked:1"
        )

        assert result.error_code == "DUPLICATE"
        assert Notification.objects.count() == 1

    def test_string_recipient_id(self, fan):
        result = NotificationService.create_notification(str(fan.pk), NotificationType.CREATOR_APPROVED)

        assert result.data.recipient_id == fan.pk


@pytest.mark.django_db
class TestReadStatus:
    def test_mark_as_read(self, fan, notification):
        result = NotificationService.mark_as_read(notification, fan)

        assert result.success
        assert Notification.objects.get(pk=notification.pk).is_read

    def test_mark_as_read_is_idempotent(self, fan, read_notification):
        assert NotificationService.mark_as_read(read_notification, fan).success

    def test_not_owner(self, creator, notification):
        result = NotificationService.mark_as_read(notification, creator)

        assert result.error_code == "NOT_OWNER"
        assert not Notification.objects.get(pk=notification.pk).is_read

    def test_mark_all_as_read(self, fan, unread_notifications, read_notification, other_user_notification):
        result = NotificationService.mark_all_as_read(fan)

        assert result.data == 3
        assert not Notification.objects.filter(recipient=fan, is_read=False).exists()
        assert not Notification.objects.get(pk=other_user_notification.pk).is_read


@pytest.mark.django_db
class TestNotify:
    def test_delivers_after_commit(self, fan, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            notify(
                NotificationType.SUBSCRIPTION_ACTIVATED,
                fan.pk,
                {"expires_at": "2026-11-18"},
                idempotency_key="subscription_activated:abc",
            )
            assert not Notification.objects.exists()

        assert len(callbacks) == 1
        notification = Notification.objects.get(recipient=fan)
        assert notification.body == "Your subscription is active until 2026-11-18."
        assert notification.idempotency_key == "subscription_activated:abc"

    def test_payload_is_made_json_safe(self, fan, django_capture_on_commit_callbacks):
        payout_id = uuid.uuid4()

        with django_capture_on_commit_callbacks(execute=True):
            notify(NotificationType.PAYOUT_COMPLETED, fan.pk, {"payout_id": payout_id, "amount_cents": 8000})

        assert Notification.objects.get(recipient=fan).data["payout_id"] == str(payout_id)

    def test_rollback_drops_notification(self, fan, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with transaction.atomic():
                notify(NotificationType.CREATOR_APPROVED, fan.pk)
                transaction.set_rollback(True)

        assert callbacks == []
        assert not Notification.objects.exists()

    def test_scheduling_errors_are_swallowed(self, fan):
        with patch(
            "notifications.services.transaction.on_commit",
            side_effect=RuntimeError("no connection"),
        ) as mock_on_commit:
            notify(NotificationType.CREATOR_APPROVED, fan.pk)

        assert mock_on_commit.called


@pytest.mark.django_db
class TestDeliverNotification:
    def test_creates_notification(self, fan):
        assert deliver_notification(NotificationType.CREATOR_REJECTED, str(fan.pk)) is True
        assert Notification.objects.filter(recipient=fan).count() == 1

    def test_duplicate_is_success(self, fan):
        NotificationFactory(recipient=fan, idempotency_key="payout_failed:1")

        assert deliver_notification("payout_failed", str(fan.pk), {}, "payout_failed:1") is True
        assert Notification.objects.count() == 1

    def test_unknown_type(self, fan):
        assert deliver_notification("missing_type", str(fan.pk)) is False

    def test_delay_runs_inline_without_broker(self, fan):
        assert celery_app.conf.task_always_eager is True

        result = deliver_notification.delay(NotificationType.CREATOR_APPROVED, str(fan.pk))

        assert result.get() is True
        assert Notification.objects.filter(recipient=fan).count() == 1
