"""
Unit tests for the Notification model and notification templates.
"""

from datetime import timedelta

import pytest
from django.db import IntegrityError
from django.utils import timezone

from notifications.models import NOTIFICATION_TEMPLATES, Notification, NotificationType
from notifications.tests.factories import NotificationFactory


def test_every_type_has_a_template():
    assert set(NOTIFICATION_TEMPLATES) == set(NotificationType.values)


@pytest.mark.django_db
class TestNotification:
    def test_str(self, fan):
        notification = NotificationFactory(recipient=fan)

        assert str(notification) == f"Notification(payment_received) -> User {fan.pk} [unread]"

    def test_newest_first(self, fan):
        first = NotificationFactory(recipient=fan)
        second = NotificationFactory(recipient=fan)
        Notification.objects.filter(pk=first.pk).update(
            created_at=timezone.now() - timedelta(minutes=1)
        )

        assert list(Notification.objects.filter(recipient=fan)) == [second, first]

    def test_idempotency_key_is_unique(self):
        NotificationFactory(idempotency_key="payout_completed:1")

        with pytest.raises(IntegrityError):
            NotificationFactory(idempotency_key="payout_completed:1")

    def test_many_rows_without_key(self, fan):
        NotificationFactory.create_batch(2, recipient=fan, idempotency_key=None)

        assert Notification.objects.filter(recipient=fan).count() == 2
