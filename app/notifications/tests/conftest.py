"""
Test configuration and fixtures for notification tests.

Users and API clients come from the root conftest.

Usage:
    def test_example(fan, unread_notifications, authenticated_client):
        response = authenticated_client(fan).get(reverse("notifications:notification-list"))
"""

import pytest

from notifications.models import NotificationType
from notifications.tests.factories import NotificationFactory


@pytest.fixture
def notification(fan):
    return NotificationFactory(recipient=fan)


@pytest.fixture
def unread_notifications(fan):
    """Three unread notifications for the fan."""
    return NotificationFactory.create_batch(3, recipient=fan)


@pytest.fixture
def read_notification(fan):
    return NotificationFactory(
        recipient=fan,
        notification_type=NotificationType.SUBSCRIPTION_RENEWED,
        is_read=True,
    )


@pytest.fixture
def other_user_notification(creator):
    return NotificationFactory(recipient=creator)
