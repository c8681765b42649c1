"""
Factory Boy factories for notification models.

Usage:
    from notifications.tests.factories import NotificationFactory

    notification = NotificationFactory(recipient=user)
    read = NotificationFactory(recipient=user, is_read=True)
    payout = NotificationFactory(notification_type=NotificationType.PAYOUT_COMPLETED)
"""

import factory

from authentication.tests.factories import UserFactory
from notifications.models import Notification, NotificationType


class NotificationFactory(factory.django.DjangoModelFactory):
    """
    Factory for Notification. Defaults to an unread payment notification.

    Examples:
        notification = NotificationFactory(recipient=user)
        keyed = NotificationFactory(idempotency_key="payment_received:abc")
    """

    class Meta:
        model = Notification

    recipient = factory.SubFactory(UserFactory)
    notification_type = NotificationType.PAYMENT_RECEIVED
    title = factory.Sequence(lambda n: f"You received ${n}.00")
    body = factory.Faker("sentence", nb_words=8)
    data = factory.LazyFunction(dict)
    is_read = False
