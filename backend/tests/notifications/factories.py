"""
Factories for notifications app models.
"""

import factory
from factory.django import DjangoModelFactory

from apps.notifications.models import Notification


class NotificationFactory(DjangoModelFactory):
    class Meta:
        model = Notification

    user = factory.SubFactory("tests.accounts.factories.UserFactory")
    title = "Membership Expiring Soon"
    message = "Your membership expires in 7 days."
    type = Notification.Type.MEMBERSHIP_EXPIRY
    priority = Notification.Priority.MEDIUM
    is_read = False
