"""
Entitlement model: a recorded right to view content.

Entitlements are written once and never changed. A pay-per-view purchase
grants one for the purchased post or stream; a null content_id means the
grant covers everything the creator publishes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.exceptions import ConflictError
from core.model_mixins import UUIDPrimaryKeyMixin
from monetization.state_machines import EntitlementType

if TYPE_CHECKING:
    from datetime import datetime
    from typing import Any


class EntitlementQuerySet(models.QuerySet):
    def unexpired(self, now: datetime | None = None) -> EntitlementQuerySet:
        now = now or timezone.now()
        return self.filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))


class Entitlement(UUIDPrimaryKeyMixin, models.Model):
    """
    Fields:
        user: User holding the right
        content_id: Post or stream id, null for creator-wide grants
        creator: Creator whose content this covers
        entitlement_type: subscription, ppv_purchase, tip or free
        subscription: Subscription that produced the grant
        transaction: PaymentTransaction that paid for the grant
        granted_at: Insert time
        expires_at: End of validity, null for permanent grants
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="entitlements",
    )
    content_id = models.UUIDField(null=True, blank=True, db_index=True)
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
    )
    entitlement_type = models.CharField(max_length=20, choices=EntitlementType.choices)
    subscription = models.ForeignKey(
        "monetization.Subscription",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="entitlements",
    )
    transaction = models.ForeignKey(
        "monetization.PaymentTransaction",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="entitlements",
    )
    granted_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    objects = EntitlementQuerySet.as_manager()

    class Meta:
        db_table = "monetization_entitlement"
        ordering = ["-granted_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "content_id", "entitlement_type"],
                name="unique_entitlement_per_user_content_type",
            ),
        ]
        indexes = [
            models.Index(fields=["user", "content_id"], name="entitlement_user_content_idx"),
        ]

    def __str__(self) -> str:
        return f"Entitlement({self.user_id}, {self.content_id}, {self.entitlement_type})"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self._state.adding:
            raise ConflictError(
                "Entitlements cannot be modified after they are granted",
                error_code="ENTITLEMENT_IMMUTABLE",
                details={"entitlement_id": str(self.pk)},
            )
        super().save(*args, **kwargs)

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= timezone.now()
