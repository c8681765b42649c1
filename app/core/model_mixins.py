"""
Reusable abstract model mixins.

Available Mixins:
    UUIDPrimaryKeyMixin: UUID as primary key
    VersionedMixin: Monotonic version column bumped on every save

Usage:
    from core.models import BaseModel
    from core.model_mixins import UUIDPrimaryKeyMixin, VersionedMixin

    class Subscription(UUIDPrimaryKeyMixin, VersionedMixin, BaseModel):
        ...

Note:
    Always list mixins before BaseModel in inheritance.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.db import models
from django.db.models import F

if TYPE_CHECKING:
    from typing import Any


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use a UUID primary key instead of an auto-increment integer.

    Ids of transactions, payouts and content are exposed in URLs and
    webhook metadata, so they must not be guessable or reveal volume.

    Fields:
        id: UUIDField as primary key (auto-generated)
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True


class VersionedMixin(models.Model):
    """
    Optimistic version counter for mutable workflow rows.

    Each save of an existing row writes ``version = version + 1`` in SQL
    and reloads the stored value, so two writers that both loaded
    version N can be detected by comparing versions afterwards.

    Fields:
        version: Incremented on every update of an existing row

    Usage:
        payout = Payout.objects.select_for_update().get(id=payout_id)
        payout.complete(admin=admin)
        payout.save()
        assert payout.version == previous_version + 1
    """

    version = models.PositiveIntegerField(
        default=1,
        help_text="Incremented on each update of this row",
    )

    class Meta:
        abstract = True

    def save(self, *args: Any, **kwargs: Any) -> None:
        is_update = not self._state.adding
        if is_update:
            self.version = F("version") + 1
            update_fields = kwargs.get("update_fields")
            if update_fields is not None:
                kwargs["update_fields"] = {*update_fields, "version"}
        super().save(*args, **kwargs)
        if is_update:
            self.refresh_from_db(fields=["version"])
