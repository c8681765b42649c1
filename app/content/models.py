"""
Content models.

- Post: A creator's post
- LiveStream: A creator's scheduled or running live stream

Both share one visibility model. Ids are UUIDs drawn from the same space,
so a bare content id identifies a post or a stream unambiguously; ledger
rows, transactions and entitlements reference content by that id only.

Visibility:
    free        - anyone may view
    subscriber  - fans with an active subscription to the creator
    ppv         - fans who bought this item (price_cents > 0)
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class Visibility(models.TextChoices):
    FREE = "free", "Free"
    SUBSCRIBER = "subscriber", "Subscribers only"
    PPV = "ppv", "Pay-per-view"


class ContentKind(models.TextChoices):
    POST = "post", "Post"
    STREAM = "stream", "Live stream"


class PaidContent(UUIDPrimaryKeyMixin, BaseModel):
    """
    Fields shared by everything a fan can pay to view.

    Fields:
        creator: Owning creator
        title: Display title
        visibility: free, subscriber or ppv
        price_cents: Unlock price for ppv items, 0 otherwise
        is_disabled: Admin takedown flag; disabled content is never viewable
        disabled_at: When the takedown happened
    """

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
    )
    title = models.CharField(max_length=255)
    visibility = models.CharField(
        max_length=20,
        choices=Visibility.choices,
        default=Visibility.SUBSCRIBER,
    )
    price_cents = models.PositiveIntegerField(default=0)
    is_disabled = models.BooleanField(default=False, db_index=True)
    disabled_at = models.DateTimeField(null=True, blank=True)

    class Meta(BaseModel.Meta):
        abstract = True


class Post(PaidContent):
    body = models.TextField(blank=True, default="")

    class Meta(PaidContent.Meta):
        db_table = "content_post"
        indexes = [
            models.Index(fields=["creator", "-created_at"], name="post_creator_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Post {self.title!r} ({self.visibility})"


class StreamStatus(models.TextChoices):
    SCHEDULED = "scheduled", "Scheduled"
    LIVE = "live", "Live"
    ENDED = "ended", "Ended"


class LiveStream(PaidContent):
    description = models.TextField(blank=True, default="")
    status = models.CharField(
        max_length=20,
        choices=StreamStatus.choices,
        default=StreamStatus.SCHEDULED,
    )
    scheduled_at = models.DateTimeField(null=True, blank=True)

    class Meta(PaidContent.Meta):
        db_table = "content_live_stream"
        indexes = [
            models.Index(fields=["creator", "-created_at"], name="stream_creator_created_idx"),
        ]

    def __str__(self) -> str:
        return f"LiveStream {self.title!r} ({self.status})"
