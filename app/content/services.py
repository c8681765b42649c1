"""
Content service layer.

ContentService is the content directory the access engine consults and
the place creators publish through.

Usage:
    from content.services import ContentService

    result = ContentService.create_post(creator, title="Behind the scenes",
                                        visibility="ppv", price_cents=499)
    visibility = ContentService.get_content_visibility(result.data.id)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.utils import timezone

from authentication.services import CreatorService
from content.models import ContentKind, LiveStream, Post, Visibility
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from typing import Any

    from authentication.models import User
    from content.models import PaidContent


@dataclass(frozen=True)
class ContentVisibility:
    """What the access engine needs to know about one post or stream."""

    content_id: uuid.UUID
    kind: str
    creator_id: Any
    visibility: str
    price_cents: int
    is_disabled: bool


def _as_uuid(value: Any) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class ContentService(BaseService):
    """
    Publishing and visibility lookup for posts and live streams.

    Error codes:
        CREATOR_NOT_APPROVED, INVALID_VISIBILITY, INVALID_PRICE,
        CONTENT_NOT_FOUND
    """

    @classmethod
    def get_content(cls, content_id: Any) -> PaidContent | None:
        """Return the Post or LiveStream with this id, or None."""
        pk = _as_uuid(content_id)
        if pk is None:
            return None
        return Post.objects.filter(pk=pk).first() or LiveStream.objects.filter(pk=pk).first()

    @classmethod
    def get_content_visibility(cls, content_id: Any) -> ContentVisibility | None:
        content = cls.get_content(content_id)
        if content is None:
            return None
        return ContentVisibility(
            content_id=content.pk,
            kind=ContentKind.POST if isinstance(content, Post) else ContentKind.STREAM,
            creator_id=content.creator_id,
            visibility=content.visibility,
            price_cents=content.price_cents,
            is_disabled=content.is_disabled,
        )

    @classmethod
    def _validate_offer(
        cls,
        creator: User,
        visibility: str,
        price_cents: int,
    ) -> ServiceResult | None:
        if not CreatorService.is_creator_approved(creator.pk):
            return ServiceResult.failure(
                "Only approved creators can publish content",
                "CREATOR_NOT_APPROVED",
            )
        if visibility not in Visibility.values:
            return ServiceResult.failure(
                f"Visibility must be one of: {', '.join(Visibility.values)}",
                "INVALID_VISIBILITY",
            )
        if visibility == Visibility.PPV and price_cents <= 0:
            return ServiceResult.failure(
                "Pay-per-view content needs a price",
                "INVALID_PRICE",
            )
        if price_cents < 0:
            return ServiceResult.failure("Price cannot be negative", "INVALID_PRICE")
        return None

    @classmethod
    def create_post(
        cls,
        creator: User,
        title: str,
        body: str = "",
        visibility: str = Visibility.SUBSCRIBER,
        price_cents: int = 0,
    ) -> ServiceResult[Post]:
        invalid = cls._validate_offer(creator, visibility, price_cents)
        if invalid is not None:
            return invalid

        post = Post.objects.create(
            creator=creator,
            title=title,
            body=body,
            visibility=visibility,
            price_cents=price_cents if visibility == Visibility.PPV else 0,
        )
        cls.get_logger().info(
            "Post created",
            extra={"content_id": str(post.pk), "creator_id": creator.pk, "visibility": visibility},
        )
        return ServiceResult.success(post)

    @classmethod
    def create_stream(
        cls,
        creator: User,
        title: str,
        description: str = "",
        visibility: str = Visibility.SUBSCRIBER,
        price_cents: int = 0,
        scheduled_at=None,
    ) -> ServiceResult[LiveStream]:
        invalid = cls._validate_offer(creator, visibility, price_cents)
        if invalid is not None:
            return invalid

        stream = LiveStream.objects.create(
            creator=creator,
            title=title,
            description=description,
            visibility=visibility,
            price_cents=price_cents if visibility == Visibility.PPV else 0,
            scheduled_at=scheduled_at,
        )
        cls.get_logger().info(
            "Live stream created",
            extra={"content_id": str(stream.pk), "creator_id": creator.pk, "visibility": visibility},
        )
        return ServiceResult.success(stream)

    @classmethod
    def disable(cls, content_id: Any, admin: User) -> ServiceResult[PaidContent]:
        """Admin takedown. Purchases stay on record; viewing is refused."""
        return cls._set_disabled(content_id, admin, disabled=True)

    @classmethod
    def enable(cls, content_id: Any, admin: User) -> ServiceResult[PaidContent]:
        return cls._set_disabled(content_id, admin, disabled=False)

    @classmethod
    def _set_disabled(cls, content_id: Any, admin: User, disabled: bool) -> ServiceResult:
        content = cls.get_content(content_id)
        if content is None:
            return ServiceResult.failure("Content not found", "CONTENT_NOT_FOUND")

        content.is_disabled = disabled
        content.disabled_at = timezone.now() if disabled else None
        content.save(update_fields=["is_disabled", "disabled_at", "updated_at"])

        cls.get_logger().info(
            "Content disabled" if disabled else "Content enabled",
            extra={"content_id": str(content.pk), "admin_id": admin.pk},
        )
        return ServiceResult.success(content)
