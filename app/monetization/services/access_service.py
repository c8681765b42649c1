"""
Entitlements and access decisions.

EntitlementService writes grants; AccessService answers "may this user
view this content?". Both read straight from the database so the check
that follows a committed reconciliation sees its writes.

Decision order:
    1. Content missing or disabled     -> deny
    2. Free content                    -> allow
    3. Viewer owns the content         -> allow
    4. Unexpired entitlement           -> allow
    5. Subscriber content and a
       currently active subscription   -> allow
    6. Anything else                   -> deny

Anonymous viewers (user_id None) only ever see free content.

Usage:
    from monetization.services import AccessService

    decision = AccessService.check_access(request.user.id, post.id)
    if not decision.allowed:
        ...  # decision.reason == "subscription_required"
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction
from django.db.models import Q

from content.models import Visibility
from content.services import ContentService
from core.services import BaseService
from monetization.models import Entitlement
from monetization.services.subscription_service import SubscriptionService

if TYPE_CHECKING:
    import uuid
    from datetime import datetime
    from typing import Any

    from django.db.models import QuerySet

    from core.protocols import ContentDirectory


class AccessReason:
    NOT_FOUND = "not_found"
    DISABLED = "disabled"
    FREE = "free"
    OWNER = "owner"
    ENTITLEMENT = "entitlement"
    SUBSCRIPTION = "subscription"
    LOGIN_REQUIRED = "login_required"
    SUBSCRIPTION_REQUIRED = "subscription_required"
    PURCHASE_REQUIRED = "purchase_required"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str

    def __bool__(self) -> bool:
        return self.allowed


class EntitlementService(BaseService):
    """Write-once grants of viewing rights."""

    @classmethod
    def grant(
        cls,
        user_id: Any,
        content_id: uuid.UUID | None,
        creator_id: Any,
        entitlement_type: str,
        subscription_id: uuid.UUID | None = None,
        transaction_id: uuid.UUID | None = None,
        expires_at: datetime | None = None,
    ) -> Entitlement:
        """
        Grant an entitlement; an existing (user, content, type) row wins.

        Returns:
            The new entitlement, or the one already on record
        """
        lookup = {
            "user_id": user_id,
            "content_id": content_id,
            "entitlement_type": entitlement_type,
        }
        existing = Entitlement.objects.filter(**lookup).first()
        if existing is not None:
            return existing

        try:
            with transaction.atomic():
                entitlement = Entitlement.objects.create(
                    creator_id=creator_id,
                    subscription_id=subscription_id,
                    transaction_id=transaction_id,
                    expires_at=expires_at,
                    **lookup,
                )
        except IntegrityError:
            entitlement = Entitlement.objects.filter(**lookup).first()
            if entitlement is None:
                raise
            return entitlement

        cls.get_logger().info(
            "Entitlement granted",
            extra={
                "entitlement_id": str(entitlement.id),
                "user_id": user_id,
                "content_id": str(content_id) if content_id else None,
                "entitlement_type": entitlement_type,
            },
        )
        return entitlement

    @classmethod
    def active_for(cls, user_id: Any, content_id: uuid.UUID) -> QuerySet[Entitlement]:
        """Unexpired grants covering content_id (item-level only)."""
        return Entitlement.objects.unexpired().filter(user_id=user_id, content_id=content_id)

    @classmethod
    def has_creator_wide_grant(cls, user_id: Any, creator_id: Any) -> bool:
        return (
            Entitlement.objects.unexpired()
            .filter(user_id=user_id, creator_id=creator_id, content_id__isnull=True)
            .exists()
        )

    @classmethod
    def list_for_user(cls, user_id: Any) -> QuerySet[Entitlement]:
        return Entitlement.objects.filter(user_id=user_id)


class AccessService(BaseService):
    """
    Access decisions for posts and live streams.

    The content lookup is pluggable so tests can pass a fake directory;
    by default it is ContentService.
    """

    directory: ContentDirectory = ContentService

    @classmethod
    def check_access(cls, user_id: Any, content_id: Any) -> AccessDecision:
        content = cls.directory.get_content_visibility(content_id)
        if content is None:
            return AccessDecision(False, AccessReason.NOT_FOUND)
        if content.is_disabled:
            return AccessDecision(False, AccessReason.DISABLED)
        if content.visibility == Visibility.FREE:
            return AccessDecision(True, AccessReason.FREE)
        if user_id is None:
            return AccessDecision(False, AccessReason.LOGIN_REQUIRED)
        if str(user_id) == str(content.creator_id):
            return AccessDecision(True, AccessReason.OWNER)

        has_grant = (
            Entitlement.objects.unexpired()
            .filter(user_id=user_id)
            .filter(
                Q(content_id=content.content_id)
                | Q(content_id__isnull=True, creator_id=content.creator_id)
            )
            .exists()
        )
        if has_grant:
            return AccessDecision(True, AccessReason.ENTITLEMENT)

        if content.visibility == Visibility.SUBSCRIBER:
            if SubscriptionService.has_active_subscription(user_id, content.creator_id):
                return AccessDecision(True, AccessReason.SUBSCRIPTION)
            return AccessDecision(False, AccessReason.SUBSCRIPTION_REQUIRED)

        return AccessDecision(False, AccessReason.PURCHASE_REQUIRED)

    @classmethod
    def has_access(cls, user_id: Any, content_id: Any) -> bool:
        return cls.check_access(user_id, content_id).allowed
