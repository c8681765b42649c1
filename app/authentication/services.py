"""
Creator account services.

This module provides CreatorService: the creator application flow and the
approval gate the money code consults before letting anyone earn.

Related files:
    - models.py: User, UserRole, CreatorStatus
    - monetization.services.subscription_service: refuses subscriptions to
      creators that are not approved
    - content.services: refuses paid content from creators that are not
      approved

Note:
    Identity verification is performed by an external provider; an admin
    records the outcome with approve() or reject().
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.services import BaseService, ServiceResult
from authentication.models import CreatorStatus, User, UserRole
from notifications.services import notify
from notifications.models import NotificationType

if TYPE_CHECKING:
    from typing import Any


class CreatorService(BaseService):
    """
    Creator application and approval.

    Usage:
        from authentication.services import CreatorService

        result = CreatorService.apply(user, display_name="Night Owl")
        CreatorService.approve(user.id, admin=request.user)

        if CreatorService.is_creator_approved(creator_id):
            ...
    """

    MAX_DISPLAY_NAME_LENGTH = 255

    @classmethod
    def is_creator_approved(cls, creator_id: Any) -> bool:
        """True if the user exists, is active, and is an approved creator."""
        if creator_id is None:
            return False
        return User.objects.approved_creators().filter(pk=creator_id).exists()

    @classmethod
    def apply(
        cls,
        user: User,
        display_name: str,
        subscription_price_cents: int = 0,
    ) -> ServiceResult[User]:
        """
        Turn a fan into a creator awaiting approval.

        Errors:
            ALREADY_CREATOR, APPLICATION_PENDING, VALIDATION_ERROR, INVALID_PRICE
        """
        if user.role == UserRole.CREATOR:
            return ServiceResult.failure("You are already a creator", "ALREADY_CREATOR")
        if user.creator_status == CreatorStatus.PENDING:
            return ServiceResult.failure(
                "You already have a pending creator application",
                "APPLICATION_PENDING",
            )

        missing = cls.validate_required(display_name=display_name)
        if missing is not None:
            return missing
        if len(display_name) > cls.MAX_DISPLAY_NAME_LENGTH:
            return ServiceResult.failure(
                "Display name must be 255 characters or less",
                "VALIDATION_ERROR",
                errors={"display_name": ["Too long."]},
            )
        if subscription_price_cents < 0:
            return ServiceResult.failure("Price cannot be negative", "INVALID_PRICE")

        user.role = UserRole.CREATOR
        user.creator_status = CreatorStatus.PENDING
        user.display_name = display_name.strip()
        user.subscription_price_cents = subscription_price_cents
        user.save(
            update_fields=[
                "role",
                "creator_status",
                "display_name",
                "subscription_price_cents",
                "updated_at",
            ]
        )

        cls.get_logger().info(
            "Creator application submitted",
            extra={"user_id": user.pk},
        )
        return ServiceResult.success(user)

    @classmethod
    def approve(cls, user_id: Any, admin: User) -> ServiceResult[User]:
        return cls._decide(user_id, admin, CreatorStatus.APPROVED)

    @classmethod
    def reject(cls, user_id: Any, admin: User, reason: str = "") -> ServiceResult[User]:
        return cls._decide(user_id, admin, CreatorStatus.REJECTED, reason=reason)

    @classmethod
    def _decide(
        cls,
        user_id: Any,
        admin: User,
        status: str,
        reason: str = "",
    ) -> ServiceResult[User]:
        user = User.objects.filter(pk=user_id).first()
        if user is None:
            return ServiceResult.failure("User not found", "USER_NOT_FOUND")
        if user.role != UserRole.CREATOR:
            return ServiceResult.failure("User is not a creator", "NOT_A_CREATOR")

        user.creator_status = status
        user.save(update_fields=["creator_status", "updated_at"])

        event = (
            NotificationType.CREATOR_APPROVED
            if status == CreatorStatus.APPROVED
            else NotificationType.CREATOR_REJECTED
        )
        notify(event, user.pk, {"reason": reason} if reason else {})

        cls.get_logger().info(
            "Creator application decided",
            extra={"user_id": user.pk, "status": status, "admin_id": admin.pk},
        )
        return ServiceResult.success(user)
