"""
Authentication models.

- User: Custom user model with email-based authentication, a platform role
  and, for creators, an approval status and subscription price

Related files:
    - managers.py: Custom user manager for email-based creation
    - services.py: CreatorService (apply, approve, reject, approval gate)

Roles:
    fan      - default; may subscribe, unlock and tip
    creator  - may publish content and earn once approved
    admin    - processes payouts, approves creators, disables content
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class UserRole(models.TextChoices):
    FAN = "fan", "Fan"
    CREATOR = "creator", "Creator"
    ADMIN = "admin", "Admin"


class CreatorStatus(models.TextChoices):
    """
    Creator approval lifecycle.

    Only APPROVED creators can publish paid content or be subscribed to.
    Identity verification itself happens outside this service; the
    outcome is recorded here by an admin.
    """

    NOT_APPLIED = "not_applied", "Not applied"
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        email: Primary identifier, unique, used for login
        display_name: Public name shown on creator pages
        role: fan, creator or admin
        creator_status: Approval state of a creator application
        subscription_price_cents: Monthly price fans pay this creator
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        fan = User.objects.create_user(email="fan@example.com", password="...")

        creator = User.objects.create_user(
            email="creator@example.com",
            password="...",
            role=UserRole.CREATOR,
            creator_status=CreatorStatus.APPROVED,
            subscription_price_cents=999,
        )
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    display_name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Public display name",
    )

    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.FAN,
        db_index=True,
    )
    creator_status = models.CharField(
        max_length=20,
        choices=CreatorStatus.choices,
        default=CreatorStatus.NOT_APPLIED,
        db_index=True,
    )
    subscription_price_cents = models.PositiveIntegerField(
        default=0,
        help_text="Price of one subscription period in cents",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def get_full_name(self):
        return self.display_name or self.email

    def get_short_name(self):
        return self.display_name or self.email.split("@")[0]

    @property
    def is_platform_admin(self) -> bool:
        """Admins by role, plus Django superusers."""
        return self.role == UserRole.ADMIN or self.is_superuser

    @property
    def is_approved_creator(self) -> bool:
        return (
            self.role == UserRole.CREATOR
            and self.creator_status == CreatorStatus.APPROVED
        )
