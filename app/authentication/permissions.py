"""
DRF permission classes for platform roles.
"""

from rest_framework.permissions import BasePermission


class IsPlatformAdmin(BasePermission):
    """Admin role or Django superuser."""

    message = "Admin access required"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_platform_admin)


class IsCreator(BasePermission):
    """Any creator, approved or not. Approval is checked by the services."""

    message = "Creator access required"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == "creator")
