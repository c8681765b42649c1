"""
Authentication application.

Users, platform roles and the creator approval gate.

Key components:
    - User model: Email-based user with role and creator status
    - CreatorService: Creator application and approval
    - IsPlatformAdmin / IsCreator: DRF permissions

Usage:
    from authentication.models import User
    from authentication.services import CreatorService
"""
