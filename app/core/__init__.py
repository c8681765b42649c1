"""
Core Application - Infrastructure & Base Classes

Generic building blocks used by the domain apps. Nothing in here knows
about money, subscriptions or content.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key
    - VersionedMixin: Version counter bumped on every save

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ConflictError: State conflicts (409)

Protocols (import from core.protocols):
    - ContentDirectory: Content visibility lookup

Views (import from core.views):
    - health_check: Liveness/readiness endpoint

Note:
    Models and model mixins are NOT imported here to avoid AppRegistryNotReady
    errors. Import them directly from their modules.
"""

from .services import BaseService, ServiceResult

from .exceptions import BaseApplicationError, ConflictError

from .protocols import ContentDirectory

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "BaseApplicationError",
    "ConflictError",
    # Protocols
    "ContentDirectory",
]
