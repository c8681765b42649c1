"""
Service layer primitives shared by every app.

This module provides the two building blocks the domain services are
written with:
- ServiceResult: explicit success/failure value for expected outcomes
- BaseService: logger lookup, transaction boundaries, required-field checks

Service Layer Philosophy:
    Views deal with HTTP, models deal with rows and state transitions,
    services own the business rules that span several models.

When to return vs raise:
    - ServiceResult.failure: the caller did something the rules forbid
      (subscribing to yourself, requesting a payout below the minimum)
    - Exceptions: the system is broken (database down, programming error)
      and the surrounding transaction must roll back

Usage:
    from core.services import BaseService, ServiceResult

    class PayoutService(BaseService):
        @classmethod
        def request_payout(cls, creator, amount_cents: int) -> ServiceResult[Payout]:
            if amount_cents < MIN_PAYOUT_CENTS:
                return ServiceResult.failure(
                    "Minimum payout is $10.00",
                    error_code="BELOW_MINIMUM",
                )

            with cls.atomic():
                payout = Payout.objects.create(creator=creator, amount_cents=amount_cents)

            cls.get_logger().info(
                "Payout requested",
                extra={"payout_id": str(payout.id), "amount_cents": amount_cents},
            )
            return ServiceResult.success(payout)

    # In a view
    result = PayoutService.request_payout(request.user, amount_cents)
    if not result.success:
        return Response(result.to_response(), status=400)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Outcome of a service call.

    Attributes:
        success: Whether the operation succeeded
        data: Result payload when successful
        error: Human-readable message when failed
        error_code: Stable machine-readable code (e.g. "INSUFFICIENT_BALANCE")
        errors: Optional field-level messages for validation failures

    Usage:
        result = SubscriptionService.create(fan, creator)
        if result:
            subscription = result.data
        else:
            logger.info("Rejected: %s (%s)", result.error, result.error_code)
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T | None = None) -> ServiceResult[T]:
        """Create a successful result carrying ``data``."""
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)
        """
        return cls(success=False, error=error, error_code=error_code, errors=errors)

    @classmethod
    def from_exception(cls, exc: Exception, error_code: str | None = None) -> ServiceResult[T]:
        """
        Create a failed result from an exception.

        Application errors keep their own error code; anything else falls
        back to the upper-cased class name.
        """
        code = error_code or getattr(exc, "error_code", None) or exc.__class__.__name__.upper()
        message = getattr(exc, "message", None) or str(exc)
        return cls(success=False, error=message, error_code=code)

    def to_response(self) -> dict[str, Any]:
        """Convert to the JSON body returned by API views."""
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {"success": False, "error": self.error}
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        return response

    def __bool__(self) -> bool:
        return self.success


class BaseService:
    """
    Base class for stateless service classes.

    Services expose classmethods only. Database work that must be
    all-or-nothing goes inside ``cls.atomic()``; row locks taken with
    ``select_for_update()`` are held until that block exits.

    Usage:
        class LedgerService(BaseService):
            @classmethod
            def append(cls, creator_id, gross_cents):
                with cls.atomic():
                    entry = LedgerEntry.objects.create(...)
                cls.get_logger().info("Ledger entry appended", extra={...})
                return entry
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Logger named ``<module>.<ServiceClass>`` for per-service filtering."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls, savepoint: bool = True) -> Generator[None, None, None]:
        """
        Run the enclosed block in a database transaction.

        Nested calls create savepoints, so an inner failure that is caught
        (for example an IntegrityError on a duplicate insert) only rolls
        back the inner block.
        """
        with transaction.atomic(savepoint=savepoint):
            yield

    @classmethod
    def validate_required(cls, **kwargs: Any) -> ServiceResult | None:
        """
        Return a VALIDATION_ERROR result if any keyword is None or blank.

        Returns None when every value is present.
        """
        errors = {}
        for field_name, value in kwargs.items():
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[field_name] = ["This field is required."]

        if errors:
            return ServiceResult.failure(
                "Required fields missing",
                error_code="VALIDATION_ERROR",
                errors=errors,
            )
        return None
