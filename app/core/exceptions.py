"""
Application exception hierarchy.

Every error the domain raises on purpose derives from BaseApplicationError,
so views and tasks can turn it into a JSON body with a stable error code.

Exception Hierarchy:
    BaseApplicationError (base)
    └── ConflictError - State conflicts (duplicates, bad transitions)

Usage:
    from core.exceptions import ConflictError

    if payout.state not in OPEN_STATES:
        raise ConflictError(
            f"Cannot process payout in {payout.state} state",
            error_code="INVALID_PAYOUT_STATE",
            details={"payout_id": str(payout.id)},
        )

    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.http_status)

Note:
    Expected failures inside services are normally returned as
    ServiceResult.failure(); raise these when the caller cannot continue.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (ids, field errors)
        http_status: Status code a view should answer with
    """

    default_error_code: str = "APPLICATION_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Payout not found",
                "error_code": "PAYOUT_NOT_FOUND",
                "details": {"payout_id": "..."}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Use for:
    - Unique constraint violations that are not idempotent replays
    - Invalid state transitions
    - Optimistic version mismatches
    """

    default_error_code: str = "CONFLICT"
    http_status: int = 409

