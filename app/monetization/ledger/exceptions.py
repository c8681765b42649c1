"""
Ledger-specific exceptions.

Exception Hierarchy:
    LedgerError (base)
    ├── ImmutableLedgerEntryError - Attempt to update or delete a ledger row
    └── InvalidLedgerAmount - Amount with the wrong sign for its entry type

Usage:
    from monetization.ledger.exceptions import ImmutableLedgerEntryError

    try:
        entry.save()
    except ImmutableLedgerEntryError:
        # Corrections are new rows; append an adjustment instead
        LedgerService.append(creator_id, -500, LedgerEntryType.ADJUSTMENT)
"""

from __future__ import annotations

from core.exceptions import BaseApplicationError, ConflictError


class LedgerError(BaseApplicationError):
    """
    Base exception for all ledger operations.

    Example:
        try:
            LedgerService.append(creator.id, 10000, LedgerEntryType.EARNINGS)
        except LedgerError as e:
            return Response(e.to_dict(), status=e.http_status)
    """

    default_error_code: str = "LEDGER_ERROR"


class ImmutableLedgerEntryError(LedgerError, ConflictError):
    """
    Raised when code tries to change or remove an existing ledger row.

    Ledger rows are never updated or deleted. Mistakes are corrected by
    appending a reversing or adjusting row.
    """

    default_error_code: str = "LEDGER_ENTRY_IMMUTABLE"
    http_status: int = 409


class InvalidLedgerAmount(LedgerError):
    """
    Raised when an amount does not fit its entry type.

    Earnings must be non-negative; payouts and refunds must be negative.
    """

    default_error_code: str = "INVALID_LEDGER_AMOUNT"
