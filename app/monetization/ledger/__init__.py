"""
Ledger - append-only record of creator money movement.

Every payment, payout, chargeback reversal and manual adjustment is one
LedgerEntry row. Nothing stores a balance: summaries are recomputed from
the rows on every call, and rows are never updated or deleted.

Public API:
    Models (import from monetization.ledger.models):
        LedgerEntry - One signed money movement for a creator

    Service (import from monetization.ledger.services):
        LedgerService - append, append_reversal, summarize, list_entries

    Types:
        EarningsSummary - Derived totals for a creator

    Exceptions:
        LedgerError, ImmutableLedgerEntryError, InvalidLedgerAmount

Usage:
    from monetization.ledger.services import LedgerService
    from monetization.state_machines import LedgerEntryType

    entry = LedgerService.append(
        creator_id=creator.id,
        gross_cents=10000,
        entry_type=LedgerEntryType.EARNINGS,
        transaction_id=txn.id,
        idempotency_key=f"earnings:{txn.id}",
    )
    entry.platform_fee_cents  # 2000
    entry.net_cents           # 8000

    LedgerService.summarize(creator.id).pending_balance_cents  # 8000
"""

from .exceptions import ImmutableLedgerEntryError, InvalidLedgerAmount, LedgerError
from .types import EarningsSummary

__all__ = [
    "EarningsSummary",
    "LedgerError",
    "ImmutableLedgerEntryError",
    "InvalidLedgerAmount",
]
