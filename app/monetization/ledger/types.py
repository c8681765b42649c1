"""
Data types returned by the ledger service.

Types:
    EarningsSummary: A creator's totals, derived from ledger rows

Usage:
    from monetization.ledger.services import LedgerService

    summary = LedgerService.summarize(creator.id)
    summary.pending_balance_cents   # 8000
    summary.as_dict()               # JSON-ready for the earnings endpoint
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from monetization.money import format_cents


@dataclass(frozen=True)
class EarningsSummary:
    """
    A creator's earnings, computed from the ledger on every call.

    Attributes:
        total_gross_cents: Gross of earnings after chargeback reversals
        total_fees_cents: Platform fees after chargeback reversals
        total_earnings_cents: Creator net after chargeback reversals
        total_refunds_cents: Net reversed by chargebacks (positive)
        total_payouts_cents: Net paid out (positive)
        total_adjustments_cents: Manual adjustments (any sign)
        pending_balance_cents: Sum of net over every row
        entry_count: Number of ledger rows
    """

    total_gross_cents: int = 0
    total_fees_cents: int = 0
    total_earnings_cents: int = 0
    total_refunds_cents: int = 0
    total_payouts_cents: int = 0
    total_adjustments_cents: int = 0
    pending_balance_cents: int = 0
    entry_count: int = 0

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    def __str__(self) -> str:
        return f"EarningsSummary(balance={format_cents(self.pending_balance_cents)})"
