"""
Ledger service layer.

LedgerService is the only writer of LedgerEntry rows. Every method is a
classmethod; there is no instance state.

Idempotency:
    Each row carries a unique idempotency_key. append() looks the key up
    first and returns the existing row on a replay; a concurrent writer
    that wins the insert race is caught as IntegrityError inside a
    savepoint and its row is returned instead.

Usage:
    from monetization.ledger.services import LedgerService
    from monetization.state_machines import LedgerEntryType

    # Earnings from a completed payment
    entry = LedgerService.append(
        creator_id=creator.id,
        gross_cents=10000,
        entry_type=LedgerEntryType.EARNINGS,
        transaction_id=txn.id,
        idempotency_key=f"earnings:{txn.id}",
    )

    # Chargeback: reverse that entry
    LedgerService.append_reversal(entry)

    summary = LedgerService.summarize(creator.id)
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction

from core.services import BaseService
from monetization.ledger.exceptions import InvalidLedgerAmount
from monetization.ledger.models import LedgerEntry
from monetization.ledger.types import EarningsSummary
from monetization.money import platform_fee
from monetization.state_machines import LedgerEntryType

if TYPE_CHECKING:
    from typing import Any

    from django.db.models import QuerySet


class LedgerService(BaseService):
    """
    Append-only ledger operations.

    Methods:
        append: Record one entry (idempotent by key)
        append_reversal: Record the negation of an earnings entry
        summarize: Derive a creator's totals from their rows
        list_entries: Newest-first page of a creator's rows
    """

    @classmethod
    def append(
        cls,
        creator_id: Any,
        gross_cents: int,
        entry_type: str,
        transaction_id: uuid.UUID | None = None,
        description: str | None = None,
        idempotency_key: str | None = None,
    ) -> LedgerEntry:
        """
        Append a ledger entry.

        Earnings rows get their fee and net from the money module. Payout
        and refund rows must be negative; adjustment rows may carry either
        sign. All three store the signed amount as gross and net, fee 0.

        Args:
            creator_id: Creator whose balance moves
            gross_cents: Signed amount in cents
            entry_type: A LedgerEntryType value
            transaction_id: PaymentTransaction behind the entry
            description: Free-text description
            idempotency_key: Replays with the same key return the first row;
                a random key is generated when omitted

        Returns:
            The new LedgerEntry, or the existing one for a replayed key

        Raises:
            InvalidLedgerAmount: Amount has the wrong sign for entry_type
        """
        if idempotency_key:
            existing = LedgerEntry.objects.filter(idempotency_key=idempotency_key).first()
            if existing is not None:
                return existing
        else:
            idempotency_key = f"{entry_type}:{uuid.uuid4()}"

        if entry_type == LedgerEntryType.EARNINGS:
            if gross_cents < 0:
                raise InvalidLedgerAmount(
                    "Earnings cannot be negative",
                    details={"gross_cents": gross_cents},
                )
            fee = platform_fee(gross_cents)
        elif entry_type in (LedgerEntryType.PAYOUT, LedgerEntryType.REFUND):
            if gross_cents >= 0:
                raise InvalidLedgerAmount(
                    f"{entry_type} entries must be negative",
                    details={"gross_cents": gross_cents, "entry_type": entry_type},
                )
            fee = 0
        elif entry_type == LedgerEntryType.ADJUSTMENT:
            fee = 0
        else:
            raise InvalidLedgerAmount(
                f"Unknown ledger entry type: {entry_type}",
                details={"entry_type": entry_type},
            )

        return cls._insert(
            creator_id=creator_id,
            transaction_id=transaction_id,
            entry_type=entry_type,
            gross_cents=gross_cents,
            platform_fee_cents=fee,
            net_cents=gross_cents - fee,
            description=description,
            idempotency_key=idempotency_key,
        )

    @classmethod
    def append_reversal(
        cls,
        entry: LedgerEntry,
        description: str | None = None,
        idempotency_key: str | None = None,
    ) -> LedgerEntry:
        """
        Append a refund row that negates ``entry`` column by column.

        Used for chargebacks, so the creator loses exactly the net they
        were credited and the platform gives back its fee. Idempotent per
        reversed entry unless a different key is passed.
        """
        return cls._insert(
            creator_id=entry.creator_id,
            transaction_id=entry.transaction_id,
            entry_type=LedgerEntryType.REFUND,
            gross_cents=-entry.gross_cents,
            platform_fee_cents=-entry.platform_fee_cents,
            net_cents=-entry.net_cents,
            description=description or f"Reversal of {entry.get_entry_type_display().lower()}",
            idempotency_key=idempotency_key or f"reversal:{entry.pk}",
        )

    @classmethod
    def _insert(cls, idempotency_key: str, **fields: Any) -> LedgerEntry:
        existing = LedgerEntry.objects.filter(idempotency_key=idempotency_key).first()
        if existing is not None:
            return existing

        try:
            with transaction.atomic():
                entry = LedgerEntry.objects.create(idempotency_key=idempotency_key, **fields)
        except IntegrityError:
            # Another writer inserted the same key between our check and create
            entry = LedgerEntry.objects.filter(idempotency_key=idempotency_key).first()
            if entry is None:
                raise
            return entry

        cls.get_logger().info(
            "Ledger entry appended",
            extra={
                "entry_id": str(entry.pk),
                "creator_id": entry.creator_id,
                "entry_type": entry.entry_type,
                "net_cents": entry.net_cents,
                "idempotency_key": idempotency_key,
            },
        )
        return entry

    @classmethod
    def summarize(cls, creator_id: Any) -> EarningsSummary:
        """
        Compute a creator's totals from their ledger rows.

        Always reads committed rows; nothing is cached.
        """
        totals = LedgerEntry.objects.for_creator(creator_id).totals()
        return EarningsSummary(
            total_gross_cents=totals["gross"],
            total_fees_cents=totals["fees"],
            total_earnings_cents=totals["earnings"],
            total_refunds_cents=-totals["refunds"],
            total_payouts_cents=-totals["payouts"],
            total_adjustments_cents=totals["adjustments"],
            pending_balance_cents=totals["balance"],
            entry_count=totals["entry_count"],
        )

    @classmethod
    def get_balance(cls, creator_id: Any) -> int:
        """Shortcut for summarize(creator_id).pending_balance_cents."""
        return cls.summarize(creator_id).pending_balance_cents

    @classmethod
    def list_entries(
        cls,
        creator_id: Any,
        limit: int = 50,
        offset: int = 0,
    ) -> QuerySet[LedgerEntry]:
        """Newest-first slice of a creator's ledger rows."""
        limit = max(1, min(limit, 200))
        offset = max(0, offset)
        return (
            LedgerEntry.objects.for_creator(creator_id)
            .select_related("transaction")
            .order_by("-created_at", "-id")[offset : offset + limit]
        )
