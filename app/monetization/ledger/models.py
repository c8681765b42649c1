"""
Ledger models for creator earnings.

This module provides the append-only LedgerEntry model. A creator's
balance is never stored; it is the sum of net_cents over their rows.

Sign conventions:
    EARNINGS    gross > 0, platform_fee = 20% of gross, net = gross - fee
    REFUND      negation of the earnings row it reverses (all three columns)
    PAYOUT      gross = net = -amount paid out, fee 0
    ADJUSTMENT  gross = net = signed correction, fee 0

Immutability:
    save() on an existing row, delete(), and queryset update()/delete()
    raise ImmutableLedgerEntryError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import Case, F, Q, Sum, Value, When
from django.db.models.functions import Coalesce

from core.model_mixins import UUIDPrimaryKeyMixin
from monetization.ledger.exceptions import ImmutableLedgerEntryError
from monetization.state_machines import LedgerEntryType

if TYPE_CHECKING:
    from typing import Any


def _signed_sum(column: str, *entry_types: str) -> Coalesce:
    """SUM(column) restricted to entry_types, 0 when there are no rows."""
    if entry_types:
        expression = Case(
            When(entry_type__in=entry_types, then=column),
            default=Value(0),
            output_field=models.BigIntegerField(),
        )
    else:
        expression = F(column)
    return Coalesce(Sum(expression), Value(0), output_field=models.BigIntegerField())


class LedgerEntryQuerySet(models.QuerySet):
    """QuerySet that refuses bulk mutation."""

    def update(self, **kwargs: Any) -> int:
        raise ImmutableLedgerEntryError("Ledger entries cannot be updated")

    def delete(self) -> tuple[int, dict[str, int]]:
        raise ImmutableLedgerEntryError("Ledger entries cannot be deleted")

    def for_creator(self, creator_id: Any) -> LedgerEntryQuerySet:
        return self.filter(creator_id=creator_id)

    def totals(self) -> dict[str, int]:
        """
        Aggregate the rows of this queryset into summary columns.

        Returns:
            Dict with gross, fees, earnings, refunds, payouts, adjustments,
            balance and entry_count keys, all integers
        """
        earned = (LedgerEntryType.EARNINGS, LedgerEntryType.REFUND)
        return self.aggregate(
            gross=_signed_sum("gross_cents", *earned),
            fees=_signed_sum("platform_fee_cents", *earned),
            earnings=_signed_sum("net_cents", *earned),
            refunds=_signed_sum("net_cents", LedgerEntryType.REFUND),
            payouts=_signed_sum("net_cents", LedgerEntryType.PAYOUT),
            adjustments=_signed_sum("net_cents", LedgerEntryType.ADJUSTMENT),
            balance=_signed_sum("net_cents"),
            entry_count=models.Count("id"),
        )


class LedgerEntry(UUIDPrimaryKeyMixin, models.Model):
    """
    One money movement for a creator.

    Fields:
        id: UUID primary key (from UUIDPrimaryKeyMixin)
        created_at: Timestamp when entry was recorded
        creator: Creator whose balance this row moves
        transaction: PaymentTransaction behind this row, if any
        entry_type: earnings, payout, refund or adjustment
        gross_cents: Signed gross amount
        platform_fee_cents: Signed platform fee
        net_cents: Signed creator share; balance is SUM(net_cents)
        description: Human-readable description
        idempotency_key: Unique key to prevent duplicate entries

    Constraints:
        - idempotency_key must be unique
        - earnings rows satisfy net = gross - fee

    Example:
        entry = LedgerEntry.objects.create(
            creator=creator,
            transaction=txn,
            entry_type=LedgerEntryType.EARNINGS,
            gross_cents=10000,
            platform_fee_cents=2000,
            net_cents=8000,
            idempotency_key=f"earnings:{txn.id}",
        )
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when this entry was recorded",
    )

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="ledger_entries",
        help_text="Creator whose balance this entry moves",
    )
    transaction = models.ForeignKey(
        "monetization.PaymentTransaction",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="ledger_entries",
        help_text="Payment transaction behind this entry",
    )

    entry_type = models.CharField(
        max_length=20,
        choices=LedgerEntryType.choices,
        help_text="Category of this entry",
    )
    gross_cents = models.BigIntegerField(help_text="Signed gross amount in cents")
    platform_fee_cents = models.BigIntegerField(
        default=0,
        help_text="Signed platform fee in cents",
    )
    net_cents = models.BigIntegerField(help_text="Signed creator share in cents")

    description = models.TextField(
        null=True,
        blank=True,
        help_text="Human-readable description of this entry",
    )
    idempotency_key = models.CharField(
        max_length=255,
        unique=True,
        help_text="Unique key to prevent duplicate entries",
    )

    objects = LedgerEntryQuerySet.as_manager()

    class Meta:
        db_table = "monetization_ledger_entry"
        ordering = ["-created_at"]
        verbose_name_plural = "Ledger entries"
        indexes = [
            models.Index(fields=["creator", "-created_at"], name="ledger_creator_created_idx"),
            models.Index(fields=["creator", "entry_type"], name="ledger_creator_type_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(entry_type=LedgerEntryType.EARNINGS)
                | Q(net_cents=F("gross_cents") - F("platform_fee_cents")),
                name="ledger_earnings_net_is_gross_minus_fee",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_entry_type_display()}: {self.net_cents} cents"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self._state.adding:
            raise ImmutableLedgerEntryError(
                "Ledger entries cannot be updated",
                details={"entry_id": str(self.pk)},
            )
        super().save(*args, **kwargs)

    def delete(self, *args: Any, **kwargs: Any) -> None:
        raise ImmutableLedgerEntryError(
            "Ledger entries cannot be deleted",
            details={"entry_id": str(self.pk)},
        )
