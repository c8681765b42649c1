"""
PaymentTransaction model: one provider charge.

A PaymentTransaction is created (or found) by the reconciler for every
provider transaction id it sees. The unique provider_transaction_id is
what makes webhook replays harmless.

Usage:
    from monetization.models import PaymentTransaction

    txn, created = PaymentTransaction.objects.select_for_update().get_or_create(
        provider_transaction_id="0312345678",
        defaults={
            "payer_id": fan.id,
            "creator_id": creator.id,
            "gross_amount_cents": 999,
            "transaction_type": TransactionType.SUBSCRIPTION,
        },
    )
    if txn.status == TransactionStatus.PENDING:
        txn.complete()
        txn.save()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from monetization.money import DEFAULT_CURRENCY, format_cents
from monetization.state_machines import TransactionStatus, TransactionType


class PaymentTransaction(UUIDPrimaryKeyMixin, BaseModel):
    """
    A single charge reported by a payment provider.

    State Flow:
        PENDING -> COMPLETED -> REFUNDED
        PENDING -> FAILED

    Fields:
        payer: Fan who paid
        creator: Creator being paid (null only for malformed legacy rows)
        subscription: Subscription this charge paid for
        content_id: Post or stream unlocked by a ppv charge
        gross_amount_cents: Amount charged in cents
        currency: ISO 4217 currency code
        transaction_type: subscription, ppv or tip
        status: Current FSM state
        provider: Provider name (ccbill, mock)
        provider_transaction_id: Provider's id; the idempotency key
        failure_reason: Decline reason for failed charges
        refund_metadata: Chargeback details for refunded charges
        completed_at / failed_at / refunded_at: Transition timestamps
        metadata: Arbitrary JSON (tip message, checkout reference)
    """

    # ==========================================================================
    # Parties
    # ==========================================================================

    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments_made",
        help_text="Fan who paid",
    )

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments_received",
        help_text="Creator being paid",
    )

    subscription = models.ForeignKey(
        "monetization.Subscription",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
        help_text="Subscription this charge paid for",
    )

    content_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Post or stream unlocked by a pay-per-view charge",
    )

    # ==========================================================================
    # Amount
    # ==========================================================================

    gross_amount_cents = models.PositiveBigIntegerField(
        help_text="Amount charged in cents",
    )

    currency = models.CharField(
        max_length=3,
        default=DEFAULT_CURRENCY,
        help_text="ISO 4217 currency code (lowercase)",
    )

    transaction_type = models.CharField(
        max_length=20,
        choices=TransactionType.choices,
        db_index=True,
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        default=TransactionStatus.PENDING,
        choices=TransactionStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the transaction (managed by FSM)",
    )

    # ==========================================================================
    # Provider
    # ==========================================================================

    provider = models.CharField(max_length=30, default="ccbill")

    provider_transaction_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Provider transaction id - unique constraint for idempotency",
    )

    # ==========================================================================
    # Outcome
    # ==========================================================================

    failure_reason = models.TextField(null=True, blank=True)
    refund_metadata = models.JSONField(default=dict, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)

    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Arbitrary JSON metadata for extensibility",
    )

    class Meta:
        db_table = "monetization_transaction"
        ordering = ["-created_at"]
        verbose_name = "Transaction"
        verbose_name_plural = "Transactions"
        indexes = [
            models.Index(fields=["payer", "status"], name="txn_payer_status_idx"),
            models.Index(fields=["creator", "status"], name="txn_creator_status_idx"),
        ]

    def __str__(self) -> str:
        return (
            f"PaymentTransaction({self.provider_transaction_id}, {self.status}, "
            f"{format_cents(self.gross_amount_cents, self.currency)})"
        )

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=TransactionStatus.PENDING,
        target=TransactionStatus.COMPLETED,
    )
    def complete(self):
        """Transition: PENDING -> COMPLETED"""
        self.completed_at = timezone.now()

    @transition(
        field=status,
        source=TransactionStatus.PENDING,
        target=TransactionStatus.FAILED,
    )
    def fail(self, reason: str | None = None):
        """Transition: PENDING -> FAILED"""
        self.failed_at = timezone.now()
        if reason:
            self.failure_reason = reason

    @transition(
        field=status,
        source=TransactionStatus.COMPLETED,
        target=TransactionStatus.REFUNDED,
    )
    def refund(self, metadata: dict | None = None):
        """
        Reverse a settled charge (chargeback).

        Transition: COMPLETED -> REFUNDED
        """
        self.refunded_at = timezone.now()
        self.refund_metadata = metadata or {}

    @property
    def is_completed(self) -> bool:
        return self.status == TransactionStatus.COMPLETED

    @property
    def is_pending(self) -> bool:
        return self.status == TransactionStatus.PENDING
