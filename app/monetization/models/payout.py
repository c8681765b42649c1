"""
Payout model for creator withdrawals.

A Payout is a creator's request to be paid part of their ledger balance.
Money only leaves the ledger when an admin approves it: approval writes a
negative payout entry and links it here.

Usage:
    from monetization.models import Payout

    payout = Payout.objects.create(
        creator=creator,
        amount_cents=8000,
        method=PayoutMethod.PAXUM,
        method_details={"email": "creator@example.com"},
    )

    # State transitions using django-fsm
    payout.complete(admin=admin)   # pending -> completed
    payout.save()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin, VersionedMixin
from core.models import BaseModel
from monetization.money import format_cents
from monetization.state_machines import PayoutMethod, PayoutState

OPEN_PAYOUT_STATES = (PayoutState.PENDING, PayoutState.PROCESSING)


class Payout(UUIDPrimaryKeyMixin, VersionedMixin, BaseModel):
    """
    A creator's payout request.

    State Flow:
        PENDING -> PROCESSING -> COMPLETED / FAILED / CANCELLED
        PENDING -> COMPLETED / FAILED / CANCELLED

    Fields:
        creator: Creator being paid
        amount_cents: Requested amount in cents
        state: Current FSM state
        method: bank_transfer, paxum, skrill, crypto or other
        method_details: Account details for the chosen method
        admin_notes: Notes left by the processing admin
        processed_by: Admin who completed, failed or cancelled it
        processed_at: When that happened
        failure_reason: Why it failed
        ledger_entry: The negative payout entry written on completion
        version: Bumped on every save (VersionedMixin)
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payouts",
        help_text="Creator receiving the payout",
    )

    # ==========================================================================
    # Amount & Method
    # ==========================================================================

    amount_cents = models.PositiveBigIntegerField(
        help_text="Payout amount in cents",
    )

    method = models.CharField(
        max_length=20,
        choices=PayoutMethod.choices,
        default=PayoutMethod.BANK_TRANSFER,
    )

    method_details = models.JSONField(default=dict, blank=True)

    # ==========================================================================
    # State
    # ==========================================================================

    state = FSMField(
        default=PayoutState.PENDING,
        choices=PayoutState.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the payout (managed by FSM)",
    )

    # ==========================================================================
    # Processing
    # ==========================================================================

    admin_notes = models.TextField(null=True, blank=True)

    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    processed_at = models.DateTimeField(null=True, blank=True)

    failure_reason = models.TextField(null=True, blank=True)

    ledger_entry = models.OneToOneField(
        "monetization.LedgerEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payout",
        help_text="Payout ledger entry written on completion",
    )

    class Meta:
        db_table = "monetization_payout"
        ordering = ["-created_at"]
        verbose_name = "Payout"
        verbose_name_plural = "Payouts"
        indexes = [
            models.Index(fields=["creator", "state"], name="payout_creator_state_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_cents__gt=0),
                name="payout_amount_positive",
            ),
            models.UniqueConstraint(
                fields=["creator"],
                condition=Q(state__in=OPEN_PAYOUT_STATES),
                name="one_open_payout_per_creator",
            ),
        ]

    def __str__(self) -> str:
        return f"Payout({self.id}, {self.state}, {format_cents(self.amount_cents)})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    def _stamp(self, admin, notes: str | None) -> None:
        self.processed_by = admin
        self.processed_at = timezone.now()
        if notes:
            self.admin_notes = notes

    @transition(
        field=state,
        source=PayoutState.PENDING,
        target=PayoutState.PROCESSING,
    )
    def start_processing(self, notes: str | None = None):
        """Transition: PENDING -> PROCESSING"""
        if notes:
            self.admin_notes = notes

    @transition(
        field=state,
        source=OPEN_PAYOUT_STATES,
        target=PayoutState.COMPLETED,
    )
    def complete(self, admin=None, notes: str | None = None):
        """
        Transition: PENDING/PROCESSING -> COMPLETED

        The caller links the payout ledger entry in the same transaction.
        """
        self._stamp(admin, notes)

    @transition(
        field=state,
        source=OPEN_PAYOUT_STATES,
        target=PayoutState.FAILED,
    )
    def fail(self, reason: str, admin=None, notes: str | None = None):
        """Transition: PENDING/PROCESSING -> FAILED"""
        self._stamp(admin, notes)
        self.failure_reason = reason

    @transition(
        field=state,
        source=OPEN_PAYOUT_STATES,
        target=PayoutState.CANCELLED,
    )
    def cancel(self, admin=None, notes: str | None = None):
        """Transition: PENDING/PROCESSING -> CANCELLED"""
        self._stamp(admin, notes)

    @property
    def is_open(self) -> bool:
        return self.state in OPEN_PAYOUT_STATES
