"""
Payout service for creator withdrawals.

Creators request payouts against their ledger balance; admins approve,
reject or cancel them. Money leaves the ledger only on approval, when a
negative payout entry is appended in the same transaction that completes
the payout.

Concurrency:
    request_payout() locks the creator's user row, so two concurrent
    requests from one creator are serialized and the second sees the
    first as an open payout. admin_process() locks the payout row.

Usage:
    from monetization.services import PayoutService

    result = PayoutService.request_payout(creator, 8000, "paxum", {"email": "..."})
    if not result.success:
        return Response(result.to_response(), status=400)

    PayoutService.admin_process(result.data.id, "approve", admin, notes="Sent via Paxum")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db.models import Count, Sum
from django_fsm import TransitionNotAllowed

from core.services import BaseService, ServiceResult
from monetization.ledger.services import LedgerService
from monetization.models import OPEN_PAYOUT_STATES, Payout
from monetization.money import MIN_PAYOUT_CENTS, format_cents
from monetization.state_machines import (
    LedgerEntryType,
    PayoutAction,
    PayoutMethod,
    PayoutState,
)
from notifications.models import NotificationType
from notifications.services import notify

if TYPE_CHECKING:
    from typing import Any

    from django.db.models import QuerySet

    from authentication.models import User


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class PayoutOverview:
    """
    Admin payout listing with aggregate stats.

    Attributes:
        payouts: Payouts matching the filter, newest first
        stats: Per-state {"count", "amount_cents"} plus "open_amount_cents"
    """

    payouts: list[Payout]
    stats: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Payout Service
# =============================================================================


class PayoutService(BaseService):
    """
    Creator payout workflow.

    Error codes:
        BELOW_MINIMUM, INVALID_METHOD, PAYOUT_ALREADY_PENDING,
        INSUFFICIENT_BALANCE, PAYOUT_NOT_FOUND, INVALID_ACTION,
        INVALID_PAYOUT_STATE, FAILURE_REASON_REQUIRED
    """

    @classmethod
    def available_balance(cls, creator_id: Any) -> int:
        """Ledger balance minus payouts that are requested but not yet approved."""
        open_total = (
            Payout.objects.filter(creator_id=creator_id, state__in=OPEN_PAYOUT_STATES).aggregate(
                total=Sum("amount_cents")
            )["total"]
            or 0
        )
        return LedgerService.get_balance(creator_id) - open_total

    @classmethod
    def request_payout(
        cls,
        creator: User,
        amount_cents: int,
        method: str = PayoutMethod.BANK_TRANSFER,
        details: dict[str, Any] | None = None,
    ) -> ServiceResult[Payout]:
        """
        Create a PENDING payout for a creator.

        Args:
            creator: Requesting creator
            amount_cents: Amount to withdraw
            method: A PayoutMethod value
            details: Account details for the method
        """
        if amount_cents < MIN_PAYOUT_CENTS:
            return ServiceResult.failure(
                f"Minimum payout is {format_cents(MIN_PAYOUT_CENTS)}",
                error_code="BELOW_MINIMUM",
            )
        if method not in PayoutMethod.values:
            return ServiceResult.failure(
                f"Payout method must be one of: {', '.join(PayoutMethod.values)}",
                error_code="INVALID_METHOD",
            )

        with cls.atomic():
            # Serialize concurrent requests from the same creator
            get_user_model().objects.select_for_update().filter(pk=creator.pk).first()

            if Payout.objects.filter(creator=creator, state__in=OPEN_PAYOUT_STATES).exists():
                return ServiceResult.failure(
                    "You already have a pending payout request",
                    error_code="PAYOUT_ALREADY_PENDING",
                )

            available = cls.available_balance(creator.pk)
            if amount_cents > available:
                return ServiceResult.failure(
                    f"Insufficient balance. Available: {format_cents(max(available, 0))}",
                    error_code="INSUFFICIENT_BALANCE",
                )

            payout = Payout.objects.create(
                creator=creator,
                amount_cents=amount_cents,
                method=method,
                method_details=details or {},
            )

        cls.get_logger().info(
            "Payout requested",
            extra={
                "payout_id": str(payout.id),
                "creator_id": creator.pk,
                "amount_cents": amount_cents,
                "method": method,
            },
        )
        return ServiceResult.success(payout)

    @classmethod
    def admin_process(
        cls,
        payout_id: Any,
        action: str,
        admin: User,
        notes: str | None = None,
        failure_reason: str | None = None,
    ) -> ServiceResult[Payout]:
        """
        Apply an admin action to an open payout.

        Actions:
            approve / complete: -> COMPLETED, append the payout ledger entry
            process:            PENDING -> PROCESSING
            reject / fail:      -> FAILED, failure_reason required
            cancel:             -> CANCELLED

        Only PENDING and PROCESSING payouts can be acted on.
        """
        if action not in PayoutAction.values:
            return ServiceResult.failure(
                f"Action must be one of: {', '.join(PayoutAction.values)}",
                error_code="INVALID_ACTION",
            )
        if action in (PayoutAction.REJECT, PayoutAction.FAIL) and not (failure_reason or "").strip():
            return ServiceResult.failure(
                "A failure reason is required",
                error_code="FAILURE_REASON_REQUIRED",
            )

        with cls.atomic():
            payout = Payout.objects.select_for_update().filter(pk=payout_id).first()
            if payout is None:
                return ServiceResult.failure("Payout not found", error_code="PAYOUT_NOT_FOUND")
            if not payout.is_open:
                return ServiceResult.failure(
                    f"Cannot process a {payout.state} payout",
                    error_code="INVALID_PAYOUT_STATE",
                )

            try:
                cls._apply(payout, action, admin, notes, failure_reason)
            except TransitionNotAllowed:
                return ServiceResult.failure(
                    f"Cannot {action} a {payout.state} payout",
                    error_code="INVALID_PAYOUT_STATE",
                )
            payout.save()

            cls._notify_creator(payout)

        cls.get_logger().info(
            "Payout processed",
            extra={
                "payout_id": str(payout.id),
                "action": action,
                "state": payout.state,
                "admin_id": admin.pk,
                "amount_cents": payout.amount_cents,
            },
        )
        return ServiceResult.success(payout)

    @classmethod
    def _apply(
        cls,
        payout: Payout,
        action: str,
        admin: User,
        notes: str | None,
        failure_reason: str | None,
    ) -> None:
        if action in (PayoutAction.APPROVE, PayoutAction.COMPLETE):
            payout.complete(admin=admin, notes=notes)
            payout.ledger_entry = LedgerService.append(
                creator_id=payout.creator_id,
                gross_cents=-payout.amount_cents,
                entry_type=LedgerEntryType.PAYOUT,
                description=f"Payout processed - {payout.method}",
                idempotency_key=f"payout:{payout.id}",
            )
        elif action == PayoutAction.PROCESS:
            payout.start_processing(notes=notes)
        elif action in (PayoutAction.REJECT, PayoutAction.FAIL):
            payout.fail(failure_reason, admin=admin, notes=notes)
        elif action == PayoutAction.CANCEL:
            payout.cancel(admin=admin, notes=notes)

    @classmethod
    def _notify_creator(cls, payout: Payout) -> None:
        event = {
            PayoutState.COMPLETED: NotificationType.PAYOUT_COMPLETED,
            PayoutState.FAILED: NotificationType.PAYOUT_FAILED,
            PayoutState.CANCELLED: NotificationType.PAYOUT_CANCELLED,
        }.get(payout.state)
        if event is None:
            return
        notify(
            event,
            payout.creator_id,
            {
                "payout_id": payout.id,
                "amount_cents": payout.amount_cents,
                "method": payout.method,
                "failure_reason": payout.failure_reason,
            },
            idempotency_key=f"{event}:{payout.id}",
        )

    @classmethod
    def list_for_creator(cls, creator: User, limit: int = 50) -> QuerySet[Payout]:
        return Payout.objects.filter(creator=creator).order_by("-created_at")[: max(1, limit)]

    @classmethod
    def admin_overview(cls, status: str | None = None, limit: int = 100) -> PayoutOverview:
        """Payouts (optionally one state) with counts and totals per state."""
        queryset = Payout.objects.select_related("creator", "processed_by")
        if status:
            queryset = queryset.filter(state=status)

        stats: dict[str, Any] = {
            state: {"count": 0, "amount_cents": 0} for state in PayoutState.values
        }
        for row in Payout.objects.order_by().values("state").annotate(
            count=Count("id"), amount_cents=Sum("amount_cents")
        ):
            stats[row["state"]] = {"count": row["count"], "amount_cents": row["amount_cents"] or 0}
        stats["open_amount_cents"] = sum(stats[state]["amount_cents"] for state in OPEN_PAYOUT_STATES)

        return PayoutOverview(
            payouts=list(queryset.order_by("-created_at")[: max(1, limit)]),
            stats=stats,
        )
