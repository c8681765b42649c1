"""
Payment event handlers.

This module provides the handler registry and one handler per normalized
event type. Handlers are called by ReconciliationService.reconcile()
inside a single transaction.atomic() block: every write a handler makes
(transaction status, subscription, entitlement, ledger) commits together
or not at all.

Idempotency:
    The PaymentTransaction row for the provider transaction id is locked
    with select_for_update() before anything else happens. A handler
    that finds the transaction already past the state it would move it
    out of treats the event as a duplicate and returns without writing.

Usage:
    from monetization.webhooks.handlers import dispatch_event, register_handler

    @register_handler("custom.event")
    def handle_custom_event(event: PaymentEvent) -> ServiceResult:
        ...

    result = dispatch_event(event)
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Callable

from django.contrib.auth import get_user_model

from content.services import ContentService
from core.services import ServiceResult
from monetization.ledger.models import LedgerEntry
from monetization.ledger.services import LedgerService
from monetization.models import PaymentTransaction, Subscription
from monetization.services.access_service import EntitlementService
from monetization.services.subscription_service import SubscriptionService, subscription_period_days
from monetization.state_machines import (
    EntitlementType,
    LedgerEntryType,
    SubscriptionState,
    TransactionStatus,
    TransactionType,
)
from monetization.webhooks.events import (
    CHARGEBACK_CREATED,
    PAYMENT_COMPLETED,
    PAYMENT_FAILED,
    PROVIDER_FAILED,
    SETTLEMENT_EVENTS,
    SUBSCRIPTION_CANCELED,
)
from notifications.models import NotificationType
from notifications.services import notify

if TYPE_CHECKING:
    from monetization.webhooks.events import PaymentEvent


logger = logging.getLogger(__name__)


# =============================================================================
# Handler Registry
# =============================================================================


# Maps event type strings to handler functions
EVENT_HANDLERS: dict[str, Callable[[PaymentEvent], ServiceResult]] = {}


def register_handler(*event_types: str) -> Callable:
    """
    Decorator to register a handler for one or more event types.

    Usage:
        @register_handler("payment.completed", "subscription.renewed")
        def handle_payment_completed(event: PaymentEvent) -> ServiceResult:
            ...
    """

    def decorator(func: Callable[[PaymentEvent], ServiceResult]) -> Callable:
        for event_type in event_types:
            EVENT_HANDLERS[event_type] = func
            logger.debug("Registered payment event handler for %s", event_type)
        return func

    return decorator


def get_handler(event_type: str) -> Callable[[PaymentEvent], ServiceResult] | None:
    return EVENT_HANDLERS.get(event_type)


def dispatch_event(event: PaymentEvent) -> ServiceResult:
    """
    Call the handler for event.event_type.

    Unknown event types are logged and acknowledged so new provider
    events never cause retries.
    """
    handler = get_handler(event.event_type)
    if handler is None:
        logger.info(
            "No handler registered for payment event type",
            extra={
                "event_type": event.event_type,
                "provider_transaction_id": event.provider_transaction_id,
            },
        )
        return ServiceResult.success(None)

    return handler(event)


# =============================================================================
# Helpers
# =============================================================================


def _as_uuid(value) -> uuid.UUID | None:
    if not value:
        return None
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def _user_pk(value):
    """Primary key of an existing user, or None."""
    if value in (None, ""):
        return None
    try:
        return get_user_model().objects.filter(pk=value).values_list("pk", flat=True).first()
    except (TypeError, ValueError):
        return None


def _lock_transaction(provider_transaction_id: str) -> PaymentTransaction | None:
    return (
        PaymentTransaction.objects.select_for_update()
        .filter(provider_transaction_id=provider_transaction_id)
        .first()
    )


def _earnings_description(transaction_type: str, provider_transaction_id: str) -> str:
    label = {
        TransactionType.SUBSCRIPTION: "Subscription payment",
        TransactionType.PPV: "PPV purchase",
        TransactionType.TIP: "Tip",
    }[transaction_type]
    return f"{label} - Transaction {provider_transaction_id}"


# =============================================================================
# Settlement Handlers
# =============================================================================


@register_handler(*SETTLEMENT_EVENTS)
def handle_payment_completed(event: PaymentEvent) -> ServiceResult:
    """
    Settle a charge: complete the transaction and deliver what was bought.

    Subscription charges activate or renew the fan's subscription, ppv
    charges grant an entitlement for the content, tips only earn. Every
    settled charge appends exactly one earnings ledger entry.

    Only a provider status of "completed" settles. A "failed" status is
    recorded as a declined charge; anything else leaves a PENDING
    transaction for a later event to settle.
    """
    metadata = event.metadata
    transaction_type = metadata.transaction_type
    if not transaction_type and event.event_type != PAYMENT_COMPLETED:
        transaction_type = TransactionType.SUBSCRIPTION

    if transaction_type not in TransactionType.values:
        return ServiceResult.failure(
            f"Unknown transaction type: {transaction_type}",
            error_code="INVALID_TRANSACTION_TYPE",
        )

    if event.provider_status == PROVIDER_FAILED:
        return _record_failure(event, transaction_type)

    payer_id = _user_pk(metadata.user_id)
    creator_id = _user_pk(metadata.creator_id)
    if payer_id is None or creator_id is None:
        return ServiceResult.failure(
            "Missing or unknown payer or creator in event metadata",
            error_code="INVALID_METADATA",
        )

    content_id = _as_uuid(metadata.content_id)
    if transaction_type == TransactionType.PPV:
        content = ContentService.get_content_visibility(content_id) if content_id else None
        if content is None:
            return ServiceResult.failure(
                "Pay-per-view event does not reference known content",
                error_code="CONTENT_NOT_FOUND",
            )
        if str(content.creator_id) != str(creator_id):
            return ServiceResult.failure(
                "Content does not belong to the paid creator",
                error_code="CONTENT_CREATOR_MISMATCH",
            )

    txn, created = PaymentTransaction.objects.select_for_update().get_or_create(
        provider_transaction_id=event.provider_transaction_id,
        defaults={
            "payer_id": payer_id,
            "creator_id": creator_id,
            "content_id": content_id,
            "gross_amount_cents": event.gross_cents,
            "currency": event.currency,
            "transaction_type": transaction_type,
            "provider": event.provider,
        },
    )

    if txn.status != TransactionStatus.PENDING:
        logger.info(
            "Duplicate settlement event ignored",
            extra={
                "provider_transaction_id": event.provider_transaction_id,
                "transaction_id": str(txn.id),
                "status": txn.status,
            },
        )
        return ServiceResult.success(txn)

    if not event.is_settled:
        logger.info(
            "Settlement event recorded without settling",
            extra={
                "provider_transaction_id": event.provider_transaction_id,
                "transaction_id": str(txn.id),
                "provider_status": event.provider_status,
            },
        )
        return ServiceResult.success(txn)

    txn.complete()

    if txn.transaction_type == TransactionType.SUBSCRIPTION:
        txn.subscription = _apply_subscription_payment(event, txn)
    elif txn.transaction_type == TransactionType.PPV:
        EntitlementService.grant(
            user_id=txn.payer_id,
            content_id=txn.content_id,
            creator_id=txn.creator_id,
            entitlement_type=EntitlementType.PPV_PURCHASE,
            transaction_id=txn.id,
        )
        notify(
            NotificationType.CONTENT_UNLOCKED,
            txn.payer_id,
            {"content_id": txn.content_id, "amount_cents": txn.gross_amount_cents},
            idempotency_key=f"content_unlocked:{txn.id}",
        )

    txn.save()

    LedgerService.append(
        creator_id=txn.creator_id,
        gross_cents=txn.gross_amount_cents,
        entry_type=LedgerEntryType.EARNINGS,
        transaction_id=txn.id,
        description=_earnings_description(txn.transaction_type, txn.provider_transaction_id),
        idempotency_key=f"earnings:{txn.id}",
    )

    notify(
        NotificationType.PAYMENT_RECEIVED,
        txn.creator_id,
        {
            "transaction_id": txn.id,
            "transaction_type": txn.transaction_type,
            "amount_cents": txn.gross_amount_cents,
            "payer_id": txn.payer_id,
        },
        idempotency_key=f"payment_received:{txn.id}",
    )

    logger.info(
        "Payment settled",
        extra={
            "transaction_id": str(txn.id),
            "provider_transaction_id": txn.provider_transaction_id,
            "transaction_type": txn.transaction_type,
            "gross_cents": txn.gross_amount_cents,
            "transaction_created": created,
        },
    )
    return ServiceResult.success(txn)


def _resolve_subscription(event: PaymentEvent, txn: PaymentTransaction) -> Subscription:
    """
    Find (and lock) the subscription a payment is for.

    Order: the subscription named by the event if it is still pending or
    active, else the pair's ACTIVE row, else a new PENDING row. A named
    PENDING row loses to a current ACTIVE row, but replaces a lapsed one.
    """
    pair = Subscription.objects.select_for_update().filter(
        fan_id=txn.payer_id,
        creator_id=txn.creator_id,
    )
    active = pair.filter(state=SubscriptionState.ACTIVE).first()

    named_id = _as_uuid(event.subscription_id)
    if named_id:
        named = pair.filter(pk=named_id).first()
        if named is not None and named.state in (SubscriptionState.PENDING, SubscriptionState.ACTIVE):
            if named.state == SubscriptionState.PENDING and active is not None:
                if active.is_currently_active:
                    return active
                SubscriptionService.expire_lapsed_for_pair(named)
            return named

    if active is not None:
        return active

    return Subscription.objects.create(
        fan_id=txn.payer_id,
        creator_id=txn.creator_id,
        price_cents=txn.gross_amount_cents,
    )


def _apply_subscription_payment(event: PaymentEvent, txn: PaymentTransaction) -> Subscription:
    subscription = _resolve_subscription(event, txn)
    period_days = subscription_period_days()

    if subscription.state == SubscriptionState.PENDING:
        subscription.activate(period_days)
        notification = NotificationType.SUBSCRIPTION_ACTIVATED
    else:
        subscription.renew(period_days)
        notification = NotificationType.SUBSCRIPTION_RENEWED
    subscription.save()

    notify(
        notification,
        subscription.fan_id,
        {
            "subscription_id": subscription.id,
            "creator_id": subscription.creator_id,
            "expires_at": subscription.expires_at,
        },
        idempotency_key=f"{notification}:{txn.id}",
    )
    return subscription


# =============================================================================
# Failure & Cancellation Handlers
# =============================================================================


@register_handler(PAYMENT_FAILED)
def handle_payment_failed(event: PaymentEvent) -> ServiceResult:
    """
    Record a declined charge.

    Only a PENDING transaction moves to FAILED; a completed or refunded
    one is never regressed by a late or reordered failure event.
    """
    return _record_failure(event, event.metadata.transaction_type)


def _record_failure(event: PaymentEvent, transaction_type: str | None) -> ServiceResult:
    """Fail the transaction for a declined charge, creating it if unseen."""
    txn = _lock_transaction(event.provider_transaction_id)

    if txn is None:
        payer_id = _user_pk(event.metadata.user_id)
        if payer_id is None or transaction_type not in TransactionType.values:
            logger.info(
                "Failure event for unknown transaction without usable metadata",
                extra={"provider_transaction_id": event.provider_transaction_id},
            )
            return ServiceResult.success(None)

        txn, _ = PaymentTransaction.objects.select_for_update().get_or_create(
            provider_transaction_id=event.provider_transaction_id,
            defaults={
                "payer_id": payer_id,
                "creator_id": _user_pk(event.metadata.creator_id),
                "content_id": _as_uuid(event.metadata.content_id),
                "gross_amount_cents": event.gross_cents,
                "currency": event.currency,
                "transaction_type": transaction_type,
                "provider": event.provider,
            },
        )

    if txn.status != TransactionStatus.PENDING:
        logger.info(
            "Failure event ignored for settled transaction",
            extra={"transaction_id": str(txn.id), "status": txn.status},
        )
        return ServiceResult.success(txn)

    txn.fail(event.failure_reason or "Declined by provider")
    txn.save()

    logger.info(
        "Payment failed",
        extra={
            "transaction_id": str(txn.id),
            "provider_transaction_id": txn.provider_transaction_id,
            "failure_reason": txn.failure_reason,
        },
    )
    return ServiceResult.success(txn)


@register_handler(SUBSCRIPTION_CANCELED)
def handle_subscription_canceled(event: PaymentEvent) -> ServiceResult:
    """Cancel the referenced subscription, or the pair's active one. No ledger change."""
    subscription = None
    subscription_id = _as_uuid(event.subscription_id)
    if subscription_id:
        subscription = Subscription.objects.select_for_update().filter(pk=subscription_id).first()

    if subscription is None:
        fan_id = _user_pk(event.metadata.user_id)
        creator_id = _user_pk(event.metadata.creator_id)
        if fan_id and creator_id:
            subscription = (
                Subscription.objects.select_for_update()
                .filter(fan_id=fan_id, creator_id=creator_id, state=SubscriptionState.ACTIVE)
                .first()
            )

    if subscription is None:
        logger.info(
            "Cancellation event for unknown subscription",
            extra={
                "subscription_id": event.subscription_id,
                "provider_transaction_id": event.provider_transaction_id,
            },
        )
        return ServiceResult.success(None)

    if subscription.state not in (SubscriptionState.PENDING, SubscriptionState.ACTIVE):
        return ServiceResult.success(subscription)

    subscription.cancel("Canceled by payment provider")
    subscription.save()

    notify(
        NotificationType.SUBSCRIPTION_CANCELED,
        subscription.creator_id,
        {"subscription_id": subscription.id, "fan_id": subscription.fan_id},
        idempotency_key=f"subscription_canceled:{subscription.id}",
    )
    logger.info(
        "Subscription canceled by provider",
        extra={"subscription_id": str(subscription.id)},
    )
    return ServiceResult.success(subscription)


# =============================================================================
# Chargeback Handler
# =============================================================================


@register_handler(CHARGEBACK_CREATED)
def handle_chargeback(event: PaymentEvent) -> ServiceResult:
    """
    Reverse a settled charge.

    The transaction moves to REFUNDED, the earnings entry is reversed
    column by column and a subscription funded by the charge is
    canceled. Entitlements stay on record. A chargeback for a charge we
    have not seen settle yet is refused without writes; the stored
    webhook event is retried later.
    """
    txn = _lock_transaction(event.provider_transaction_id)

    if txn is not None and txn.status == TransactionStatus.REFUNDED:
        logger.info(
            "Duplicate chargeback event ignored",
            extra={"transaction_id": str(txn.id)},
        )
        return ServiceResult.success(txn)

    if txn is None or txn.status != TransactionStatus.COMPLETED:
        return ServiceResult.failure(
            "Chargeback received before the charge settled",
            error_code="TRANSACTION_NOT_SETTLED",
        )

    txn.refund(
        {
            "event_type": event.event_type,
            "provider_status": event.provider_status,
            "amount_cents": event.gross_cents,
            "reason": event.failure_reason,
        }
    )
    txn.save()

    earnings = LedgerEntry.objects.filter(idempotency_key=f"earnings:{txn.id}").first()
    if earnings is not None:
        LedgerService.append_reversal(
            earnings,
            description=f"Chargeback - Transaction {txn.provider_transaction_id}",
            idempotency_key=f"chargeback:{txn.id}",
        )
    else:
        logger.error(
            "Settled transaction has no earnings entry to reverse",
            extra={"transaction_id": str(txn.id)},
        )

    if txn.subscription_id:
        subscription = Subscription.objects.select_for_update().get(pk=txn.subscription_id)
        if subscription.state in (SubscriptionState.PENDING, SubscriptionState.ACTIVE):
            subscription.cancel("Chargeback")
            subscription.save()

    notify(
        NotificationType.CHARGEBACK_RECEIVED,
        txn.creator_id,
        {
            "transaction_id": txn.id,
            "amount_cents": txn.gross_amount_cents,
            "transaction_type": txn.transaction_type,
        },
        idempotency_key=f"chargeback_received:{txn.id}",
    )
    logger.warning(
        "Chargeback applied",
        extra={
            "transaction_id": str(txn.id),
            "provider_transaction_id": txn.provider_transaction_id,
            "gross_cents": txn.gross_amount_cents,
        },
    )
    return ServiceResult.success(txn)
