"""
State enums for monetization models.

These are Django TextChoices for database storage and admin integration.
The status columns that move through a lifecycle are django-fsm fields.

State Machines Overview:

PaymentTransaction:
    pending → completed → refunded
    pending → failed

Subscription:
    pending → active → canceled
    active → expired
    pending → canceled

Payout:
    pending → processing → completed / failed / cancelled
    pending → completed / failed / cancelled
"""

from django.db import models


class TransactionStatus(models.TextChoices):
    """
    States for a PaymentTransaction.

    Status only moves forward; a failed or refunded transaction never
    returns to pending or completed.
    """

    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class TransactionType(models.TextChoices):
    SUBSCRIPTION = "subscription", "Subscription"
    PPV = "ppv", "Pay-per-view"
    TIP = "tip", "Tip"


class SubscriptionState(models.TextChoices):
    """
    States for a fan's subscription to a creator.

    An ACTIVE row whose expires_at has passed is treated as inactive by
    every reader, even before the expiry sweep moves it to EXPIRED.
    """

    PENDING = "pending", "Pending"
    ACTIVE = "active", "Active"
    CANCELED = "canceled", "Canceled"
    EXPIRED = "expired", "Expired"


class EntitlementType(models.TextChoices):
    SUBSCRIPTION = "subscription", "Subscription"
    PPV_PURCHASE = "ppv_purchase", "Pay-per-view purchase"
    TIP = "tip", "Tip"
    FREE = "free", "Free grant"


class LedgerEntryType(models.TextChoices):
    """
    Kinds of ledger rows.

    EARNINGS rows are positive (fee and net split from gross); PAYOUT and
    REFUND rows are negative; ADJUSTMENT rows carry any sign.
    """

    EARNINGS = "earnings", "Earnings"
    PAYOUT = "payout", "Payout"
    REFUND = "refund", "Refund"
    ADJUSTMENT = "adjustment", "Adjustment"


class PayoutState(models.TextChoices):
    """
    States for a creator payout request.

    Terminal states: COMPLETED, FAILED, CANCELLED
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"
    CANCELLED = "cancelled", "Cancelled"


class PayoutMethod(models.TextChoices):
    BANK_TRANSFER = "bank_transfer", "Bank transfer"
    PAXUM = "paxum", "Paxum"
    SKRILL = "skrill", "Skrill"
    CRYPTO = "crypto", "Crypto"
    OTHER = "other", "Other"


class PayoutAction(models.TextChoices):
    """Actions an admin can take on an open payout."""

    APPROVE = "approve", "Approve"
    COMPLETE = "complete", "Complete"
    PROCESS = "process", "Mark processing"
    REJECT = "reject", "Reject"
    FAIL = "fail", "Fail"
    CANCEL = "cancel", "Cancel"


class WebhookEventStatus(models.TextChoices):
    """
    Processing status for WebhookEvent.

    State Flow:
        PENDING → PROCESSING → PROCESSED
        PENDING → PROCESSING → FAILED (retried by the periodic task)
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    PROCESSED = "processed", "Processed"
    FAILED = "failed", "Failed"


__all__ = [
    "TransactionStatus",
    "TransactionType",
    "SubscriptionState",
    "EntitlementType",
    "LedgerEntryType",
    "PayoutState",
    "PayoutMethod",
    "PayoutAction",
    "WebhookEventStatus",
]
