"""
State and type enums for monetization models.
"""

from monetization.state_machines.states import (
    EntitlementType,
    LedgerEntryType,
    PayoutAction,
    PayoutMethod,
    PayoutState,
    SubscriptionState,
    TransactionStatus,
    TransactionType,
    WebhookEventStatus,
)

__all__ = [
    "EntitlementType",
    "LedgerEntryType",
    "PayoutAction",
    "PayoutMethod",
    "PayoutState",
    "SubscriptionState",
    "TransactionStatus",
    "TransactionType",
    "WebhookEventStatus",
]
