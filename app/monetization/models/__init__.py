"""
Monetization models.

- PaymentTransaction: One provider charge; provider id is the idempotency key
- Subscription: A fan's paid access to a creator
- Entitlement: Write-once right to view content
- Payout: A creator's withdrawal request
- WebhookEvent: Stored provider webhook and its processing status
- LedgerEntry: Append-only money movement (defined in monetization.ledger)
"""

from monetization.ledger.models import LedgerEntry
from monetization.models.entitlement import Entitlement
from monetization.models.payout import OPEN_PAYOUT_STATES, Payout
from monetization.models.subscription import Subscription
from monetization.models.transaction import PaymentTransaction
from monetization.models.webhook_event import WebhookEvent

__all__ = [
    "Entitlement",
    "LedgerEntry",
    "OPEN_PAYOUT_STATES",
    "PaymentTransaction",
    "Payout",
    "Subscription",
    "WebhookEvent",
]
