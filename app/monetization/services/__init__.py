"""
Monetization services.

This module provides:
- SubscriptionService: Subscription lifecycle
- EntitlementService / AccessService: Viewing rights and access decisions
- PayoutService: Creator withdrawals and the admin review queue
- ReconciliationService: Applies provider payment events
- CheckoutService: Starts subscriptions, unlocks and tips

Usage:
    from monetization.services import AccessService, CheckoutService

    if not AccessService.has_access(request.user.id, post.id):
        result = CheckoutService.start_content_unlock(request.user, post.id)
"""

from monetization.services.access_service import (
    AccessDecision,
    AccessReason,
    AccessService,
    EntitlementService,
)
from monetization.services.subscription_service import SubscriptionService
from monetization.services.payout_service import PayoutOverview, PayoutService
from monetization.services.reconciliation_service import ReconciliationService
from monetization.services.checkout_service import CheckoutService, CheckoutSession

__all__ = [
    "AccessDecision",
    "AccessReason",
    "AccessService",
    "CheckoutService",
    "CheckoutSession",
    "EntitlementService",
    "PayoutOverview",
    "PayoutService",
    "ReconciliationService",
    "SubscriptionService",
]
