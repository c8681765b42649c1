"""
Checkout flows for subscriptions, pay-per-view unlocks and tips.

A checkout validates the purchase and then hands off to the configured
provider (MONETIZATION_CHECKOUT_PROVIDER):

    ccbill  The fan is sent to CCBill's hosted form. Nothing is charged
            or granted here; the settlement webhook does that later.
    mock    The charge settles immediately. A synthetic payment.completed
            event is fed through ReconciliationService, so a mock purchase
            takes exactly the same path as a real one.

Usage:
    from monetization.services import CheckoutService

    result = CheckoutService.start_content_unlock(request.user, post.id)
    if result.success and result.data.payment_url:
        return redirect(result.data.payment_url)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.conf import settings

from authentication.services import CreatorService
from content.models import Visibility
from content.services import ContentService
from core.services import BaseService, ServiceResult
from monetization.adapters import CCBillAdapter, PaymentLinkParams
from monetization.exceptions import ProviderNotConfiguredError
from monetization.models import PaymentTransaction, Subscription
from monetization.services.access_service import EntitlementService
from monetization.services.reconciliation_service import ReconciliationService
from monetization.services.subscription_service import SubscriptionService
from monetization.state_machines import TransactionType
from monetization.webhooks.events import PAYMENT_COMPLETED, EventMetadata, PaymentEvent

if TYPE_CHECKING:
    from typing import Any

    from authentication.models import User

MOCK_PROVIDER = "mock"
CCBILL_PROVIDER = "ccbill"

MIN_TIP_CENTS = 100


@dataclass
class CheckoutSession:
    """
    Outcome of starting a checkout.

    Attributes:
        transaction_type: subscription, ppv or tip
        amount_cents: Amount charged
        provider: Provider that handles the charge
        payment_url: Hosted form to redirect to (ccbill only)
        transaction: Settled transaction (mock only)
        subscription: Subscription the checkout is for, if any
    """

    transaction_type: str
    amount_cents: int
    provider: str
    payment_url: str | None = None
    transaction: PaymentTransaction | None = None
    subscription: Subscription | None = None

    @property
    def is_settled(self) -> bool:
        return self.transaction is not None and self.transaction.is_completed


def checkout_provider() -> str:
    return getattr(settings, "MONETIZATION_CHECKOUT_PROVIDER", MOCK_PROVIDER)


def _frontend_url(path: str) -> str:
    base = getattr(settings, "FRONTEND_BASE_URL", "http://localhost:3000").rstrip("/")
    return f"{base}{path}"


class CheckoutService(BaseService):
    """
    Starts purchases and routes them to the payment provider.

    Error codes:
        CONTENT_NOT_FOUND, NOT_PPV, OWN_CONTENT, ALREADY_UNLOCKED,
        INVALID_AMOUNT, SELF_TIP, CREATOR_NOT_APPROVED,
        PROVIDER_NOT_CONFIGURED, plus SubscriptionService.create() codes
    """

    @classmethod
    def start_subscription_checkout(
        cls,
        fan: User,
        creator: User,
        tier_name: str = "default",
    ) -> ServiceResult[CheckoutSession]:
        """
        Create a pending subscription and start paying for it.

        A free subscription (price 0) is activated without a charge.
        """
        created = SubscriptionService.create(fan, creator, tier_name=tier_name)
        if not created.success:
            return created
        subscription = created.data

        if subscription.price_cents == 0:
            activated = SubscriptionService.activate(subscription.id)
            if not activated.success:
                return activated
            return ServiceResult.success(
                CheckoutSession(
                    transaction_type=TransactionType.SUBSCRIPTION,
                    amount_cents=0,
                    provider=MOCK_PROVIDER,
                    subscription=activated.data,
                )
            )

        result = cls._checkout(
            payer=fan,
            creator_id=creator.pk,
            transaction_type=TransactionType.SUBSCRIPTION,
            amount_cents=subscription.price_cents,
            subscription_id=subscription.id,
            return_path=f"/creators/{creator.pk}?subscribed=true",
            failure_path=f"/creators/{creator.pk}/subscribe?error=payment_failed",
        )
        if result.success:
            # Report the row settlement actually activated
            txn = result.data.transaction
            if txn is not None and txn.subscription_id:
                result.data.subscription = Subscription.objects.get(pk=txn.subscription_id)
            else:
                result.data.subscription = Subscription.objects.get(pk=subscription.id)
        return result

    @classmethod
    def start_content_unlock(cls, user: User, content_id: Any) -> ServiceResult[CheckoutSession]:
        """Buy a pay-per-view post or live stream."""
        content = ContentService.get_content_visibility(content_id)
        if content is None or content.is_disabled:
            return ServiceResult.failure("Content not found", error_code="CONTENT_NOT_FOUND")
        if content.visibility != Visibility.PPV:
            return ServiceResult.failure(
                "This content is not pay-per-view",
                error_code="NOT_PPV",
            )
        if str(content.creator_id) == str(user.pk):
            return ServiceResult.failure(
                "You cannot purchase your own content",
                error_code="OWN_CONTENT",
            )
        already_unlocked = EntitlementService.active_for(
            user.pk, content.content_id
        ).exists() or EntitlementService.has_creator_wide_grant(user.pk, content.creator_id)
        if already_unlocked:
            return ServiceResult.failure(
                "You already have access to this content",
                error_code="ALREADY_UNLOCKED",
            )

        return cls._checkout(
            payer=user,
            creator_id=content.creator_id,
            transaction_type=TransactionType.PPV,
            amount_cents=content.price_cents,
            content_id=content.content_id,
            return_path=f"/{content.kind}s/{content.content_id}?unlocked=true",
            failure_path=f"/{content.kind}s/{content.content_id}?error=payment_failed",
        )

    @classmethod
    def start_tip(
        cls,
        fan: User,
        creator: User,
        amount_cents: int,
    ) -> ServiceResult[CheckoutSession]:
        if amount_cents < MIN_TIP_CENTS:
            return ServiceResult.failure(
                "Tips must be at least $1.00",
                error_code="INVALID_AMOUNT",
            )
        if fan.pk == creator.pk:
            return ServiceResult.failure("You cannot tip yourself", error_code="SELF_TIP")
        if not CreatorService.is_creator_approved(creator.pk):
            return ServiceResult.failure(
                "This creator is not accepting tips",
                error_code="CREATOR_NOT_APPROVED",
            )

        return cls._checkout(
            payer=fan,
            creator_id=creator.pk,
            transaction_type=TransactionType.TIP,
            amount_cents=amount_cents,
            return_path="/payments/success",
            failure_path="/payments/failure",
        )

    # ==========================================================================
    # Provider hand-off
    # ==========================================================================

    @classmethod
    def _checkout(
        cls,
        payer: User,
        creator_id: Any,
        transaction_type: str,
        amount_cents: int,
        return_path: str,
        failure_path: str,
        subscription_id: uuid.UUID | None = None,
        content_id: uuid.UUID | None = None,
    ) -> ServiceResult[CheckoutSession]:
        provider = checkout_provider()

        if provider == CCBILL_PROVIDER:
            try:
                payment_url = CCBillAdapter.from_settings().generate_payment_link(
                    PaymentLinkParams(
                        amount_cents=amount_cents,
                        user_id=str(payer.pk),
                        creator_id=str(creator_id),
                        transaction_type=transaction_type,
                        return_url=_frontend_url(return_path),
                        failure_url=_frontend_url(failure_path),
                        subscription_id=str(subscription_id) if subscription_id else None,
                        content_id=str(content_id) if content_id else None,
                    )
                )
            except ProviderNotConfiguredError as e:
                return ServiceResult.from_exception(e)

            return ServiceResult.success(
                CheckoutSession(
                    transaction_type=transaction_type,
                    amount_cents=amount_cents,
                    provider=provider,
                    payment_url=payment_url,
                )
            )

        return cls._settle_mock(
            payer=payer,
            creator_id=creator_id,
            transaction_type=transaction_type,
            amount_cents=amount_cents,
            subscription_id=subscription_id,
            content_id=content_id,
        )

    @classmethod
    def _settle_mock(
        cls,
        payer: User,
        creator_id: Any,
        transaction_type: str,
        amount_cents: int,
        subscription_id: uuid.UUID | None,
        content_id: uuid.UUID | None,
    ) -> ServiceResult[CheckoutSession]:
        event = PaymentEvent(
            event_type=PAYMENT_COMPLETED,
            provider_transaction_id=f"mock_{uuid.uuid4().hex}",
            gross_cents=amount_cents,
            provider_status="completed",
            metadata=EventMetadata(
                user_id=str(payer.pk),
                creator_id=str(creator_id),
                transaction_type=transaction_type,
                content_id=str(content_id) if content_id else None,
            ),
            subscription_id=str(subscription_id) if subscription_id else None,
            provider=MOCK_PROVIDER,
        )

        result = ReconciliationService.reconcile(event)
        if not result.success:
            return result

        txn = result.data
        cls.get_logger().info(
            "Mock checkout settled",
            extra={
                "transaction_id": str(txn.id),
                "transaction_type": transaction_type,
                "amount_cents": amount_cents,
                "payer_id": payer.pk,
            },
        )
        return ServiceResult.success(
            CheckoutSession(
                transaction_type=transaction_type,
                amount_cents=amount_cents,
                provider=MOCK_PROVIDER,
                transaction=txn,
            )
        )
