"""
Pytest fixtures for monetization tests.

Shared by the ledger, services, webhooks and adapters test packages.
Users and API clients come from the root conftest.

Usage:
    def test_settles(fan, creator, settle):
        txn = settle(fan, creator, gross_cents=10000)
        assert txn.status == TransactionStatus.COMPLETED

    def test_webhook(ccbill_settings, signed_post, fan, creator):
        response = signed_post(ccbill_payload(fan, creator))
"""

import json

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from monetization.adapters import CCBillAdapter
from monetization.services import ReconciliationService
from monetization.tests.factories import (
    PayoutFactory,
    SubscriptionFactory,
    build_payment_event,
)
from monetization.webhooks.events import CHARGEBACK_CREATED

WEBHOOK_SECRET = "whsec_test_secret"


# =============================================================================
# Provider Configuration
# =============================================================================


@pytest.fixture
def ccbill_settings(settings):
    """Configure CCBill credentials for the duration of a test."""
    settings.CCBILL_CLIENT_ACCOUNT_NUMBER = "900000"
    settings.CCBILL_SUBACCOUNT_NUMBER = "0000"
    settings.CCBILL_SALT = "salt_test"
    settings.CCBILL_WEBHOOK_SECRET = WEBHOOK_SECRET
    settings.CCBILL_FLEXFORMS_ID = ""
    settings.CCBILL_CURRENCY_CODE = "840"
    settings.CCBILL_PAYMENT_URL = "https://bill.ccbill.com/jpost/signup.cgi"
    settings.FRONTEND_BASE_URL = "https://fanhouse.test"
    return settings


@pytest.fixture
def ccbill_checkout(ccbill_settings):
    """Route checkouts to CCBill's hosted form instead of settling them."""
    ccbill_settings.MONETIZATION_CHECKOUT_PROVIDER = "ccbill"
    return ccbill_settings


@pytest.fixture
def ccbill_adapter(ccbill_settings):
    return CCBillAdapter.from_settings()


# =============================================================================
# Webhook Helpers
# =============================================================================


@pytest.fixture
def signed_post(ccbill_adapter):
    """
    POST a JSON body to the CCBill webhook with a valid signature.

    Pass signature="..." to send a specific (e.g. wrong) signature.
    """
    client = APIClient()
    url = reverse("monetization:ccbill-webhook")

    def _post(payload, signature=None):
        body = json.dumps(payload).encode()
        if signature is None:
            signature = ccbill_adapter.compute_signature(body)
        return client.generic(
            "POST",
            url,
            body,
            content_type="application/json",
            HTTP_X_CCBILL_SIGNATURE=signature,
        )

    return _post


# =============================================================================
# Reconciliation Helpers
# =============================================================================


@pytest.fixture
def settle(db):
    """
    Reconcile a payment.completed event and return the transaction.

    Example:
        txn = settle(fan, creator, gross_cents=10000, transaction_type="tip")
    """

    def _settle(payer, creator, **kwargs):
        result = ReconciliationService.reconcile(build_payment_event(payer, creator, **kwargs))
        assert result.success, result.error
        return result.data

    return _settle


@pytest.fixture
def chargeback(db):
    """Reconcile a chargeback for a settled transaction."""

    def _chargeback(txn):
        event = build_payment_event(
            txn.payer,
            txn.creator,
            event_type=CHARGEBACK_CREATED,
            provider_transaction_id=txn.provider_transaction_id,
            gross_cents=txn.gross_amount_cents,
            provider_status="refunded",
        )
        return ReconciliationService.reconcile(event)

    return _chargeback


# =============================================================================
# Domain Object Fixtures
# =============================================================================


@pytest.fixture
def pending_subscription(fan, creator):
    return SubscriptionFactory(fan=fan, creator=creator, price_cents=creator.subscription_price_cents)


@pytest.fixture
def active_subscription(fan, creator):
    return SubscriptionFactory(
        fan=fan,
        creator=creator,
        price_cents=creator.subscription_price_cents,
        active=True,
    )


@pytest.fixture
def funded_creator(creator, fan, settle):
    """Creator with a $80.00 balance from one $100.00 tip."""
    settle(fan, creator, gross_cents=10000, transaction_type="tip")
    return creator


@pytest.fixture
def pending_payout(funded_creator):
    return PayoutFactory(creator=funded_creator, amount_cents=5000)
