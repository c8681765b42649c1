"""
Tests for the CCBill webhook endpoint.
"""

import json
from urllib.parse import urlencode

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from monetization.ledger.services import LedgerService
from monetization.models import PaymentTransaction, WebhookEvent
from monetization.state_machines import TransactionStatus, WebhookEventStatus
from monetization.tests.factories import ccbill_payload
from monetization.webhooks.events import CHARGEBACK_CREATED


@pytest.fixture
def webhook_url():
    return reverse("monetization:ccbill-webhook")


@pytest.mark.django_db
class TestCCBillWebhook:
    def test_settles_payment(self, fan, creator, signed_post):
        response = signed_post(ccbill_payload(fan, creator, transaction_type="tip"))

        assert response.status_code == 200
        assert response.json() == {"received": True}

        webhook_event = WebhookEvent.objects.get()
        assert webhook_event.event_key == "ccbill:payment.completed:0312345678"
        assert webhook_event.status == WebhookEventStatus.PROCESSED

        txn = PaymentTransaction.objects.get(provider_transaction_id="0312345678")
        assert txn.status == TransactionStatus.COMPLETED
        assert LedgerService.get_balance(creator.pk) == 8000

    def test_duplicate_delivery(self, fan, creator, signed_post):
        payload = ccbill_payload(fan, creator, transaction_type="tip")
        signed_post(payload)

        response = signed_post(payload)

        assert response.status_code == 200
        assert response.json() == {"received": True, "duplicate": True}
        assert WebhookEvent.objects.count() == 1
        assert LedgerService.get_balance(creator.pk) == 8000

    def test_invalid_signature(self, fan, creator, signed_post):
        response = signed_post(ccbill_payload(fan, creator), signature="deadbeef")

        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_SIGNATURE"
        assert not WebhookEvent.objects.exists()

    def test_missing_signature(self, ccbill_settings, fan, creator, webhook_url):
        response = APIClient().post(webhook_url, ccbill_payload(fan, creator), format="json")

        assert response.status_code == 401

    def test_not_configured(self, settings, fan, creator, webhook_url):
        settings.CCBILL_WEBHOOK_SECRET = ""

        response = APIClient().post(webhook_url, ccbill_payload(fan, creator), format="json")

        assert response.status_code == 503
        assert response.json()["error_code"] == "PROVIDER_NOT_CONFIGURED"

    def test_payload_without_transaction_id(self, signed_post):
        response = signed_post({"eventType": "payment.completed", "amount": "9.99"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_WEBHOOK_PAYLOAD"
        assert not WebhookEvent.objects.exists()

    def test_processing_failure_is_acknowledged(self, fan, creator, signed_post):
        payload = ccbill_payload(fan, creator, event_type=CHARGEBACK_CREATED, status="refunded")

        response = signed_post(payload)

        assert response.status_code == 200
        webhook_event = WebhookEvent.objects.get()
        assert webhook_event.status == WebhookEventStatus.FAILED
        assert "TRANSACTION_NOT_SETTLED" in webhook_event.error_message

    def test_failed_event_is_reprocessed_on_redelivery(self, fan, creator, signed_post):
        chargeback_payload = ccbill_payload(
            fan,
            creator,
            event_type=CHARGEBACK_CREATED,
            transaction_type="tip",
            status="refunded",
        )
        signed_post(chargeback_payload)
        signed_post(ccbill_payload(fan, creator, transaction_type="tip"))

        response = signed_post(chargeback_payload)

        assert response.json() == {"received": True}
        webhook_event = WebhookEvent.objects.get(event_type=CHARGEBACK_CREATED)
        assert webhook_event.status == WebhookEventStatus.PROCESSED
        assert webhook_event.retry_count == 2
        assert LedgerService.get_balance(creator.pk) == 0

    def test_form_encoded_body(self, fan, creator, ccbill_adapter, webhook_url):
        body = urlencode(ccbill_payload(fan, creator, transaction_type="tip", amount="25.00")).encode()

        response = APIClient().generic(
            "POST",
            webhook_url,
            body,
            content_type="application/x-www-form-urlencoded",
            HTTP_CCBILL_SIGNATURE=ccbill_adapter.compute_signature(body),
        )

        assert response.status_code == 200
        assert PaymentTransaction.objects.get().gross_amount_cents == 2500

    def test_signature_covers_raw_body(self, fan, creator, ccbill_adapter, webhook_url):
        payload = ccbill_payload(fan, creator)
        signature = ccbill_adapter.compute_signature(json.dumps(payload).encode())
        tampered = json.dumps({**payload, "amount": "1.00"}).encode()

        response = APIClient().generic(
            "POST",
            webhook_url,
            tampered,
            content_type="application/json",
            HTTP_X_CCBILL_SIGNATURE=signature,
        )

        assert response.status_code == 401

    def test_get_not_allowed(self, ccbill_settings, webhook_url):
        response = APIClient().get(webhook_url)

        assert response.status_code == 405
