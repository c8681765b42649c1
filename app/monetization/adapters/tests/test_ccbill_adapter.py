"""
Unit tests for CCBillAdapter.

The adapter never touches the database; tests build it from an explicit
CCBillConfig unless they exercise from_settings().
"""

import hashlib
import hmac
from urllib.parse import parse_qs, urlparse

import pytest

from monetization.adapters import CCBillAdapter, CCBillConfig, PaymentLinkParams
from monetization.exceptions import InvalidWebhookPayloadError, ProviderNotConfiguredError

SECRET = "whsec_unit"


@pytest.fixture
def adapter():
    return CCBillAdapter(
        CCBillConfig(
            client_account_number="900000",
            subaccount_number="0000",
            salt="pepper",
            webhook_secret=SECRET,
        )
    )


def link_params(**overrides):
    params = {
        "amount_cents": 999,
        "user_id": "7",
        "creator_id": "3",
        "transaction_type": "subscription",
        "return_url": "https://fanhouse.test/ok",
        "failure_url": "https://fanhouse.test/fail",
    }
    params.update(overrides)
    return PaymentLinkParams(**params)


class TestConfiguration:
    def test_configured(self, adapter):
        assert adapter.is_configured

    @pytest.mark.parametrize(
        "field", ["client_account_number", "subaccount_number", "salt", "webhook_secret"]
    )
    def test_each_credential_is_required(self, field):
        values = {
            "client_account_number": "900000",
            "subaccount_number": "0000",
            "salt": "pepper",
            "webhook_secret": SECRET,
        }
        values[field] = ""

        assert not CCBillAdapter(CCBillConfig(**values)).is_configured

    def test_from_settings(self, ccbill_settings):
        adapter = CCBillAdapter.from_settings()

        assert adapter.config.client_account_number == "900000"
        assert adapter.config.webhook_secret == "whsec_test_secret"
        assert adapter.is_configured


class TestSignature:
    def test_round_trip(self, adapter):
        body = b'{"eventType": "payment.completed"}'
        expected = hmac.new(SECRET.encode(), body, hashlib.sha256).hexdigest()

        assert adapter.compute_signature(body) == expected
        assert adapter.verify_signature(body, expected)
        assert adapter.verify_signature(body, expected.upper())

    def test_wrong_signature(self, adapter):
        assert not adapter.verify_signature(b"{}", "0" * 64)
        assert not adapter.verify_signature(b"{}", "")

    def test_no_secret_never_verifies(self):
        adapter = CCBillAdapter(CCBillConfig())
        body = b"{}"

        assert not adapter.verify_signature(body, adapter.compute_signature(body))

    def test_header_lookup_order(self):
        meta = {"HTTP_X_CCBILL_SIGNATURE": " abc ", "HTTP_CCBILL_SIGNATURE": "def"}

        assert CCBillAdapter.signature_from_headers(meta) == "abc"
        assert CCBillAdapter.signature_from_headers({"HTTP_CCBILL_SIGNATURE": "def"}) == "def"
        assert CCBillAdapter.signature_from_headers({}) == ""


class TestDecoding:
    def test_json_body(self):
        assert CCBillAdapter.decode_payload(b'{"a": 1}', "application/json") == {"a": 1}

    def test_json_detected_without_content_type(self):
        assert CCBillAdapter.decode_payload(b' {"a": 1}') == {"a": 1}

    def test_form_body(self):
        payload = CCBillAdapter.decode_payload(
            b"eventType=payment.completed&transactionId=42&reason=",
            "application/x-www-form-urlencoded",
        )

        assert payload == {"eventType": "payment.completed", "transactionId": "42", "reason": ""}

    @pytest.mark.parametrize("body", [b"{not json", b"[1, 2]", b"\xff\xfe"])
    def test_invalid_bodies(self, body):
        with pytest.raises(InvalidWebhookPayloadError):
            CCBillAdapter.decode_payload(body, "application/json")

    def test_event_key(self):
        payload = {"eventType": "payment.completed", "transactionId": "0312345678"}

        assert CCBillAdapter.event_key(payload) == "ccbill:payment.completed:0312345678"

    def test_event_key_requires_ids(self):
        with pytest.raises(InvalidWebhookPayloadError):
            CCBillAdapter.event_key({"eventType": "payment.completed"})


class TestAmounts:
    @pytest.mark.parametrize(
        "amount,cents",
        [("9.99", 999), ("100", 10000), (12.5, 1250), ("0.005", 1), ("", 0), (None, 0)],
    )
    def test_parse_amount(self, amount, cents):
        assert CCBillAdapter.parse_amount(amount) == cents

    @pytest.mark.parametrize("amount", ["-1.00", "ten dollars"])
    def test_invalid_amount(self, amount):
        with pytest.raises(InvalidWebhookPayloadError):
            CCBillAdapter.parse_amount(amount)

    @pytest.mark.parametrize(
        "currency,code", [("840", "usd"), ("978", "eur"), ("USD", "usd"), (None, "usd")]
    )
    def test_parse_currency(self, currency, code):
        assert CCBillAdapter.parse_currency(currency) == code


class TestParseEvent:
    def test_maps_fields(self, adapter):
        event = adapter.parse_event(
            {
                "eventType": "payment.completed",
                "transactionId": "0312345678",
                "amount": "4.99",
                "currency": "840",
                "status": "Approved",
                "customUserId": "7",
                "customCreatorId": "3",
                "customTransactionType": "ppv",
                "customPostId": "5b0c7c9e-8b5e-4a57-9d86-0a3e8f8f1c11",
                "customSubscriptionId": "",
            }
        )

        assert event.event_type == "payment.completed"
        assert event.gross_cents == 499
        assert event.provider_status == "completed"
        assert event.metadata.user_id == "7"
        assert event.metadata.content_id == "5b0c7c9e-8b5e-4a57-9d86-0a3e8f8f1c11"
        assert event.subscription_id is None
        assert event.provider == "ccbill"
        assert event.is_settlement

    def test_failure_fields(self, adapter):
        event = adapter.parse_event(
            {
                "eventType": "payment.failed",
                "transactionId": "1",
                "status": "declined",
                "declineReason": "Card expired",
                "customContentId": "abc",
            }
        )

        assert event.provider_status == "failed"
        assert event.failure_reason == "Card expired"
        assert event.metadata.content_id == "abc"
        assert not event.metadata.is_complete

    def test_unknown_status_is_pending(self, adapter):
        event = adapter.parse_event({"eventType": "x", "transactionId": "1", "status": "queued"})

        assert event.provider_status == "pending"


class TestPaymentLinks:
    def test_form_digest(self, adapter):
        params = {"b": "2", "a": "1"}
        expected = hashlib.md5(b"a=1&b=2pepper").hexdigest()

        assert adapter.form_digest(params) == expected

    def test_subscription_form(self, adapter):
        form = adapter.build_form_params(link_params(subscription_id="sub-1"))

        assert form["formName"] == "subscription"
        assert form["formPrice"] == "9.99"
        assert form["formRecurringPrice"] == "9.99"
        assert form["formRebills"] == "99"
        assert form["customSubscriptionId"] == "sub-1"
        digest = form.pop("formDigest")
        assert digest == adapter.form_digest(form)

    def test_one_time_forms_drop_rebilling(self, adapter):
        tip = adapter.build_form_params(link_params(transaction_type="tip", amount_cents=500))
        ppv = adapter.build_form_params(link_params(transaction_type="ppv", content_id="post-1"))

        assert tip["formName"] == "tip"
        assert "formRecurringPeriod" not in tip
        assert ppv["formName"] == "ppv"
        assert ppv["customPostId"] == "post-1"

    def test_custom_data(self, adapter):
        form = adapter.build_form_params(link_params(custom_data={"Campaign": "spring"}))

        assert form["customCampaign"] == "spring"

    def test_payment_link(self, adapter):
        url = adapter.generate_payment_link(link_params())

        parsed = urlparse(url)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == (
            "https://bill.ccbill.com/jpost/signup.cgi"
        )
        assert parse_qs(parsed.query)["clientAccnum"] == ["900000"]

    def test_flexforms_link(self):
        adapter = CCBillAdapter(
            CCBillConfig(
                client_account_number="900000",
                subaccount_number="0000",
                salt="pepper",
                webhook_secret=SECRET,
                flexforms_id="ff-123",
            )
        )

        url = adapter.generate_payment_link(link_params())

        assert url.startswith("https://api.ccbill.com/wap-frontflex/flexforms/ff-123?")

    def test_unconfigured_link(self):
        with pytest.raises(ProviderNotConfiguredError):
            CCBillAdapter(CCBillConfig()).generate_payment_link(link_params())

    def test_amount_must_be_positive(self):
        with pytest.raises(ValueError):
            link_params(amount_cents=0)
