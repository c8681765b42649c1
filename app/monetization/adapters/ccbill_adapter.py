"""
CCBill adapter for webhooks and payment links.

This module provides the CCBillAdapter class which encapsulates every
CCBill-specific detail: the webhook signature, the form-or-JSON webhook
body, the mapping onto PaymentEvent, and the signed payment link used to
send a fan to CCBill's hosted form.

Configuration (via settings):
- CCBILL_CLIENT_ACCOUNT_NUMBER: Client account number
- CCBILL_SUBACCOUNT_NUMBER: Sub-account number
- CCBILL_SALT: Salt for the payment form digest
- CCBILL_WEBHOOK_SECRET: HMAC secret for webhook signatures
- CCBILL_FLEXFORMS_ID: FlexForms id (optional, switches the form URL)
- CCBILL_CURRENCY_CODE: ISO 4217 numeric code (default: 840 = USD)
- CCBILL_PAYMENT_URL: Hosted form URL

Usage:
    from monetization.adapters import CCBillAdapter, PaymentLinkParams

    adapter = CCBillAdapter.from_settings()
    if not adapter.is_configured:
        raise ProviderNotConfiguredError("CCBill is not configured")

    url = adapter.generate_payment_link(
        PaymentLinkParams(
            amount_cents=999,
            user_id="7",
            creator_id="3",
            transaction_type="subscription",
            return_url="https://fanhouse.example/payments/success",
            failure_url="https://fanhouse.example/payments/failure",
        )
    )
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl, urlencode

from django.conf import settings

from monetization.exceptions import InvalidWebhookPayloadError, ProviderNotConfiguredError
from monetization.webhooks.events import (
    PROVIDER_COMPLETED,
    PROVIDER_FAILED,
    PROVIDER_PENDING,
    PROVIDER_REFUNDED,
    EventMetadata,
    PaymentEvent,
)

if TYPE_CHECKING:
    from typing import Any


logger = logging.getLogger(__name__)

PROVIDER_NAME = "ccbill"

DEFAULT_PAYMENT_URL = "https://bill.ccbill.com/jpost/signup.cgi"
FLEXFORMS_URL = "https://api.ccbill.com/wap-frontflex/flexforms/{flexforms_id}"

SIGNATURE_HEADERS = ("HTTP_X_CCBILL_SIGNATURE", "HTTP_CCBILL_SIGNATURE")

# CCBill's status words mapped onto PaymentEvent.provider_status
STATUS_MAP = {
    "approved": PROVIDER_COMPLETED,
    "declined": PROVIDER_FAILED,
    "refunded": PROVIDER_REFUNDED,
}

NUMERIC_CURRENCIES = {"840": "usd", "978": "eur", "826": "gbp", "124": "cad", "036": "aud"}

# Subscription period CCBill bills for, in days
BILLING_PERIOD_DAYS = "30"

# 99 rebills means "until canceled"
UNLIMITED_REBILLS = "99"


# =============================================================================
# Data Types
# =============================================================================


@dataclass(frozen=True)
class CCBillConfig:
    client_account_number: str = ""
    subaccount_number: str = ""
    salt: str = ""
    webhook_secret: str = ""
    flexforms_id: str = ""
    currency_code: str = "840"
    payment_url: str = DEFAULT_PAYMENT_URL


@dataclass
class PaymentLinkParams:
    """
    Parameters for a CCBill payment form link.

    Attributes:
        amount_cents: Price in cents
        user_id: Paying fan's id (echoed back as customUserId)
        creator_id: Creator's id (customCreatorId)
        transaction_type: subscription, ppv or tip
        return_url: Where CCBill sends the fan after paying
        failure_url: Where CCBill sends the fan after a decline
        subscription_id: Pending Subscription id for subscription checkouts
        content_id: Post or stream id for ppv checkouts
        custom_data: Extra fields, sent as custom<Key>
    """

    amount_cents: int
    user_id: str
    creator_id: str
    transaction_type: str
    return_url: str
    failure_url: str
    subscription_id: str | None = None
    content_id: str | None = None
    custom_data: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.amount_cents <= 0:
            raise ValueError("amount_cents must be positive")


# =============================================================================
# Adapter
# =============================================================================


class CCBillAdapter:
    """
    CCBill webhook verification, normalization and payment links.

    Instances are cheap; build one per request with from_settings().
    """

    provider = PROVIDER_NAME

    def __init__(self, config: CCBillConfig):
        self.config = config

    @classmethod
    def from_settings(cls) -> CCBillAdapter:
        return cls(
            CCBillConfig(
                client_account_number=getattr(settings, "CCBILL_CLIENT_ACCOUNT_NUMBER", ""),
                subaccount_number=getattr(settings, "CCBILL_SUBACCOUNT_NUMBER", ""),
                salt=getattr(settings, "CCBILL_SALT", ""),
                webhook_secret=getattr(settings, "CCBILL_WEBHOOK_SECRET", ""),
                flexforms_id=getattr(settings, "CCBILL_FLEXFORMS_ID", ""),
                currency_code=getattr(settings, "CCBILL_CURRENCY_CODE", "840") or "840",
                payment_url=getattr(settings, "CCBILL_PAYMENT_URL", "") or DEFAULT_PAYMENT_URL,
            )
        )

    @property
    def is_configured(self) -> bool:
        config = self.config
        return all(
            (
                config.client_account_number,
                config.subaccount_number,
                config.salt,
                config.webhook_secret,
            )
        )

    # ==========================================================================
    # Webhooks
    # ==========================================================================

    @staticmethod
    def signature_from_headers(meta: dict[str, Any]) -> str:
        """Signature from X-CCBill-Signature, falling back to CCBill-Signature."""
        for header in SIGNATURE_HEADERS:
            value = meta.get(header)
            if value:
                return value.strip()
        return ""

    def compute_signature(self, body: bytes) -> str:
        return hmac.new(
            self.config.webhook_secret.encode(),
            body,
            hashlib.sha256,
        ).hexdigest()

    def verify_signature(self, body: bytes, signature: str) -> bool:
        """
        Check an HMAC-SHA256 hex signature over the raw request body.

        Always False when no webhook secret is configured.
        """
        if not self.config.webhook_secret or not signature:
            return False
        return hmac.compare_digest(self.compute_signature(body), signature.lower())

    @staticmethod
    def decode_payload(body: bytes, content_type: str = "") -> dict[str, Any]:
        """
        Decode a JSON or form-encoded webhook body into a dict.

        Raises:
            InvalidWebhookPayloadError: Body is not valid JSON/form data
        """
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidWebhookPayloadError("Webhook body is not UTF-8") from e

        if "json" in content_type.lower() or text.lstrip().startswith("{"):
            try:
                payload = json.loads(text)
            except json.JSONDecodeError as e:
                raise InvalidWebhookPayloadError("Webhook body is not valid JSON") from e
            if not isinstance(payload, dict):
                raise InvalidWebhookPayloadError("Webhook body must be a JSON object")
            return payload

        return dict(parse_qsl(text, keep_blank_values=True))

    @staticmethod
    def event_key(payload: dict[str, Any]) -> str:
        """
        Unique key for one provider event: ccbill:<eventType>:<transactionId>.

        Raises:
            InvalidWebhookPayloadError: eventType or transactionId missing
        """
        event_type = payload.get("eventType")
        transaction_id = payload.get("transactionId")
        if not event_type or not transaction_id:
            raise InvalidWebhookPayloadError(
                "Webhook is missing eventType or transactionId",
                details={"keys": sorted(payload)},
            )
        return f"{PROVIDER_NAME}:{event_type}:{transaction_id}"

    @staticmethod
    def parse_amount(amount: Any) -> int:
        """Dollar string to cents, rounding half up ("9.99" -> 999)."""
        if amount in (None, ""):
            return 0
        try:
            cents = (Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        except InvalidOperation as e:
            raise InvalidWebhookPayloadError(
                f"Invalid amount: {amount!r}",
                details={"amount": str(amount)},
            ) from e
        if cents < 0:
            raise InvalidWebhookPayloadError(
                "Amount cannot be negative",
                details={"amount": str(amount)},
            )
        return int(cents)

    @staticmethod
    def parse_currency(currency: Any) -> str:
        value = str(currency or "usd").strip().lower()
        return NUMERIC_CURRENCIES.get(value, value[:3] or "usd")

    def parse_event(self, payload: dict[str, Any]) -> PaymentEvent:
        """
        Normalize a decoded CCBill webhook into a PaymentEvent.

        Raises:
            InvalidWebhookPayloadError: Required fields missing or malformed
        """
        self.event_key(payload)

        def text(key: str) -> str | None:
            value = payload.get(key)
            return str(value) if value not in (None, "") else None

        return PaymentEvent(
            event_type=str(payload["eventType"]),
            provider_transaction_id=str(payload["transactionId"]),
            gross_cents=self.parse_amount(payload.get("amount")),
            provider_status=STATUS_MAP.get(str(payload.get("status", "")).lower(), PROVIDER_PENDING),
            metadata=EventMetadata(
                user_id=text("customUserId"),
                creator_id=text("customCreatorId"),
                transaction_type=text("customTransactionType"),
                content_id=text("customPostId") or text("customContentId"),
            ),
            subscription_id=text("customSubscriptionId") or text("subscriptionId"),
            provider=PROVIDER_NAME,
            currency=self.parse_currency(payload.get("currency")),
            failure_reason=text("reason") or text("declineReason"),
            raw=payload,
        )

    # ==========================================================================
    # Payment Links
    # ==========================================================================

    def form_digest(self, params: dict[str, str]) -> str:
        """MD5 over key=value pairs sorted by key, joined by '&', then the salt."""
        digest_source = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.md5((digest_source + self.config.salt).encode()).hexdigest()

    def build_form_params(self, params: PaymentLinkParams) -> dict[str, str]:
        amount = f"{Decimal(params.amount_cents) / 100:.2f}"
        form = {
            "clientAccnum": self.config.client_account_number,
            "clientSubacc": self.config.subaccount_number,
            "currencyCode": self.config.currency_code,
            "formName": "subscription",
            "formPrice": amount,
            "formPeriod": BILLING_PERIOD_DAYS,
            "formRecurringPrice": amount,
            "formRecurringPeriod": BILLING_PERIOD_DAYS,
            "formRebills": UNLIMITED_REBILLS,
            "customUserId": str(params.user_id),
            "customCreatorId": str(params.creator_id),
            "customTransactionType": params.transaction_type,
            "customReturnUrl": params.return_url,
            "customFailureUrl": params.failure_url,
        }
        if params.subscription_id:
            form["customSubscriptionId"] = str(params.subscription_id)

        if params.transaction_type != "subscription":
            # One-time charge: no rebilling
            form["formName"] = "ppv" if params.content_id else params.transaction_type
            for key in ("formRecurringPrice", "formRecurringPeriod", "formRebills"):
                form.pop(key)
        if params.content_id:
            form["customPostId"] = str(params.content_id)

        for key, value in params.custom_data.items():
            form[f"custom{key}"] = str(value)

        form["formDigest"] = self.form_digest(form)
        return form

    def generate_payment_link(self, params: PaymentLinkParams) -> str:
        """
        Signed URL of CCBill's hosted payment form.

        Raises:
            ProviderNotConfiguredError: CCBill credentials are missing
        """
        if not self.is_configured:
            raise ProviderNotConfiguredError("CCBill is not configured")

        form = self.build_form_params(params)
        if self.config.flexforms_id:
            base_url = FLEXFORMS_URL.format(flexforms_id=self.config.flexforms_id)
        else:
            base_url = self.config.payment_url

        logger.info(
            "CCBill payment link generated",
            extra={
                "transaction_type": params.transaction_type,
                "amount_cents": params.amount_cents,
                "creator_id": params.creator_id,
            },
        )
        return f"{base_url}?{urlencode(form)}"
