"""
Monetization exceptions.

Exception Hierarchy:
    MonetizationError (base, BaseApplicationError)
    ├── ProviderNotConfiguredError - Provider credentials missing (503)
    ├── WebhookSignatureError - Signature missing or wrong (401)
    └── InvalidWebhookPayloadError - Body cannot be parsed or normalized

Usage:
    from monetization.exceptions import WebhookSignatureError

    if not adapter.verify_signature(request.body, signature):
        raise WebhookSignatureError("Invalid webhook signature")

Note:
    Business-rule rejections (below-minimum payout, self-subscription)
    are returned as ServiceResult failures, not raised.
"""

from __future__ import annotations

from core.exceptions import BaseApplicationError


class MonetizationError(BaseApplicationError):
    """Base exception for monetization operations."""

    default_error_code: str = "MONETIZATION_ERROR"


class ProviderNotConfiguredError(MonetizationError):
    """
    Raised when a payment provider is used without credentials.

    The webhook endpoint answers 503 so the provider retries once the
    deployment is fixed.
    """

    default_error_code: str = "PROVIDER_NOT_CONFIGURED"
    http_status: int = 503


class WebhookSignatureError(MonetizationError):
    """Raised when a webhook's signature is missing or does not match."""

    default_error_code: str = "INVALID_SIGNATURE"
    http_status: int = 401


class InvalidWebhookPayloadError(MonetizationError):
    """
    Raised when a verified webhook body cannot be normalized.

    Example:
        raise InvalidWebhookPayloadError(
            "Missing customUserId",
            details={"transaction_id": "0312345678"},
        )
    """

    default_error_code: str = "INVALID_WEBHOOK_PAYLOAD"
