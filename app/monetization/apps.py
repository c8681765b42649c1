"""
Monetization app configuration.

This app owns the money side of the platform:
- Append-only creator ledger and earnings summaries
- Payment transactions, subscriptions and entitlements
- Access decisions for paid content
- CCBill webhook reconciliation and payout workflow
"""

from django.apps import AppConfig


class MonetizationConfig(AppConfig):
    """Configuration for the monetization application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "monetization"
    verbose_name = "Monetization"
