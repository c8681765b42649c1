"""
Payment provider webhooks.

- events: The normalized PaymentEvent every provider is mapped onto
- handlers: One handler per event type, looked up through a registry
- views: The CCBill endpoint that verifies, stores and processes events

Usage:
    # In urls.py
    from monetization.webhooks.views import ccbill_webhook

    urlpatterns = [
        path("webhooks/ccbill/", ccbill_webhook, name="ccbill-webhook"),
    ]
"""
