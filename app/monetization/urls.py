"""
URL configuration for the monetization API.

Routes:
    earnings/                       - Creator earnings summary (GET)
    earnings/ledger/                - Creator ledger entries (GET)
    payouts/                        - Payout history (GET) / request (POST)
    admin/payouts/                  - Admin overview (GET)
    admin/payouts/{id}/process/     - Admin action (POST)
    subscriptions/                  - Fan subscriptions (GET) / subscribe (POST)
    subscriptions/{id}/cancel/      - Cancel (POST)
    content/{id}/unlock/            - Pay-per-view unlock (POST)
    tips/                           - Tip (POST)
    access/{id}/                    - Access decision (GET)
    webhooks/ccbill/                - CCBill webhook (POST)
"""

from django.urls import path

from monetization import views
from monetization.webhooks.views import ccbill_webhook

app_name = "monetization"

urlpatterns = [
    path("earnings/", views.EarningsView.as_view(), name="earnings"),
    path("earnings/ledger/", views.LedgerEntryListView.as_view(), name="ledger"),
    path("payouts/", views.PayoutListCreateView.as_view(), name="payouts"),
    path("admin/payouts/", views.AdminPayoutListView.as_view(), name="admin-payouts"),
    path(
        "admin/payouts/<uuid:payout_id>/process/",
        views.AdminPayoutProcessView.as_view(),
        name="admin-payout-process",
    ),
    path("subscriptions/", views.SubscriptionListCreateView.as_view(), name="subscriptions"),
    path(
        "subscriptions/<uuid:subscription_id>/cancel/",
        views.SubscriptionCancelView.as_view(),
        name="subscription-cancel",
    ),
    path(
        "content/<uuid:content_id>/unlock/",
        views.ContentUnlockView.as_view(),
        name="content-unlock",
    ),
    path("tips/", views.TipView.as_view(), name="tips"),
    path("access/<uuid:content_id>/", views.AccessCheckView.as_view(), name="access"),
    path("webhooks/ccbill/", ccbill_webhook, name="ccbill-webhook"),
]
