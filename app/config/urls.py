"""
Root URL configuration.

URL Structure:
    /                                   - ReDoc API documentation
    /admin/                             - Django admin interface
    /health/                            - Health check endpoint
    /schema/                            - OpenAPI schema (YAML)
    /api/v1/auth/token/                 - Obtain JWT pair (email/password)
    /api/v1/auth/token/refresh/         - Refresh access token
    /api/v1/auth/creators/apply/        - Apply to become a creator
    /api/v1/auth/creators/status/       - Own creator status
    /api/v1/auth/admin/creators/{id}/approve|reject/ - Admin decision
    /api/v1/content/                    - Posts and live streams
        posts/                          - Create post (approved creators)
        streams/                        - Create stream (approved creators)
        {id}/disable/                   - Admin takedown
        {id}/enable/                    - Admin restore
    /api/v1/notifications/              - In-app notifications
        {id}/read/                      - Mark as read
    /api/v1/monetization/               - Money endpoints
        earnings/                       - Creator earnings summary
        earnings/ledger/                - Creator ledger entries
        payouts/                        - Payout history / request
        admin/payouts/                  - Admin payout overview
        admin/payouts/{id}/process/     - Admin payout action
        subscriptions/                  - Fan subscriptions / subscribe
        subscriptions/{id}/cancel/      - Cancel subscription
        content/{id}/unlock/            - Pay-per-view unlock
        tips/                           - Tip a creator
        access/{id}/                    - Access decision for content
        webhooks/ccbill/                - CCBill webhook endpoint (POST)
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("auth/", include("authentication.urls")),
    path("content/", include("content.urls")),
    path("notifications/", include("notifications.urls")),
    path("monetization/", include("monetization.urls")),
]

urlpatterns = [
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("admin/", admin.site.urls),
    path("health/", health_check, name="health_check"),
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "FanHouse Admin"
admin.site.site_title = "FanHouse Admin Portal"
admin.site.index_title = "Creators, money and content"
