"""
URL configuration for creator account endpoints.
"""

from django.urls import path

from authentication.views import AdminCreatorDecisionView, CreatorApplyView, CreatorStatusView

app_name = "authentication"

urlpatterns = [
    path("creators/apply/", CreatorApplyView.as_view(), name="creator-apply"),
    path("creators/status/", CreatorStatusView.as_view(), name="creator-status"),
    path(
        "admin/creators/<int:user_id>/approve/",
        AdminCreatorDecisionView.as_view(approve=True),
        name="creator-approve",
    ),
    path(
        "admin/creators/<int:user_id>/reject/",
        AdminCreatorDecisionView.as_view(approve=False),
        name="creator-reject",
    ),
]
