"""
URL configuration for posts and live streams.
"""

from django.urls import path

from content.views import AdminContentToggleView, ContentDetailView, PostCreateView, StreamCreateView

app_name = "content"

urlpatterns = [
    path("posts/", PostCreateView.as_view(), name="post-create"),
    path("streams/", StreamCreateView.as_view(), name="stream-create"),
    path("<uuid:content_id>/", ContentDetailView.as_view(), name="content-detail"),
    path(
        "<uuid:content_id>/disable/",
        AdminContentToggleView.as_view(disable=True),
        name="content-disable",
    ),
    path(
        "<uuid:content_id>/enable/",
        AdminContentToggleView.as_view(disable=False),
        name="content-enable",
    ),
]
