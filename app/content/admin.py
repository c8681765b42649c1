"""
Django admin configuration for content.
"""

from django.contrib import admin

from content.models import LiveStream, Post


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ["title", "creator", "visibility", "price_cents", "is_disabled", "created_at"]
    list_filter = ["visibility", "is_disabled"]
    search_fields = ["title", "creator__email"]
    raw_id_fields = ["creator"]


@admin.register(LiveStream)
class LiveStreamAdmin(admin.ModelAdmin):
    list_display = ["title", "creator", "visibility", "price_cents", "status", "is_disabled"]
    list_filter = ["visibility", "status", "is_disabled"]
    search_fields = ["title", "creator__email"]
    raw_id_fields = ["creator"]
