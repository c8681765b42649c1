"""Django app configuration for content."""

from django.apps import AppConfig


class ContentConfig(AppConfig):
    """Posts and live streams with their visibility and price."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "content"
    verbose_name = "Content"
