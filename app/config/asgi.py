"""
ASGI entry point for the monetization API.

Uvicorn serves the Django application through this module. Everything is
plain HTTP; there are no websocket routes.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_asgi_application()
