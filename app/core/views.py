"""
Infrastructure endpoints that sit outside the API namespace.
"""

import logging

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Report database and cache reachability for health checks and load balancers.

    The database is required: if it is unreachable the endpoint answers
    503. The cache only degrades the report, because every money and
    access decision reads the database directly.

    Example Response:
        {"status": "healthy", "database": "connected", "cache": "connected"}
    """
    report = {"status": "healthy", "database": "connected", "cache": "connected"}

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError:
        logger.exception("Health check: database unreachable")
        report["database"] = "disconnected"
        report["status"] = "unhealthy"

    try:
        cache.set("health_check", "ok", timeout=1)
        if cache.get("health_check") != "ok":
            report["cache"] = "disconnected"
    except Exception:
        # django-redis raises backend-specific errors when IGNORE_EXCEPTIONS is off
        logger.warning("Health check: cache unreachable", exc_info=True)
        report["cache"] = "disconnected"

    return JsonResponse(report, status=200 if report["status"] == "healthy" else 503)
