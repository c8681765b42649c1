"""
Celery application for background money work.

Workers run webhook reconciliation retries, the subscription expiry sweep
and in-app notification delivery. Redis is both broker and result backend;
periodic schedules live in the database (django-celery-beat).

Usage:
    from celery import shared_task

    @shared_task
    def expire_subscriptions():
        ...

    expire_subscriptions.delay()

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("fanhouse")

# All Celery settings are read from Django settings prefixed with CELERY_
app.config_from_object("django.conf:settings", namespace="CELERY")

# Picks up tasks.py in monetization and notifications
app.autodiscover_tasks()
