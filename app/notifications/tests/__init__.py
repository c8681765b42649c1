"""
Tests for notifications app.

This package contains test modules for:
- test_models.py: Notification model and template tests
- test_services.py: NotificationService, notify() and delivery task tests
- test_views.py: Inbox API endpoint tests

Usage:
    pytest notifications/tests/
    pytest notifications/tests/test_services.py
"""
