"""
Content application.

Posts and live streams as the money code sees them: who owns them, who
may view them (free, subscriber or pay-per-view) and what they cost.
Media storage and stream sessions live in other services.

Usage:
    from content.services import ContentService

    visibility = ContentService.get_content_visibility(content_id)
"""
