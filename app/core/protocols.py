"""
Protocol definitions for collaborators the monetization core consumes.

The access engine never imports the content app at decision points; it
talks to it through this narrow interface so tests can pass simple fakes.

Available Protocol:
    ContentDirectory: Visibility lookup for a post or stream

Usage:
    from core.protocols import ContentDirectory

    def can_view(directory: ContentDirectory, content_id) -> bool:
        visibility = directory.get_content_visibility(content_id)
        return visibility is not None and visibility.visibility == "free"

Note:
    @runtime_checkable allows isinstance() checks in tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import uuid
    from typing import Any


@runtime_checkable
class ContentDirectory(Protocol):
    """
    Resolves a content id to its owner, visibility and price.

    Returns None when no post or stream has that id.
    """

    def get_content_visibility(self, content_id: uuid.UUID) -> Any | None: ...

