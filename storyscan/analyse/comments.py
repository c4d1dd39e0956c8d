"""Association of markup comments with the story that follows them."""

from __future__ import annotations

from typing import Optional

from ..walker import Node
from .text import dedent_block


class CommentCursor:
    """Holds the most recently visited comment of one traversal."""

    def __init__(self) -> None:
        self.latest: Optional[Node] = None

    def track(self, comment: Node) -> None:
        self.latest = comment

    def clear(self) -> None:
        self.latest = None

    def description_for(self, marker: Node) -> Optional[str]:
        """Return the dedented comment text if it directly touches ``marker``.

        Touching means exactly one character (the line break) separates the
        end of the comment from the start of the marker.
        """
        comment = self.latest
        if comment is None:
            return None
        start = marker.get("start")
        if not isinstance(start, int) or comment.get("end") != start - 1:
            return None
        return dedent_block(str(comment.get("data", "")))


__all__ = ["CommentCursor"]
