"""Checklist comment reference data."""

from __future__ import annotations

from dataclasses import dataclass, field

SENTINEL_COMMENT_ID = 0
SENTINEL_COMMENT_TEXT = "ERROR, COMMENT WITH ID 0"


@dataclass
class Comment:
    """A single checklist line a finding can be attached to.

    Everything except `result_id` is fixed once the hierarchy is loaded.
    """

    id: int
    subsection_id: int
    rank: int
    text: str = ""
    default_flags: list[int] = field(default_factory=list)
    active: bool = False
    result_id: int | None = None


def make_sentinel_comment() -> Comment:
    """Build the reserved id 0 comment that stands in for unresolved lookups."""
    return Comment(
        id=SENTINEL_COMMENT_ID,
        subsection_id=-1,
        rank=-1,
        text=SENTINEL_COMMENT_TEXT,
        default_flags=[],
        active=False,
    )
