"""Section and SubSection reference data."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Section:
    """Top level checklist section.

    `subsection_ids` keeps the order in which the server listed the
    subsections; UI positions index into it.
    """

    id: int
    name: str | None = None
    subsection_ids: list[int] = field(default_factory=list)


@dataclass
class SubSection:
    """Checklist subsection, owned by a section through `section_id`."""

    id: int
    name: str | None = None
    section_id: int = -1
    comment_ids: list[int] = field(default_factory=list)
    variant_ids: list[int] = field(default_factory=list)
