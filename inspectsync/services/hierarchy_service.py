"""Build domain collections from the server's hierarchy payload."""

from __future__ import annotations

from dataclasses import dataclass, field

from inspectsync.core.errors import ParseError
from inspectsync.models.comment import Comment, make_sentinel_comment
from inspectsync.models.section import Section, SubSection
from inspectsync.schemas.hierarchy import HierarchyResponse


@dataclass
class Hierarchy:
    """Id-keyed section, subsection and comment collections.

    Each mapping iterates in ascending id order.
    """

    sections: dict[int, Section] = field(default_factory=dict)
    subsections: dict[int, SubSection] = field(default_factory=dict)
    comments: dict[int, Comment] = field(default_factory=dict)


def _sorted_by_id(items: dict) -> dict:
    return dict(sorted(items.items()))


def build_hierarchy(payload: HierarchyResponse) -> Hierarchy:
    """Flatten the nested payload into id-keyed collections.

    The sentinel comment (id 0) is always present. A duplicate id of any kind,
    including a server comment reusing the sentinel id, raises ParseError.
    """
    sentinel = make_sentinel_comment()
    sections: dict[int, Section] = {}
    subsections: dict[int, SubSection] = {}
    comments: dict[int, Comment] = {sentinel.id: sentinel}

    for section_payload in payload.data:
        if section_payload.id in sections:
            raise ParseError(f"Duplicate section id {section_payload.id}")
        section = Section(id=section_payload.id, name=section_payload.name)
        sections[section.id] = section

        for subsection_payload in section_payload.subsections:
            if subsection_payload.id in subsections:
                raise ParseError(f"Duplicate subsection id {subsection_payload.id}")
            subsection = SubSection(
                id=subsection_payload.id,
                name=subsection_payload.name,
                section_id=subsection_payload.sec_id,
            )
            subsections[subsection.id] = subsection
            section.subsection_ids.append(subsection.id)

            for comment_payload in subsection_payload.comments:
                if comment_payload.id in comments:
                    raise ParseError(f"Duplicate comment id {comment_payload.id}")
                comment = Comment(
                    id=comment_payload.id,
                    subsection_id=comment_payload.subsec_id,
                    rank=comment_payload.rank,
                    text=comment_payload.comment or "",
                    active=comment_payload.active,
                )
                comments[comment.id] = comment
                subsection.comment_ids.append(comment.id)

    return Hierarchy(
        sections=_sorted_by_id(sections),
        subsections=_sorted_by_id(subsections),
        comments=_sorted_by_id(comments),
    )
