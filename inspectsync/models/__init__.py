"""Domain model for the inspection checklist."""

from inspectsync.models.comment import (
    SENTINEL_COMMENT_ID,
    SENTINEL_COMMENT_TEXT,
    Comment,
    make_sentinel_comment,
)
from inspectsync.models.enums import BootstrapState, ChangeKind, Endpoint
from inspectsync.models.result import (
    DEFAULT_SEVERITY,
    UNSYNCED_INSPECTION_ID,
    Result,
    encode_flags,
    next_severity,
)
from inspectsync.models.section import Section, SubSection

__all__ = [
    "SENTINEL_COMMENT_ID",
    "SENTINEL_COMMENT_TEXT",
    "Comment",
    "make_sentinel_comment",
    "BootstrapState",
    "ChangeKind",
    "Endpoint",
    "DEFAULT_SEVERITY",
    "UNSYNCED_INSPECTION_ID",
    "Result",
    "encode_flags",
    "next_severity",
    "Section",
    "SubSection",
]
