"""User-entered inspection findings."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_SEVERITY = 1

# Offline placeholder until the server can hand out inspection ids.
UNSYNCED_INSPECTION_ID = -1


@dataclass
class Result:
    """A finding attached to one comment.

    A negative `inspection_id` means the result has not been assigned a
    permanent inspection on the server yet.
    """

    id: int
    inspection_id: int
    comment_id: int
    variant_id: int | None = None
    severity: int = DEFAULT_SEVERITY
    note: str = ""
    photo_path: str | None = None
    flags: list[int] = field(default_factory=list)

    @property
    def is_synced(self) -> bool:
        return self.inspection_id >= 0


def next_severity(current: int) -> int:
    """Cycle severity 1 -> 2 -> 1.

    Only two values are ever produced even though the checklist UI suggests
    three severity levels; kept as-is pending product review.
    """
    return (current % 2) + 1


def encode_flags(flags: list[int]) -> str:
    """Concatenate flag numbers into the server's flag string ([1, 2] -> "12")."""
    return "".join(str(flag) for flag in flags)
