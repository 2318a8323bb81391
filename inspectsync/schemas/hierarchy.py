"""Pydantic schemas for the default checklist hierarchy.

Shapes match GET /sections.json on the inspection server.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CommentPayload(BaseModel):
    """One checklist comment as listed under a subsection."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., ge=0)
    subsec_id: int
    rank: int = 0
    comment: str | None = None
    active: bool = False

    @field_validator("active", mode="before")
    @classmethod
    def coerce_active(cls, v):
        # The server sends 1/0, occasionally as strings. Only 1 means active.
        if v is None:
            return False
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.strip().lower() in {"1", "true"}
        if isinstance(v, int):
            return v == 1
        return v


class SubSectionPayload(BaseModel):
    """One subsection with its comments."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., ge=0)
    name: str | None = None
    sec_id: int
    comments: list[CommentPayload] = Field(default_factory=list)


class SectionPayload(BaseModel):
    """One top level section with its subsections."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., ge=0)
    name: str | None = None
    subsections: list[SubSectionPayload] = Field(default_factory=list)


class HierarchyResponse(BaseModel):
    """Response schema for GET /sections.json."""

    model_config = ConfigDict(extra="ignore")

    success: bool
    data: list[SectionPayload] = Field(default_factory=list)
