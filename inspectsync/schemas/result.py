"""Pydantic schemas for reading and writing inspection results."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from inspectsync.models.result import Result


class ResultSubmission(BaseModel):
    """Request body for POST /results/add.

    Field names are the server's column names.
    """

    model_config = ConfigDict(extra="forbid")

    id: int
    insp_id: int
    com_id: int
    variant_id: int | None = None
    add_on: str = ""
    severity: int

    @classmethod
    def from_result(cls, result: Result) -> ResultSubmission:
        return cls(
            id=result.id,
            insp_id=result.inspection_id,
            com_id=result.comment_id,
            variant_id=result.variant_id,
            add_on=result.note,
            severity=result.severity,
        )


class RemoteResult(BaseModel):
    """A result row as returned by GET /results.json."""

    model_config = ConfigDict(extra="ignore")

    id: int
    insp_id: int
    com_id: int
    variant_id: int | None = None
    add_on: str | None = None
    severity: int | None = None


class ResultListResponse(BaseModel):
    """Response schema for GET /results.json."""

    model_config = ConfigDict(extra="ignore")

    success: bool
    data: list[RemoteResult] = Field(default_factory=list)


class ResultAck(BaseModel):
    """Response schema for POST /results/add."""

    model_config = ConfigDict(extra="ignore")

    success: bool
    data: Any = None
