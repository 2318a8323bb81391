"""Pydantic schemas for the token endpoint.

Shapes match POST /users/token.json on the inspection server.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TokenRequest(BaseModel):
    """Request body for POST /users/token.json."""

    model_config = ConfigDict(extra="forbid")

    username: str = Field(..., description="Inspector account name")
    password: str = Field(..., description="Inspector account password")


class TokenData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    token: str = Field(..., description="Session token sent as ?token= on later requests")

    @field_validator("token")
    @classmethod
    def token_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("token cannot be empty")
        return v


class TokenResponse(BaseModel):
    """Response schema for POST /users/token.json."""

    model_config = ConfigDict(extra="ignore")

    success: bool
    data: TokenData


@dataclass(frozen=True)
class AuthToken:
    """Session token returned by the server."""

    value: str

    @property
    def query_params(self) -> dict[str, str]:
        return {"token": self.value}

    @property
    def query_fragment(self) -> str:
        return f"?token={self.value}"

    def __repr__(self) -> str:
        return "AuthToken(value='***')"
