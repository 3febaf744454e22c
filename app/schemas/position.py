"""Pydantic schemas for Position CRUD."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class PositionCreate(BaseModel):
    title: str
    hourly_rate: float = Field(default=0, ge=0)

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title must not be empty")
        return v


class PositionUpdate(BaseModel):
    title: str | None = None
    hourly_rate: float | None = Field(default=None, ge=0)


class PositionRead(BaseModel):
    id: int
    title: str
    hourly_rate: float
    created_at: datetime | None

    model_config = {"from_attributes": True}
