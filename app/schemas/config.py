"""Pydantic schemas for the key/value config store."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator


class ConfigSet(BaseModel):
    key: str
    value: str = ""
    description: str | None = None

    @field_validator("key")
    @classmethod
    def _key(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Config key required")
        if len(v) > 100:
            raise ValueError("Config key must not exceed 100 characters")
        return v

    @field_validator("value", mode="before")
    @classmethod
    def _value(cls, v: object) -> str:
        # Numbers and booleans from JSON are stored as their JSON text
        if v is None:
            return ""
        if isinstance(v, bool):
            return "true" if v else "false"
        return str(v)


class ConfigRead(BaseModel):
    key: str
    value: str
    description: str | None
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class ConfigBulkResponse(BaseModel):
    success: bool
    configs: list[ConfigRead]
