"""Pydantic schemas for leave requests and the approval action."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, field_validator, model_validator

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
VALID_LEAVE_TYPES = {"annual", "sick", "permit", "other"}


def _check_date(v: str | None) -> str | None:
    if v is not None and not _DATE_RE.fullmatch(v):
        raise ValueError("Date must be formatted YYYY-MM-DD")
    return v


def _check_type(v: str | None) -> str | None:
    if v is not None and v not in VALID_LEAVE_TYPES:
        raise ValueError(f"Leave type must be one of: {sorted(VALID_LEAVE_TYPES)}")
    return v


class LeaveCreate(BaseModel):
    user_id: int
    start_date: str
    end_date: str
    leave_type: str = "annual"
    reason: str | None = None

    check_start = field_validator("start_date")(_check_date)
    check_end = field_validator("end_date")(_check_date)
    check_type = field_validator("leave_type")(_check_type)

    @model_validator(mode="after")
    def _range(self) -> "LeaveCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class LeaveUpdate(BaseModel):
    """No ``status``: it only changes through the approve action."""

    start_date: str | None = None
    end_date: str | None = None
    leave_type: str | None = None
    reason: str | None = None

    check_start = field_validator("start_date")(_check_date)
    check_end = field_validator("end_date")(_check_date)
    check_type = field_validator("leave_type")(_check_type)


class LeaveDecision(BaseModel):
    status: str
    approved_by: int | None = None


class LeaveRead(BaseModel):
    id: int
    user_id: int
    leave_type: str
    start_date: str
    end_date: str
    reason: str | None
    status: str
    approved_by: int | None
    created_at: datetime | None

    model_config = {"from_attributes": True}
