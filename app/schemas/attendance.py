"""Pydantic schemas for Attendance, clock-in/out and the dashboard."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

VALID_ATTENDANCE_STATUSES = {"present", "late", "absent"}
VALID_APPROVAL_STATUSES = {"pending", "approved", "rejected"}


def _check_date(v: str | None) -> str | None:
    if v is not None and not _DATE_RE.fullmatch(v):
        raise ValueError("Date must be formatted YYYY-MM-DD")
    return v


def _check_status(v: str | None) -> str | None:
    if v is not None and v not in VALID_ATTENDANCE_STATUSES:
        raise ValueError(f"Status must be one of: {sorted(VALID_ATTENDANCE_STATUSES)}")
    return v


def _check_approval(v: str | None) -> str | None:
    if v is not None and v not in VALID_APPROVAL_STATUSES:
        raise ValueError(
            f"Approval status must be one of: {sorted(VALID_APPROVAL_STATUSES)}"
        )
    return v


# ── Clock in / out ──────────────────────────────────────────────────
class ClockRequest(BaseModel):
    user_id: int
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    photo: str | None = None


# ── CRUD ────────────────────────────────────────────────────────────
class AttendanceCreate(BaseModel):
    user_id: int
    date: str
    clock_in: datetime | None = None
    clock_out: datetime | None = None
    clock_in_lat: str | None = None
    clock_in_lng: str | None = None
    clock_out_lat: str | None = None
    clock_out_lng: str | None = None
    clock_in_photo: str | None = None
    clock_out_photo: str | None = None
    status: str = "present"
    approval_status: str = "pending"
    is_within_geofence_in: bool | None = None
    is_within_geofence_out: bool | None = None

    check_date = field_validator("date")(_check_date)
    check_status = field_validator("status")(_check_status)
    check_approval = field_validator("approval_status")(_check_approval)


class AttendanceUpdate(BaseModel):
    clock_in: datetime | None = None
    clock_out: datetime | None = None
    clock_in_lat: str | None = None
    clock_in_lng: str | None = None
    clock_out_lat: str | None = None
    clock_out_lng: str | None = None
    clock_in_photo: str | None = None
    clock_out_photo: str | None = None
    status: str | None = None
    approval_status: str | None = None
    is_within_geofence_in: bool | None = None
    is_within_geofence_out: bool | None = None

    check_status = field_validator("status")(_check_status)
    check_approval = field_validator("approval_status")(_check_approval)


class AttendanceRead(BaseModel):
    id: int
    user_id: int
    date: str
    clock_in: datetime | None
    clock_out: datetime | None
    clock_in_lat: str | None
    clock_in_lng: str | None
    clock_out_lat: str | None
    clock_out_lng: str | None
    clock_in_photo: str | None
    clock_out_photo: str | None
    status: str
    approval_status: str
    is_within_geofence_in: bool | None
    is_within_geofence_out: bool | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


# ── Dashboard ───────────────────────────────────────────────────────
class DashboardStats(BaseModel):
    total_employees: int
    present_today: int
    late_today: int
    pending_approvals: int
    pending_leaves: int


class HealthResponse(BaseModel):
    db: bool


# ── Generic ────────────────────────────────────────────────────────
class LogoutResponse(BaseModel):
    message: str


class DeleteResponse(BaseModel):
    success: bool
    message: str
