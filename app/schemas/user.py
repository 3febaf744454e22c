"""Pydantic schemas for User (employee / admin) CRUD and login."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, field_validator

_VALID_ROLES = {"admin", "employee"}
_VALID_STATUSES = {"active", "inactive"}
_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def _normalise_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v:
        raise ValueError("Invalid email address")
    return v


def _check_role(v: str | None) -> str | None:
    if v is not None and v not in _VALID_ROLES:
        raise ValueError(f"Role must be one of: {sorted(_VALID_ROLES)}")
    return v


def _check_status(v: str | None) -> str | None:
    if v is not None and v not in _VALID_STATUSES:
        raise ValueError(f"Status must be one of: {sorted(_VALID_STATUSES)}")
    return v


def _check_date(v: str | None) -> str | None:
    if v is not None and not _DATE_RE.fullmatch(v):
        raise ValueError("Date must be formatted YYYY-MM-DD")
    return v


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return v.strip().lower()


class UserCreate(BaseModel):
    name: str
    email: str
    password: str
    role: str = "employee"
    position_id: int | None = None
    join_date: str | None = None
    phone: str | None = None
    address: str | None = None
    status: str = "active"

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        if len(v) > 200:
            raise ValueError("Name must not exceed 200 characters")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    check_role = field_validator("role")(_check_role)
    check_status = field_validator("status")(_check_status)
    check_join_date = field_validator("join_date")(_check_date)


class UserUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None
    position_id: int | None = None
    join_date: str | None = None
    phone: str | None = None
    address: str | None = None
    status: str | None = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: str | None) -> str | None:
        return _normalise_email(v) if v is not None else v

    check_role = field_validator("role")(_check_role)
    check_status = field_validator("status")(_check_status)
    check_join_date = field_validator("join_date")(_check_date)


class UserRead(BaseModel):
    """Never carries the password hash."""

    id: int
    name: str
    email: str
    role: str
    position_id: int | None
    join_date: str | None
    phone: str | None
    address: str | None
    status: str
    created_at: datetime | None

    model_config = {"from_attributes": True}
