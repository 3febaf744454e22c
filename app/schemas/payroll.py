"""Pydantic schemas for payroll rows and the generate action."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, field_validator

_PERIOD_RE = re.compile(r"[0-9]{4}-[0-9]{2}")
VALID_PAYROLL_STATUSES = {"draft", "final"}


def _check_period(v: str | None) -> str | None:
    if v is not None and not _PERIOD_RE.fullmatch(v):
        raise ValueError("Period must be formatted YYYY-MM")
    return v


def _check_status(v: str | None) -> str | None:
    if v is not None and v not in VALID_PAYROLL_STATUSES:
        raise ValueError(f"Status must be one of: {sorted(VALID_PAYROLL_STATUSES)}")
    return v


class PayrollCreate(BaseModel):
    user_id: int
    period: str
    basic_salary: int = 0
    overtime_pay: int = 0
    bonus: int = 0
    late_deduction: int = 0
    bpjs_deduction: int = 0
    pph21_deduction: int = 0
    other_deduction: int = 0
    total_net: int = 0
    status: str = "draft"

    check_period = field_validator("period")(_check_period)
    check_status = field_validator("status")(_check_status)


class PayrollUpdate(BaseModel):
    basic_salary: int | None = None
    overtime_pay: int | None = None
    bonus: int | None = None
    late_deduction: int | None = None
    bpjs_deduction: int | None = None
    pph21_deduction: int | None = None
    other_deduction: int | None = None
    total_net: int | None = None
    status: str | None = None

    check_status = field_validator("status")(_check_status)


class PayrollRead(BaseModel):
    id: int
    user_id: int
    period: str
    basic_salary: int
    overtime_pay: int
    bonus: int
    late_deduction: int
    bpjs_deduction: int
    pph21_deduction: int
    other_deduction: int
    total_net: int
    status: str
    created_at: datetime | None

    model_config = {"from_attributes": True}


class GenerateRequest(BaseModel):
    # Format is checked by the generator so a bad period is a domain error
    period: str


class GenerateResponse(BaseModel):
    success: bool
    message: str
    count: int
    payrolls: list[PayrollRead]
