"""
Payroll rows, period generation, finalization and CSV export.

All writes are admin-only.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db, require_admin
from app.core.clock import Clock, get_clock
from app.models.payroll import Payroll
from app.models.user import User
from app.schemas.attendance import DeleteResponse
from app.schemas.payroll import (GenerateRequest, GenerateResponse,
                                 PayrollCreate, PayrollRead, PayrollUpdate)
from app.services.payroll import generate_payroll, validate_period

router = APIRouter(prefix="/payroll", tags=["payroll"])
logger = logging.getLogger(__name__)

_CSV_COLUMNS = (
    "id", "user_id", "name", "period", "basic_salary", "overtime_pay", "bonus",
    "late_deduction", "bpjs_deduction", "pph21_deduction", "other_deduction",
    "total_net", "status",
)


async def _get_payroll_or_404(db: AsyncSession, payroll_id: int) -> Payroll:
    payroll = await db.get(Payroll, payroll_id)
    if payroll is None:
        raise HTTPException(status_code=404, detail="Payroll record not found")
    return payroll


def _csv_cell(value: object) -> str:
    text = "" if value is None else str(value)
    if any(ch in text for ch in (",", '"', "\n")):
        text = '"' + text.replace('"', '""') + '"'
    return text


@router.get("", response_model=list[PayrollRead])
async def list_payroll(
    period: str | None = None,
    user_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[Payroll]:
    query = select(Payroll).order_by(Payroll.period.desc(), Payroll.user_id.asc())
    if period:
        query = query.where(Payroll.period == period)
    if user_id is not None:
        query = query.where(Payroll.user_id == user_id)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("/generate", response_model=GenerateResponse, status_code=201)
async def generate(
    body: GenerateRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    _admin: User = Depends(require_admin),
) -> GenerateResponse:
    """Recompute draft payroll for every employee in the period.

    Existing rows of the period, drafts and finalized alike, are replaced.
    """
    rows = await generate_payroll(db, body.period, clock)
    return GenerateResponse(
        success=True,
        message=f"Generated payroll for {len(rows)} employees",
        count=len(rows),
        payrolls=[PayrollRead.model_validate(r) for r in rows],
    )


@router.get("/export/csv")
async def export_csv(
    period: str = Query(...),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> StreamingResponse:
    """Export a period's payroll as a CSV file download."""
    validate_period(period)
    result = await db.execute(
        select(Payroll, User.name)
        .join(User, Payroll.user_id == User.id)
        .where(Payroll.period == period)
        .order_by(User.name)
    )
    rows = result.all()

    def iter_csv():
        yield ",".join(_CSV_COLUMNS) + "\n"
        for payroll, name in rows:
            values = {col: getattr(payroll, col, None) for col in _CSV_COLUMNS}
            values["name"] = name
            yield ",".join(_csv_cell(values[col]) for col in _CSV_COLUMNS) + "\n"

    return StreamingResponse(
        iter_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=payroll_{period}.csv"},
    )


@router.get("/{payroll_id}", response_model=PayrollRead)
async def get_payroll(
    payroll_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> Payroll:
    return await _get_payroll_or_404(db, payroll_id)


@router.post("", response_model=PayrollRead, status_code=201)
async def create_payroll(
    body: PayrollCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Payroll:
    if await db.get(User, body.user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    payroll = Payroll(**body.model_dump())
    db.add(payroll)
    await db.commit()
    await db.refresh(payroll)
    logger.info("Created payroll %d for user %d (%s)", payroll.id, payroll.user_id, payroll.period)
    return payroll


@router.patch("/{payroll_id}", response_model=PayrollRead)
async def update_payroll(
    payroll_id: int,
    body: PayrollUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Payroll:
    """Edit amounts or status. Finalized rows are not protected here."""
    payroll = await _get_payroll_or_404(db, payroll_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(payroll, field, value)

    await db.commit()
    await db.refresh(payroll)
    logger.info("Updated payroll %d", payroll_id)
    return payroll


@router.post("/{payroll_id}/finalize", response_model=PayrollRead)
async def finalize_payroll(
    payroll_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Payroll:
    payroll = await _get_payroll_or_404(db, payroll_id)
    payroll.status = "final"
    await db.commit()
    await db.refresh(payroll)
    logger.info("Finalized payroll %d (user %d, %s)", payroll_id, payroll.user_id, payroll.period)
    return payroll


@router.delete("/{payroll_id}", response_model=DeleteResponse)
async def delete_payroll(
    payroll_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    payroll = await _get_payroll_or_404(db, payroll_id)
    await db.delete(payroll)
    await db.commit()
    logger.info("Deleted payroll %d", payroll_id)
    return DeleteResponse(success=True, message="Payroll record deleted successfully")
