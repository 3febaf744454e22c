"""
Attendance CRUD + geofenced clock-in / clock-out.

- Clock-in/out is open to any authenticated user, for themselves
  (admins may clock on behalf of anyone).
- Manual create / edit / delete is admin-only; approving a day is an
  edit of ``approval_status``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db, get_runtime_config, require_admin
from app.core.clock import Clock, get_clock
from app.models.attendance import Attendance
from app.models.user import User
from app.schemas.attendance import (AttendanceCreate, AttendanceRead,
                                    AttendanceUpdate, ClockRequest,
                                    DeleteResponse)
from app.services import attendance as recorder
from app.services.config_store import RuntimeConfig

router = APIRouter(prefix="/attendance", tags=["attendance"])
logger = logging.getLogger(__name__)

_TIMESTAMP_FIELDS = ("clock_in", "clock_out")


def _ensure_self_or_admin(current_user: User, user_id: int) -> None:
    if current_user.role != "admin" and current_user.id != user_id:
        raise HTTPException(status_code=403, detail="Cannot record attendance for another user")


async def _get_record_or_404(db: AsyncSession, attendance_id: int) -> Attendance:
    record = await db.get(Attendance, attendance_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Attendance record not found")
    return record


# ── Clock in / out ──────────────────────────────────────────────────
@router.post("/clock-in", response_model=AttendanceRead, status_code=201)
async def clock_in(
    body: ClockRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    config: RuntimeConfig = Depends(get_runtime_config),
    current_user: User = Depends(get_current_active_user),
) -> Attendance:
    """Open today's attendance record, flagging whether the user is inside the geofence."""
    _ensure_self_or_admin(current_user, body.user_id)
    return await recorder.clock_in(
        db,
        user_id=body.user_id,
        lat=body.lat,
        lng=body.lng,
        photo=body.photo,
        clock=clock,
        config=config,
    )


@router.post("/clock-out", response_model=AttendanceRead)
async def clock_out(
    body: ClockRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    config: RuntimeConfig = Depends(get_runtime_config),
    current_user: User = Depends(get_current_active_user),
) -> Attendance:
    """Close today's attendance record. Approval status is left untouched."""
    _ensure_self_or_admin(current_user, body.user_id)
    return await recorder.clock_out(
        db,
        user_id=body.user_id,
        lat=body.lat,
        lng=body.lng,
        photo=body.photo,
        clock=clock,
        config=config,
    )


# ── CRUD ────────────────────────────────────────────────────────────
@router.get("", response_model=list[AttendanceRead])
async def list_attendance(
    user_id: int | None = None,
    date: str | None = Query(default=None, pattern=r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[Attendance]:
    query = select(Attendance).order_by(Attendance.date.desc(), Attendance.id.desc())
    if user_id is not None:
        query = query.where(Attendance.user_id == user_id)
    if date:
        query = query.where(Attendance.date == date)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.get("/{attendance_id}", response_model=AttendanceRead)
async def get_attendance(
    attendance_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> Attendance:
    return await _get_record_or_404(db, attendance_id)


@router.post("", response_model=AttendanceRead, status_code=201)
async def create_attendance(
    body: AttendanceCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    _admin: User = Depends(require_admin),
) -> Attendance:
    """Manual entry. A second record for the same user and day is a 409."""
    if await db.get(User, body.user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    data = body.model_dump()
    for field in _TIMESTAMP_FIELDS:
        if data[field] is not None:
            data[field] = clock.to_storage(data[field])

    record = Attendance(**data)
    db.add(record)
    await db.commit()
    await db.refresh(record)
    logger.info("Created attendance %d for user %d on %s", record.id, record.user_id, record.date)
    return record


@router.patch("/{attendance_id}", response_model=AttendanceRead)
async def update_attendance(
    attendance_id: int,
    body: AttendanceUpdate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    _admin: User = Depends(require_admin),
) -> Attendance:
    record = await _get_record_or_404(db, attendance_id)

    for field, value in body.model_dump(exclude_unset=True).items():
        if field in ("status", "approval_status") and value is None:
            continue
        if field in _TIMESTAMP_FIELDS and value is not None:
            value = clock.to_storage(value)
        setattr(record, field, value)

    await db.commit()
    await db.refresh(record)
    logger.info("Updated attendance %d", attendance_id)
    return record


@router.delete("/{attendance_id}", response_model=DeleteResponse)
async def delete_attendance(
    attendance_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    record = await _get_record_or_404(db, attendance_id)
    await db.delete(record)
    await db.commit()
    logger.info("Deleted attendance %d", attendance_id)
    return DeleteResponse(success=True, message="Attendance record deleted successfully")
