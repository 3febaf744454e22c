"""
Leave request CRUD + approval.

Employees file requests; admins decide them exactly once through
``POST /leaves/{id}/approve``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db, require_admin
from app.models.leave_request import LeaveRequest
from app.models.user import User
from app.schemas.attendance import DeleteResponse
from app.schemas.leave import LeaveCreate, LeaveDecision, LeaveRead, LeaveUpdate
from app.services.leave import decide_leave

router = APIRouter(prefix="/leaves", tags=["leaves"])
logger = logging.getLogger(__name__)


async def _get_leave_or_404(db: AsyncSession, leave_id: int) -> LeaveRequest:
    leave = await db.get(LeaveRequest, leave_id)
    if leave is None:
        raise HTTPException(status_code=404, detail="Leave request not found")
    return leave


@router.get("", response_model=list[LeaveRead])
async def list_leaves(
    user_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[LeaveRequest]:
    query = select(LeaveRequest).order_by(LeaveRequest.start_date.desc(), LeaveRequest.id.desc())
    if user_id is not None:
        query = query.where(LeaveRequest.user_id == user_id)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.get("/{leave_id}", response_model=LeaveRead)
async def get_leave(
    leave_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> LeaveRequest:
    return await _get_leave_or_404(db, leave_id)


@router.post("", response_model=LeaveRead, status_code=201)
async def create_leave(
    body: LeaveCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> LeaveRequest:
    """Submit a leave request. New requests always start as ``pending``."""
    if current_user.role != "admin" and current_user.id != body.user_id:
        raise HTTPException(status_code=403, detail="Cannot request leave for another user")
    if await db.get(User, body.user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    leave = LeaveRequest(**body.model_dump(), status="pending")
    db.add(leave)
    await db.commit()
    await db.refresh(leave)
    logger.info(
        "Leave %d requested by user %d (%s → %s)",
        leave.id, leave.user_id, leave.start_date, leave.end_date,
    )
    return leave


@router.patch("/{leave_id}", response_model=LeaveRead)
async def update_leave(
    leave_id: int,
    body: LeaveUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> LeaveRequest:
    leave = await _get_leave_or_404(db, leave_id)
    # Only the free-text reason may be cleared
    changes = {
        field: value
        for field, value in body.model_dump(exclude_unset=True).items()
        if value is not None or field == "reason"
    }

    start = changes.get("start_date", leave.start_date)
    end = changes.get("end_date", leave.end_date)
    if end < start:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")

    for field, value in changes.items():
        setattr(leave, field, value)

    await db.commit()
    await db.refresh(leave)
    logger.info("Updated leave %d", leave_id)
    return leave


@router.post("/{leave_id}/approve", response_model=LeaveRead)
async def approve_leave(
    leave_id: int,
    body: LeaveDecision,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> LeaveRequest:
    """Approve or reject a pending request. There is no way back."""
    approver = body.approved_by if body.approved_by is not None else admin.id
    return await decide_leave(db, leave_id, body.status, approver)


@router.delete("/{leave_id}", response_model=DeleteResponse)
async def delete_leave(
    leave_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    leave = await _get_leave_or_404(db, leave_id)
    await db.delete(leave)
    await db.commit()
    logger.info("Deleted leave %d", leave_id)
    return DeleteResponse(success=True, message="Leave request deleted successfully")
