"""
Dashboard counters and health check.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db
from app.core.clock import Clock, get_clock
from app.models.attendance import Attendance
from app.models.leave_request import LeaveRequest
from app.models.user import User
from app.schemas.attendance import DashboardStats, HealthResponse

router = APIRouter(tags=["dashboard"])
logger = logging.getLogger(__name__)


async def _count(db: AsyncSession, *criteria) -> int:
    result = await db.execute(select(func.count()).where(*criteria))
    return result.scalar() or 0


@router.get("/dashboard/stats", response_model=DashboardStats)
async def dashboard_stats(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    _user: User = Depends(get_current_active_user),
) -> DashboardStats:
    """Headline counts for the admin dashboard, for the local "today"."""
    today = clock.today()

    return DashboardStats(
        total_employees=await _count(db, User.role != "admin"),
        present_today=await _count(
            db, Attendance.date == today, Attendance.status == "present"
        ),
        late_today=await _count(db, Attendance.date == today, Attendance.status == "late"),
        pending_approvals=await _count(db, Attendance.approval_status == "pending"),
        pending_leaves=await _count(db, LeaveRequest.status == "pending"),
    )


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Public health check — DB connectivity."""
    result = HealthResponse(db=False)
    try:
        await db.execute(select(1))
        result.db = True
    except Exception as e:
        logger.error("Health check DB failure: %s", e)
    return result
