"""Leave approval — a single one-way decision on a pending request."""

from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidStatus, LeaveAlreadyDecided
from app.models.leave_request import LeaveRequest

logger = logging.getLogger(__name__)

DECISIONS = ("approved", "rejected")


async def decide_leave(
    db: AsyncSession, leave_id: int, status: str, approved_by: int | None
) -> LeaveRequest:
    if status not in DECISIONS:
        raise InvalidStatus()

    leave = await db.get(LeaveRequest, leave_id)
    if leave is None:
        raise HTTPException(status_code=404, detail="Leave request not found")
    if leave.status != "pending":
        raise LeaveAlreadyDecided(f"Leave request is already {leave.status}")

    leave.status = status
    leave.approved_by = approved_by
    await db.commit()
    await db.refresh(leave)

    logger.info("Leave %d %s by user %s", leave_id, status, approved_by)
    return leave
