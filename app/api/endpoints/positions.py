"""Position CRUD — reads for any user, writes for admins."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db, require_admin
from app.models.position import Position
from app.models.user import User
from app.schemas.attendance import DeleteResponse
from app.schemas.position import PositionCreate, PositionRead, PositionUpdate

router = APIRouter(prefix="/positions", tags=["positions"])
logger = logging.getLogger(__name__)


async def _get_position_or_404(db: AsyncSession, position_id: int) -> Position:
    position = await db.get(Position, position_id)
    if position is None:
        raise HTTPException(status_code=404, detail="Position not found")
    return position


@router.get("", response_model=list[PositionRead])
async def list_positions(
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[Position]:
    result = await db.execute(select(Position).order_by(Position.title))
    return list(result.scalars().all())


@router.get("/{position_id}", response_model=PositionRead)
async def get_position(
    position_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> Position:
    return await _get_position_or_404(db, position_id)


@router.post("", response_model=PositionRead, status_code=201)
async def create_position(
    body: PositionCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Position:
    position = Position(**body.model_dump())
    db.add(position)
    await db.commit()
    await db.refresh(position)
    logger.info("Created position %d (%s @ %s/h)", position.id, position.title, position.hourly_rate)
    return position


@router.patch("/{position_id}", response_model=PositionRead)
async def update_position(
    position_id: int,
    body: PositionUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Position:
    position = await _get_position_or_404(db, position_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(position, field, value)

    await db.commit()
    await db.refresh(position)
    logger.info("Updated position %d", position_id)
    return position


@router.delete("/{position_id}", response_model=DeleteResponse)
async def delete_position(
    position_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    """Delete a position; its holders keep their account with no position."""
    position = await _get_position_or_404(db, position_id)
    await db.delete(position)
    await db.commit()
    logger.info("Deleted position %d", position_id)
    return DeleteResponse(success=True, message="Position deleted successfully")
