"""
User (employee) CRUD.

- GET operations require any authenticated user.
- POST / PATCH / DELETE require admin role.
- The password hash never leaves the server.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db, require_admin
from app.core.security import get_password_hash
from app.models.position import Position
from app.models.user import User
from app.schemas.attendance import DeleteResponse
from app.schemas.user import UserCreate, UserRead, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)

# Columns that may not be cleared with an explicit null
_REQUIRED_FIELDS = {"name", "email", "role", "status"}


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def _ensure_position_exists(db: AsyncSession, position_id: int | None) -> None:
    if position_id is not None and await db.get(Position, position_id) is None:
        raise HTTPException(status_code=404, detail="Position not found")


async def _ensure_email_free(db: AsyncSession, email: str, exclude_id: int | None = None) -> None:
    result = await db.execute(select(User).where(User.email == email))
    existing = result.scalar_one_or_none()
    if existing is not None and existing.id != exclude_id:
        raise HTTPException(status_code=409, detail="Email already registered")


@router.get("", response_model=list[UserRead])
async def list_users(
    skip: int = 0,
    limit: int = Query(default=100, le=500),
    role: str | None = None,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[User]:
    query = select(User).order_by(User.name).offset(skip).limit(limit)
    if role:
        query = query.where(User.role == role)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> User:
    return await _get_user_or_404(db, user_id)


@router.post("", response_model=UserRead, status_code=201)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> User:
    await _ensure_email_free(db, body.email)
    await _ensure_position_exists(db, body.position_id)

    data = body.model_dump(exclude={"password"})
    user = User(**data, hashed_password=get_password_hash(body.password))
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Created user %d (%s, role=%s)", user.id, user.email, user.role)
    return user


@router.patch("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: int,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> User:
    user = await _get_user_or_404(db, user_id)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("email"):
        await _ensure_email_free(db, changes["email"], exclude_id=user_id)
    if "position_id" in changes:
        await _ensure_position_exists(db, changes["position_id"])

    password = changes.pop("password", None)
    if password:
        user.hashed_password = get_password_hash(password)

    for field, value in changes.items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    logger.info("Updated user %d", user_id)
    return user


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    """Delete a user together with their attendance, leave and payroll rows."""
    user = await _get_user_or_404(db, user_id)
    await db.delete(user)
    await db.commit()
    logger.info("Deleted user %d (%s)", user_id, user.email)
    return DeleteResponse(success=True, message="User deleted successfully")
