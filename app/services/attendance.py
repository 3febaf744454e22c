"""
Clock-in / clock-out — at most one attendance row per user per local day.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock
from app.core.exceptions import AlreadyClockedIn, AlreadyClockedOut, NoClockInFound
from app.models.attendance import Attendance
from app.models.user import User
from app.services.config_store import RuntimeConfig
from app.services.geofence import is_within_geofence

logger = logging.getLogger(__name__)


async def _require_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def find_day_record(db: AsyncSession, user_id: int, day: str) -> Attendance | None:
    result = await db.execute(
        select(Attendance).where(Attendance.user_id == user_id, Attendance.date == day)
    )
    return result.scalar_one_or_none()


async def clock_in(
    db: AsyncSession,
    *,
    user_id: int,
    lat: float,
    lng: float,
    photo: str | None,
    clock: Clock,
    config: RuntimeConfig,
) -> Attendance:
    await _require_user(db, user_id)
    today = clock.today()

    if await find_day_record(db, user_id, today) is not None:
        raise AlreadyClockedIn()

    within = is_within_geofence(lat, lng, config)
    record = Attendance(
        user_id=user_id,
        date=today,
        clock_in=clock.to_storage(clock.now()),
        clock_in_lat=str(lat),
        clock_in_lng=str(lng),
        clock_in_photo=photo,
        status="present",
        approval_status="pending",
        is_within_geofence_in=within,
    )
    db.add(record)
    await db.commit()
    await db.refresh(record)

    logger.info(
        "Clock-in user=%d date=%s within_geofence=%s", user_id, today, within
    )
    return record


async def clock_out(
    db: AsyncSession,
    *,
    user_id: int,
    lat: float,
    lng: float,
    photo: str | None,
    clock: Clock,
    config: RuntimeConfig,
) -> Attendance:
    await _require_user(db, user_id)
    today = clock.today()

    record = await find_day_record(db, user_id, today)
    if record is None:
        raise NoClockInFound()
    if record.clock_out is not None:
        raise AlreadyClockedOut()

    within = is_within_geofence(lat, lng, config)
    record.clock_out = clock.to_storage(clock.now())
    record.clock_out_lat = str(lat)
    record.clock_out_lng = str(lng)
    record.clock_out_photo = photo
    record.is_within_geofence_out = within
    await db.commit()
    await db.refresh(record)

    logger.info(
        "Clock-out user=%d date=%s within_geofence=%s", user_id, today, within
    )
    return record
