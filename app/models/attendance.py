"""
Attendance model — one row per employee per local calendar day.

Created on clock-in, completed on clock-out, and approved by an admin
before it counts towards payroll.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Integer, String,
                        Text, UniqueConstraint)
from sqlalchemy.orm import relationship

from app.db.base import Base


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM-DD (local)
    clock_in: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    clock_out: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    clock_in_lat: str | None = Column(String(32), nullable=True)  # type: ignore[assignment]
    clock_in_lng: str | None = Column(String(32), nullable=True)  # type: ignore[assignment]
    clock_out_lat: str | None = Column(String(32), nullable=True)  # type: ignore[assignment]
    clock_out_lng: str | None = Column(String(32), nullable=True)  # type: ignore[assignment]
    clock_in_photo: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    clock_out_photo: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="present")  # type: ignore[assignment]
    # present | late | absent
    approval_status: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default="pending", index=True
    )  # pending | approved | rejected
    is_within_geofence_in: bool | None = Column(Boolean, nullable=True)  # type: ignore[assignment]
    is_within_geofence_out: bool | None = Column(Boolean, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    user = relationship("User", back_populates="attendances")
