"""
User model — employees and administrators share one table.

Only non-admin users take part in payroll generation.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_password: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    role: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="employee",
        server_default="employee",
    )  # admin | employee
    position_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("positions.id", ondelete="SET NULL"), nullable=True
    )
    join_date: str | None = Column(String(10), nullable=True)  # type: ignore[assignment]  # YYYY-MM-DD
    phone: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]
    address: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default="active", server_default="active"
    )  # active | inactive
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    position = relationship("Position", back_populates="users")
    attendances = relationship(
        "Attendance",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    leaves = relationship(
        "LeaveRequest",
        back_populates="user",
        cascade="all, delete-orphan",
        foreign_keys="LeaveRequest.user_id",
    )
    payrolls = relationship(
        "Payroll",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def is_active(self) -> bool:
        return self.status != "inactive"
