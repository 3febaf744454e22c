"""LeaveRequest model — pending → approved | rejected, decided once by an admin."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # type: ignore[assignment]
    leave_type: str = Column(String(20), nullable=False, default="annual")  # type: ignore[assignment]
    # annual | sick | permit | other
    start_date: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # YYYY-MM-DD
    end_date: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # YYYY-MM-DD
    reason: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="pending")  # type: ignore[assignment]
    approved_by: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    user = relationship("User", back_populates="leaves", foreign_keys=[user_id])
