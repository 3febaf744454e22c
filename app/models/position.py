"""Position model — job title and the hourly rate used for salary and overtime."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class Position(Base):
    __tablename__ = "positions"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    title: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    hourly_rate: float = Column(Float, nullable=False, default=0)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    users = relationship("User", back_populates="position")
