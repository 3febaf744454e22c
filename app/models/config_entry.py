"""
ConfigEntry model — key/value table of tunable business parameters.

Values are stored as strings; consumers parse numbers themselves
(see ``app.services.config_store``).
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from app.db.base import Base


class ConfigEntry(Base):
    __tablename__ = "config"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    key: str = Column(String(100), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    value: str = Column(String(500), nullable=False, default="")  # type: ignore[assignment]
    description: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
