"""
Payroll model — one row per employee per period (``YYYY-MM``).

Amounts are whole Rupiah. ``draft`` rows are regenerated freely;
``final`` marks a payslip as issued.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (BigInteger, Column, DateTime, ForeignKey, Integer,
                        String, UniqueConstraint)
from sqlalchemy.orm import relationship

from app.db.base import Base


class Payroll(Base):
    __tablename__ = "payroll"
    __table_args__ = (
        UniqueConstraint("user_id", "period", name="uq_payroll_user_period"),
        # Regenerated rows must never reuse the ids of deleted ones
        {"sqlite_autoincrement": True},
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # type: ignore[assignment]
    period: str = Column(String(7), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM
    basic_salary: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]
    overtime_pay: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]
    bonus: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]
    late_deduction: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]
    bpjs_deduction: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]
    pph21_deduction: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]
    other_deduction: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]
    total_net: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]
    status: str = Column(String(10), nullable=False, default="draft")  # type: ignore[assignment]
    # draft | final
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    user = relationship("User", back_populates="payrolls")
