"""
Payroll generation — turns a month of approved attendance into draft payslips.

Work-day rules (local time):

* Late when clocking in after 08:10; lateness is counted from 08:00.
* Days longer than 4 hours lose a 1 hour unpaid break.
* Time past 16:00 is overtime: first hour at 1.5x, the rest at 2x.

Deductions are flat demo rates (BPJS from config, PPh21 5%), not a
statutory tax table.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock
from app.core.exceptions import InvalidPeriod
from app.models.attendance import Attendance
from app.models.payroll import Payroll
from app.models.position import Position
from app.models.user import User
from app.services.config_store import RuntimeConfig, load_runtime_config

logger = logging.getLogger(__name__)

_PERIOD_RE = re.compile(r"[0-9]{4}-[0-9]{2}")

WORK_START = time(8, 0)
LATE_THRESHOLD = time(8, 10)
WORK_END = time(16, 0)
BREAK_AFTER_MINUTES = 240
BREAK_MINUTES = 60
FIRST_OVERTIME_HOUR_MULTIPLIER = 1.5
EXTRA_OVERTIME_MULTIPLIER = 2
PPH21_RATE = 0.05


@dataclass
class DaySummary:
    late_minutes: int
    work_minutes: int
    overtime_pay: int


@dataclass
class PayrollFigures:
    basic_salary: int
    overtime_pay: int
    late_deduction: int
    bpjs_deduction: int
    pph21_deduction: int
    total_net: int
    work_minutes: int = 0
    late_minutes: int = 0


def validate_period(period: str | None) -> str:
    if not period or not _PERIOD_RE.fullmatch(period):
        raise InvalidPeriod()
    if not 1 <= int(period[5:7]) <= 12:
        raise InvalidPeriod()
    return period


def _minutes_between(start: datetime, end: datetime) -> int:
    return math.floor((end - start).total_seconds() / 60)


def summarize_day(
    work_date: date,
    clock_in: datetime,
    clock_out: datetime,
    hourly_rate: float,
    tz: tzinfo,
) -> DaySummary:
    """Lateness, paid minutes and overtime pay for one attendance day.

    ``clock_in`` / ``clock_out`` must be timezone-aware; the reference
    times are built on ``work_date`` in ``tz``.
    """
    work_start = datetime.combine(work_date, WORK_START, tzinfo=tz)
    late_threshold = datetime.combine(work_date, LATE_THRESHOLD, tzinfo=tz)
    work_end = datetime.combine(work_date, WORK_END, tzinfo=tz)

    late_minutes = 0
    if clock_in > late_threshold:
        # Anchored at 08:00: arriving 08:11 costs 11 minutes, not 1
        late_minutes = _minutes_between(work_start, clock_in)

    duration = _minutes_between(clock_in, clock_out)
    if duration > BREAK_AFTER_MINUTES:
        duration -= BREAK_MINUTES
    duration = max(duration, 0)

    overtime_pay = 0
    if clock_out > work_end:
        ot_hours = _minutes_between(work_end, clock_out) / 60
        if ot_hours > 0:
            first_hour = min(ot_hours, 1)
            extra_hours = max(0, ot_hours - 1)
            overtime_pay = math.floor(
                first_hour * FIRST_OVERTIME_HOUR_MULTIPLIER * hourly_rate
                + extra_hours * EXTRA_OVERTIME_MULTIPLIER * hourly_rate
            )

    return DaySummary(late_minutes=late_minutes, work_minutes=duration, overtime_pay=overtime_pay)


def compute_payroll(
    days: list[DaySummary], hourly_rate: float, config: RuntimeConfig
) -> PayrollFigures:
    """Derive salary, deductions and net pay from per-day summaries.

    Net pay is not clamped and may be negative.
    """
    work_minutes = sum(d.work_minutes for d in days)
    late_minutes = sum(d.late_minutes for d in days)
    overtime_pay = sum(d.overtime_pay for d in days)

    basic_salary = math.floor(work_minutes / 60 * hourly_rate)
    late_deduction = late_minutes * config.late_penalty_per_minute
    bpjs_deduction = math.floor(
        basic_salary * (config.bpjs_kesehatan_rate + config.bpjs_ketenagakerjaan_rate)
    )
    pph21_deduction = math.floor(basic_salary * PPH21_RATE)
    total_net = basic_salary + overtime_pay - late_deduction - bpjs_deduction - pph21_deduction

    return PayrollFigures(
        basic_salary=basic_salary,
        overtime_pay=overtime_pay,
        late_deduction=late_deduction,
        bpjs_deduction=bpjs_deduction,
        pph21_deduction=pph21_deduction,
        total_net=total_net,
        work_minutes=work_minutes,
        late_minutes=late_minutes,
    )


async def _payable_attendance(db: AsyncSession, user_id: int, period: str) -> list[Attendance]:
    """Approved, complete records of ``user_id`` dated inside ``period``."""
    result = await db.execute(
        select(Attendance)
        .where(
            Attendance.user_id == user_id,
            Attendance.date.like(f"{period}-%"),
            Attendance.approval_status == "approved",
            Attendance.clock_in.is_not(None),
            Attendance.clock_out.is_not(None),
        )
        .order_by(Attendance.date.asc())
    )
    return list(result.scalars().all())


async def generate_payroll(db: AsyncSession, period: str, clock: Clock) -> list[Payroll]:
    """Replace every payroll row of ``period`` with freshly computed drafts.

    Delete, compute and insert share one transaction: either the whole
    period is regenerated or nothing changes.
    """
    validate_period(period)

    try:
        finals = await db.execute(
            select(func.count(Payroll.id)).where(
                Payroll.period == period, Payroll.status == "final"
            )
        )
        final_count = finals.scalar() or 0
        if final_count:
            logger.warning(
                "Regenerating %s deletes %d finalized payroll row(s)", period, final_count
            )
        await db.execute(delete(Payroll).where(Payroll.period == period))

        config = await load_runtime_config(db)
        positions = {
            p.id: p.hourly_rate for p in (await db.execute(select(Position))).scalars().all()
        }
        employees = (
            await db.execute(select(User).where(User.role != "admin").order_by(User.id))
        ).scalars().all()

        rows: list[Payroll] = []
        for emp in employees:
            hourly_rate = positions.get(emp.position_id) or 0
            days = [
                summarize_day(
                    date.fromisoformat(att.date),
                    clock.to_local(att.clock_in),
                    clock.to_local(att.clock_out),
                    hourly_rate,
                    clock.tz,
                )
                for att in await _payable_attendance(db, emp.id, period)
            ]
            figures = compute_payroll(days, hourly_rate, config)
            logger.debug(
                "Payroll %s user=%d days=%d work_min=%d late_min=%d net=%d",
                period, emp.id, len(days), figures.work_minutes,
                figures.late_minutes, figures.total_net,
            )

            row = Payroll(
                user_id=emp.id,
                period=period,
                basic_salary=figures.basic_salary,
                overtime_pay=figures.overtime_pay,
                bonus=0,
                late_deduction=figures.late_deduction,
                bpjs_deduction=figures.bpjs_deduction,
                pph21_deduction=figures.pph21_deduction,
                other_deduction=0,
                total_net=figures.total_net,
                status="draft",
            )
            db.add(row)
            rows.append(row)

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    for row in rows:
        await db.refresh(row)

    logger.info("Generated payroll for %s: %d employee(s)", period, len(rows))
    return rows
