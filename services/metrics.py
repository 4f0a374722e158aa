# services/metrics.py

"""
Workforce metrics: attendance, productivity and payroll.

Everything here is derived from the record store on each call and never
persisted. Percentages and bonuses use half-up rounding.
"""

import calendar
from datetime import date, timedelta
from typing import List, Optional, Sequence

from core.config import settings
from core.errors import EmployeeNotFoundError
from core.utils import round_2, round_half_up
from models.enums import AttendanceStatus
from models.workforce import (
    AttendanceRecord,
    AttendanceReport,
    PaymentCalculation,
    ProductivityRecord,
    ProductivityReport,
    WeeklyAttendanceReport,
)
from services.record_store import RecordStore

STANDARD_WORKDAY_HOURS = 8
DAYS_PER_WEEK = 7

# Productivity score weights (sum to 1.0)
HOURS_WEIGHT = 0.30
QUALITY_WEIGHT = 0.40
EFFICIENCY_WEIGHT = 0.30

# (minimum score, multiplier), checked top-down
PAYMENT_MULTIPLIERS = [(90, 1.2), (80, 1.1), (70, 1.0), (60, 0.95)]
FLOOR_MULTIPLIER = 0.8

# (minimum value, fraction of base pay), checked top-down
ATTENDANCE_BONUS_TIERS = [(95, 0.10), (90, 0.05)]
PRODUCTIVITY_BONUS_TIERS = [(90, 0.15), (80, 0.10), (70, 0.05)]
QUALITY_BONUS_TIERS = [(9, 0.10), (8, 0.05)]


# =====================================================
# PURE CALCULATIONS
# =====================================================
def attendance_percentage(present_days: int, total_days: int) -> int:
    if total_days <= 0:
        return 0
    return round_half_up(present_days / total_days * 100)


def productivity_score(avg_hours: float, avg_quality: float, avg_efficiency: float) -> int:
    return round_half_up(
        (
            avg_hours / STANDARD_WORKDAY_HOURS * HOURS_WEIGHT
            + avg_quality / 10 * QUALITY_WEIGHT
            + avg_efficiency / 100 * EFFICIENCY_WEIGHT
        )
        * 100
    )


def payment_multiplier(score: float) -> float:
    for threshold, multiplier in PAYMENT_MULTIPLIERS:
        if score >= threshold:
            return multiplier
    return FLOOR_MULTIPLIER


def _bonus_fraction(value: float, tiers) -> float:
    for threshold, fraction in tiers:
        if value >= threshold:
            return fraction
    return 0.0


def days_in_month(month: str) -> int:
    """``YYYY-MM`` → number of calendar days."""
    year, month_num = (int(part) for part in month.split("-")[:2])
    return calendar.monthrange(year, month_num)[1]


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _week_bounds(week_start: str):
    start = date.fromisoformat(week_start)
    return start, start + timedelta(days=DAYS_PER_WEEK - 1)


def _in_range(day: str, start: date, end: date) -> bool:
    return start <= date.fromisoformat(day) <= end


def _count(records: List[AttendanceRecord], status: AttendanceStatus) -> int:
    return sum(1 for r in records if r.status == status)


# =====================================================
# ATTENDANCE REPORTS
# =====================================================
def monthly_attendance_report(store: RecordStore, month: str) -> List[AttendanceReport]:
    """One row per employee for ``YYYY-MM``."""
    total_days = days_in_month(month)
    month_records = store.attendance_by_month(month)

    reports = []
    for employee in store.employees():
        records = [r for r in month_records if r.employee_id == employee.id]
        present = _count(records, AttendanceStatus.present)
        reports.append(AttendanceReport(
            employee_id=employee.id,
            employee_name=employee.name,
            month=month,
            total_days=total_days,
            present_days=present,
            absent_days=_count(records, AttendanceStatus.absent),
            attendance_percentage=attendance_percentage(present, total_days),
        ))
    return reports


def weekly_attendance_report(store: RecordStore, week_start: str) -> List[WeeklyAttendanceReport]:
    """One row per employee for the seven days starting ``week_start``."""
    start, end = _week_bounds(week_start)

    reports = []
    for employee in store.employees():
        records = [r for r in store.attendance_by_employee(employee.id) if _in_range(r.date, start, end)]
        present = _count(records, AttendanceStatus.present)
        reports.append(WeeklyAttendanceReport(
            employee_id=employee.id,
            employee_name=employee.name,
            week_start=week_start,
            week_end=end.isoformat(),
            total_days=DAYS_PER_WEEK,
            present_days=present,
            absent_days=_count(records, AttendanceStatus.absent),
            attendance_percentage=attendance_percentage(present, DAYS_PER_WEEK),
        ))
    return reports


# =====================================================
# PRODUCTIVITY REPORT
# =====================================================
def _productivity_row(employee, period: str, records: List[ProductivityRecord]) -> ProductivityReport:
    avg_hours = _mean([r.hours_worked for r in records])
    avg_quality = _mean([r.quality_score for r in records])
    avg_efficiency = _mean([r.efficiency for r in records])

    # score uses the unrounded averages
    score = productivity_score(avg_hours, avg_quality, avg_efficiency)

    return ProductivityReport(
        employee_id=employee.id,
        employee_name=employee.name,
        period=period,
        average_hours_worked=round_2(avg_hours),
        total_tasks_completed=sum(r.tasks_completed for r in records),
        average_quality_score=round_2(avg_quality),
        average_efficiency=round_2(avg_efficiency),
        productivity_score=score,
        payment_multiplier=payment_multiplier(score),
    )


def productivity_report(store: RecordStore, period: str, type: str = "monthly") -> List[ProductivityReport]:
    """
    ``monthly``: ``period`` is ``YYYY-MM`` and matches by date prefix.
    ``weekly``: ``period`` is the first day of a seven-day window.
    """
    if type not in ("monthly", "weekly"):
        raise ValueError(f"Unsupported report type: {type}")

    reports = []
    for employee in store.employees():
        records = store.productivity_by_employee(employee.id)
        if type == "weekly":
            start, end = _week_bounds(period)
            records = [r for r in records if _in_range(r.date, start, end)]
        else:
            records = [r for r in records if r.date.startswith(period)]
        reports.append(_productivity_row(employee, period, records))
    return reports


# =====================================================
# PAYROLL
# =====================================================
def calculate_payment(
    store: RecordStore,
    employee_id: str,
    period: str,
    base_pay: Optional[float] = None,
) -> PaymentCalculation:
    """
    Monthly pay for one employee: base pay plus attendance, productivity and
    quality bonuses. Each bonus is rounded on its own and the total is the
    sum of the rounded parts.
    """
    employee = store.get_user(employee_id)
    if employee is None:
        raise EmployeeNotFoundError(employee_id)

    base_pay = settings.DEFAULT_BASE_PAY if base_pay is None else base_pay

    attendance = next(
        (r for r in monthly_attendance_report(store, period) if r.employee_id == employee_id), None
    )
    productivity = next(
        (r for r in productivity_report(store, period) if r.employee_id == employee_id), None
    )

    attendance_pct = attendance.attendance_percentage if attendance else 0
    score = productivity.productivity_score if productivity else 0
    avg_quality = productivity.average_quality_score if productivity else 0

    attendance_bonus = round_half_up(base_pay * _bonus_fraction(attendance_pct, ATTENDANCE_BONUS_TIERS))
    productivity_bonus = round_half_up(base_pay * _bonus_fraction(score, PRODUCTIVITY_BONUS_TIERS))
    quality_bonus = round_half_up(base_pay * _bonus_fraction(avg_quality, QUALITY_BONUS_TIERS))

    return PaymentCalculation(
        employee_id=employee_id,
        employee_name=employee.name,
        period=period,
        base_pay=base_pay,
        attendance_bonus=attendance_bonus,
        productivity_bonus=productivity_bonus,
        quality_bonus=quality_bonus,
        total_pay=base_pay + attendance_bonus + productivity_bonus + quality_bonus,
        attendance_percentage=attendance_pct,
        productivity_score=score,
    )
