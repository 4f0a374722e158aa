# tests/test_metrics.py

"""
Tests for attendance, productivity and payroll calculations.
"""

import pytest

from core.errors import EmployeeNotFoundError
from services.metrics import (
    attendance_percentage,
    calculate_payment,
    days_in_month,
    monthly_attendance_report,
    payment_multiplier,
    productivity_report,
    productivity_score,
    weekly_attendance_report,
)


def _mark_present(store, employee_id, days, month="2024-03"):
    for day in days:
        store.mark_attendance({
            "employeeId": employee_id,
            "date": f"{month}-{day:02d}",
            "status": "Present",
            "markedBy": "U2",
        })


def _record_work(store, employee_id, day, hours=8, quality=9, efficiency=90, tasks=2):
    store.record_productivity({
        "employeeId": employee_id,
        "date": day,
        "hoursWorked": hours,
        "tasksCompleted": tasks,
        "qualityScore": quality,
        "efficiency": efficiency,
        "recordedBy": "U2",
    })


# -------------------------------------------------
# Pure calculations
# -------------------------------------------------
def test_attendance_percentage_rounds_half_up():
    assert attendance_percentage(20, 31) == 65
    assert attendance_percentage(1, 8) == 13
    assert attendance_percentage(0, 0) == 0


def test_productivity_score():
    assert productivity_score(8, 9, 90) == 93
    assert productivity_score(0, 0, 0) == 0
    assert productivity_score(4, 5, 50) == 50


@pytest.mark.parametrize("score, expected", [
    (95, 1.2),
    (90, 1.2),
    (89, 1.1),
    (80, 1.1),
    (70, 1.0),
    (65, 0.95),
    (60, 0.95),
    (59, 0.8),
    (0, 0.8),
])
def test_payment_multiplier_thresholds(score, expected):
    assert payment_multiplier(score) == expected


def test_days_in_month():
    assert days_in_month("2024-03") == 31
    assert days_in_month("2024-02") == 29
    assert days_in_month("2023-02") == 28


# -------------------------------------------------
# Attendance reports
# -------------------------------------------------
def test_monthly_attendance_report(store):
    _mark_present(store, "U3", range(1, 21))
    store.mark_attendance({"employeeId": "U3", "date": "2024-03-21", "status": "Absent", "markedBy": "U2"})

    reports = {r.employee_id: r for r in monthly_attendance_report(store, "2024-03")}

    assert set(reports) == {"U2", "U3", "U4", "U5"}
    carla = reports["U3"]
    assert carla.employee_name == "Carla Nguyen"
    assert (carla.total_days, carla.present_days, carla.absent_days) == (31, 20, 1)
    assert carla.attendance_percentage == 65
    assert reports["U4"].attendance_percentage == 0


def test_weekly_attendance_report(store):
    _mark_present(store, "U4", range(4, 9))
    _mark_present(store, "U4", [11])  # outside the week

    report = next(r for r in weekly_attendance_report(store, "2024-03-04") if r.employee_id == "U4")

    assert report.week_end == "2024-03-10"
    assert report.total_days == 7
    assert report.present_days == 5
    assert report.attendance_percentage == 71


# -------------------------------------------------
# Productivity report
# -------------------------------------------------
def test_monthly_productivity_report(store):
    _record_work(store, "U3", "2024-03-04", hours=8, quality=9, efficiency=90, tasks=3)
    _record_work(store, "U3", "2024-03-05", hours=7, quality=8, efficiency=85, tasks=2)
    _record_work(store, "U3", "2024-04-01", hours=1, quality=1, efficiency=10)

    report = next(r for r in productivity_report(store, "2024-03") if r.employee_id == "U3")

    assert report.average_hours_worked == 7.5
    assert report.average_quality_score == 8.5
    assert report.average_efficiency == 87.5
    assert report.total_tasks_completed == 5
    # (7.5/8*0.3 + 8.5/10*0.4 + 87.5/100*0.3) * 100 = 88.375
    assert report.productivity_score == 88
    assert report.payment_multiplier == 1.1


def test_report_averages_round_to_two_decimals(store):
    for day, hours in (("2024-03-04", 7), ("2024-03-05", 8), ("2024-03-06", 8)):
        _record_work(store, "U3", day, hours=hours)

    report = next(r for r in productivity_report(store, "2024-03") if r.employee_id == "U3")
    assert report.average_hours_worked == 7.67


def test_weekly_productivity_report(store):
    _record_work(store, "U4", "2024-03-04")
    _record_work(store, "U4", "2024-03-12")

    report = next(r for r in productivity_report(store, "2024-03-04", type="weekly") if r.employee_id == "U4")

    assert report.period == "2024-03-04"
    assert report.total_tasks_completed == 2


def test_employee_without_records_scores_zero(store):
    report = next(r for r in productivity_report(store, "2024-03") if r.employee_id == "U5")

    assert report.productivity_score == 0
    assert report.payment_multiplier == 0.8


def test_productivity_report_rejects_unknown_type(store):
    with pytest.raises(ValueError):
        productivity_report(store, "2024-03", type="daily")


# -------------------------------------------------
# Payroll
# -------------------------------------------------
def test_calculate_payment(store):
    _mark_present(store, "U3", range(1, 21))
    _record_work(store, "U3", "2024-03-04")

    payment = calculate_payment(store, "U3", "2024-03")

    assert payment.base_pay == 1000
    assert payment.attendance_percentage == 65
    assert payment.attendance_bonus == 0
    assert payment.productivity_score == 93
    assert payment.productivity_bonus == 150
    assert payment.quality_bonus == 100
    assert payment.total_pay == 1250


def test_payment_bonuses_rounded_independently(store):
    _mark_present(store, "U3", range(1, 31))
    _record_work(store, "U3", "2024-03-04")

    payment = calculate_payment(store, "U3", "2024-03", base_pay=1234.5)

    assert payment.attendance_percentage == 97
    assert payment.attendance_bonus == 123
    assert payment.productivity_bonus == 185
    assert payment.quality_bonus == 123
    assert payment.total_pay == 1234.5 + 123 + 185 + 123


def test_payment_is_deterministic(store):
    _mark_present(store, "U4", range(1, 29))
    _record_work(store, "U4", "2024-03-04", quality=8, efficiency=80)

    first = calculate_payment(store, "U4", "2024-03", base_pay=1500)
    second = calculate_payment(store, "U4", "2024-03", base_pay=1500)

    assert first == second
    assert first.model_dump() == second.model_dump()


def test_unknown_employee_raises(store):
    with pytest.raises(EmployeeNotFoundError) as exc_info:
        calculate_payment(store, "U404", "2024-03")

    assert exc_info.value.employee_id == "U404"
    assert isinstance(exc_info.value, LookupError)
