# models/workforce.py

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from .base import RecordModel
from .enums import AttendanceStatus


def _validate_day(v):
    if isinstance(v, date):
        return v.isoformat()
    if isinstance(v, str):
        date.fromisoformat(v)  # raises ValueError on bad input
        return v
    raise ValueError("date must be YYYY-MM-DD")


# -------------------------------------------------
# Attendance
# -------------------------------------------------
class AttendanceRecord(RecordModel):
    id: str
    employee_id: str
    date: str  # YYYY-MM-DD
    status: AttendanceStatus
    marked_by: str
    marked_at: str
    notes: Optional[str] = None


class AttendanceMark(RecordModel):
    employee_id: str
    date: str
    status: AttendanceStatus
    marked_by: str
    notes: Optional[str] = None

    @field_validator("date", mode="before")
    def validate_date(cls, v):
        return _validate_day(v)


# -------------------------------------------------
# Productivity
# -------------------------------------------------
class ProductivityRecord(RecordModel):
    id: str
    employee_id: str
    date: str
    hours_worked: float
    tasks_completed: int
    quality_score: float  # 1-10 scale
    efficiency: float  # percentage
    notes: Optional[str] = None
    recorded_by: str
    recorded_at: str


class ProductivityEntry(RecordModel):
    employee_id: str
    date: str
    hours_worked: float = Field(..., ge=0)
    tasks_completed: int = Field(0, ge=0)
    quality_score: float = Field(..., ge=0, le=10)
    efficiency: float = Field(..., ge=0)
    notes: Optional[str] = None
    recorded_by: str

    @field_validator("date", mode="before")
    def validate_date(cls, v):
        return _validate_day(v)


# -------------------------------------------------
# Derived reports (never persisted)
# -------------------------------------------------
class AttendanceReport(BaseModel):
    employee_id: str
    employee_name: str
    month: str  # YYYY-MM
    total_days: int
    present_days: int
    absent_days: int
    attendance_percentage: int


class WeeklyAttendanceReport(BaseModel):
    employee_id: str
    employee_name: str
    week_start: str
    week_end: str
    total_days: int
    present_days: int
    absent_days: int
    attendance_percentage: int


class ProductivityReport(BaseModel):
    employee_id: str
    employee_name: str
    period: str
    average_hours_worked: float
    total_tasks_completed: int
    average_quality_score: float
    average_efficiency: float
    productivity_score: int
    payment_multiplier: float


class PaymentCalculation(BaseModel):
    employee_id: str
    employee_name: str
    period: str
    base_pay: float
    attendance_bonus: int
    productivity_bonus: int
    quality_bonus: int
    total_pay: float
    attendance_percentage: int
    productivity_score: int
