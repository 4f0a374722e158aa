# models/maintenance.py

from datetime import datetime, timezone
from typing import Optional

from .base import RecordModel


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class MaintenanceSchedule(RecordModel):
    """Recurring preventive maintenance for an asset."""
    id: str
    name: str
    description: str = ""
    asset_id: str
    frequency: Optional[str] = None
    interval: int = 1
    interval_unit: Optional[str] = None
    last_completed: Optional[str] = None
    next_due: str
    assigned_team: Optional[str] = None
    estimated_duration: float = 0
    priority: Optional[str] = None
    status: str = "Active"
    auto_generate: bool = False
    checklist_template: Optional[str] = None

    def is_overdue(self, now: datetime) -> bool:
        """Due strictly before ``now`` and not already completed."""
        if self.status == "Completed":
            return False
        next_due = datetime.fromisoformat(self.next_due.replace("Z", "+00:00"))
        return _naive_utc(next_due) < _naive_utc(now)
