# models/work_order.py

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .base import RecordModel
from .enums import Priority, WorkOrderStatus


# -------------------------------------------------
# Stored work order (aka job)
# -------------------------------------------------
class WorkOrder(RecordModel):
    id: str
    title: str
    description: str = ""
    asset_id: Optional[str] = None
    assigned_to: str
    created_by: str
    priority: Priority = Priority.medium
    status: WorkOrderStatus = WorkOrderStatus.pending
    category: Optional[str] = None
    scheduled_date: Optional[str] = None
    due_date: Optional[str] = None
    completed_date: Optional[str] = None
    estimated_hours: float = 0
    actual_hours: float = 0
    estimated_cost: Optional[float] = None
    site: Optional[str] = None
    location: Optional[str] = None
    progress: int = 0
    checklist_id: Optional[str] = None
    attachments: List[str] = []
    notes: str = ""
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    created_at: str
    updated_at: str


# -------------------------------------------------
# Create Work Order
# -------------------------------------------------
class WorkOrderCreate(RecordModel):
    """
    Caller sends this when creating a work order.
    The store generates id, status, timestamps and progress.
    """
    title: str = Field(..., min_length=1)
    description: str = ""
    asset_id: Optional[str] = None
    assigned_to: str
    created_by: str
    priority: Priority = Priority.medium
    category: Optional[str] = None
    scheduled_date: Optional[str] = None
    due_date: Optional[str] = None
    estimated_hours: float = 0
    estimated_cost: Optional[float] = None
    site: Optional[str] = None
    location: Optional[str] = None
    checklist_id: Optional[str] = None
    attachments: Optional[List[str]] = None
    notes: Optional[str] = None

    @field_validator("title")
    def strip_title(cls, v):
        return v.strip()


# -------------------------------------------------
# Update Work Order (partial)
# -------------------------------------------------
class WorkOrderUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    priority: Optional[Priority] = None
    status: Optional[WorkOrderStatus] = None
    scheduled_date: Optional[str] = None
    due_date: Optional[str] = None
    completed_date: Optional[str] = None
    actual_hours: Optional[float] = None
    estimated_cost: Optional[float] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    checklist_id: Optional[str] = None
    attachments: Optional[List[str]] = None
    notes: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
