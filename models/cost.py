# models/cost.py

from typing import Optional

from .base import RecordModel


class CostEntry(RecordModel):
    """A labour/material/equipment line booked against a work order."""
    id: str
    job_id: str
    type: str
    description: str = ""
    estimated_cost: float = 0
    actual_cost: float = 0
    quantity: float = 1
    unit_cost: float = 0
    unit: Optional[str] = None
    supplier: Optional[str] = None
    date: Optional[str] = None
    invoice_number: Optional[str] = None
    status: str = "Pending"
