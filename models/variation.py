# models/variation.py

from typing import Optional
from pydantic import Field

from .base import RecordModel
from .enums import VariationStatus


class Variation(RecordModel):
    """
    A change request against a work order.

    ``version`` counts variations per job starting at 1. Totals are
    ``original + delta`` and are fixed at creation; only a status decision
    touches the record afterwards.
    """
    id: str
    job_id: str
    title: str
    description: str = ""
    type: Optional[str] = None
    status: VariationStatus = VariationStatus.pending
    requested_by: str
    approved_by: Optional[str] = None
    request_date: str
    approval_date: Optional[str] = None
    original_cost: float = 0
    variation_cost: float = 0
    total_cost: float = 0
    original_duration: float = 0
    additional_duration: float = 0
    total_duration: float = 0
    reason: str = ""
    impact: str = ""
    version: int = Field(1, ge=1)


class VariationCreate(RecordModel):
    job_id: str
    title: str = Field(..., min_length=1)
    description: str = ""
    type: Optional[str] = None
    requested_by: str
    original_cost: float = 0
    variation_cost: float = 0
    original_duration: float = 0
    additional_duration: float = 0
    reason: str = ""
    impact: str = ""


class VariationDecision(RecordModel):
    """Full status update: the only mutation a stored variation accepts."""
    id: str
    status: VariationStatus
    approved_by: Optional[str] = None
    approval_date: Optional[str] = None
