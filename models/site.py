# models/site.py

from typing import List, Optional

from .base import RecordModel


class Site(RecordModel):
    id: str
    name: str
    address: Optional[str] = None
    type: Optional[str] = None
    buildings: List[str] = []
    manager: Optional[str] = None
    status: str = "Active"
    operating_hours: Optional[str] = None
    emergency_contact: Optional[str] = None
