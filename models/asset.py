# models/asset.py

from typing import List, Optional

from .base import RecordModel


class Asset(RecordModel):
    """
    Physical equipment tracked by the maintenance team.
    ``site`` is the owning relation used for site queries.
    """
    id: str
    name: str
    type: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    serial_number: Optional[str] = None
    location: Optional[str] = None
    site: str
    status: str = "Operational"
    condition: Optional[str] = None
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    installation_date: Optional[str] = None
    warranty_expiry: Optional[str] = None
    purchase_price: float = 0
    current_value: float = 0
    last_service_date: Optional[str] = None
    next_service_date: Optional[str] = None
    maintenance_history: List[str] = []
    created_at: Optional[str] = None
