# services/capability_gate.py

"""
Capability gate: boolean answers to "may this principal do X?".

Never raises and never looks records up; existence is the caller's concern.
No profile means every answer is False.
"""

from typing import Optional

from models.access import AccessProfile
from models.enums import DataAccessTier


class CapabilityGate:

    def __init__(self, profile: Optional[AccessProfile]):
        self.profile = profile

    # -----------------------------------------------------
    # Work orders
    # -----------------------------------------------------
    def can_edit_work_order(self, work_order_id: str) -> bool:
        p = self.profile
        if p is None:
            return False
        if p.data_access_tier == DataAccessTier.all:
            return True
        if p.data_access_tier in (DataAccessTier.managed, DataAccessTier.assigned):
            return work_order_id in p.assigned_work_orders
        return False

    def can_approve_work_order(self, work_order_id: str) -> bool:
        p = self.profile
        if p is None or not p.can_approve:
            return False
        if p.data_access_tier == DataAccessTier.all:
            return True
        if p.data_access_tier == DataAccessTier.managed:
            return work_order_id in p.assigned_work_orders
        return False

    def can_submit_for_approval(self) -> bool:
        return self.profile is not None and self.profile.can_submit_for_approval

    # -----------------------------------------------------
    # Documents / users
    # -----------------------------------------------------
    def can_upload_document(self) -> bool:
        return self.profile is not None and self.profile.can_upload_documents

    def can_manage_users(self) -> bool:
        return self.profile is not None and self.profile.can_manage_users
