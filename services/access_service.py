# services/access_service.py

"""
Scoped data access: the surface the workflow/UI layer calls.

``AccessService.for_principal(user)`` resolves the principal's profile once
and returns a ``PrincipalScope`` that:
  • lists only the records the profile may see
  • runs mutations through the capability gate and the record store
  • appends an audit entry for every privileged action, including denials

Denied operations return None after recording ``access_denied``. Unknown
record IDs also return None but are not audited.
"""

from typing import Any, Dict, List, Optional, Union

from core.logging_config import logger
from core.utils import now_iso
from models.access import AccessProfile
from models.asset import Asset
from models.document import Document, DocumentCreate
from models.enums import ResourceType, VariationStatus, WorkOrderStatus
from models.user import CurrentUser
from models.variation import Variation, VariationCreate, VariationDecision
from models.work_order import WorkOrder, WorkOrderUpdate
from services import audit_events
from services.access_policy import AccessPolicyResolver
from services.audit_logger import AuditLogger
from services.capability_gate import CapabilityGate
from services.record_store import RecordStore
from services.resource_filter import (
    can_view,
    filter_assets,
    filter_documents,
    filter_variations,
    filter_work_orders,
)

# Work order fields owned by submit / approve / reject
WORKFLOW_FIELDS = frozenset({"status", "completed_date"})


class AccessService:
    """Binds the store, resolver and audit trail; hands out per-principal scopes."""

    def __init__(self, store: RecordStore, resolver: AccessPolicyResolver, audit: AuditLogger):
        self.store = store
        self.resolver = resolver
        self.audit = audit

    def for_principal(self, user: CurrentUser) -> "PrincipalScope":
        profile = self.resolver.resolve(user.email)
        if profile is None:
            logger.warning(f"No access profile for {user.email}; all access denied")
        return PrincipalScope(self, user, profile)


class PrincipalScope:

    def __init__(self, service: AccessService, user: CurrentUser, profile: Optional[AccessProfile]):
        self._store = service.store
        self._audit = service.audit
        self.user = user
        self.profile = profile
        self.gate = CapabilityGate(profile)

    def _deny(self, resource_type: ResourceType, resource_id: str, reason: str) -> None:
        audit_events.log_access_denied(self._audit, self.user, resource_type, resource_id, reason)
        logger.info(f"Access denied: {self.user.email} on {resource_type.value}/{resource_id} ({reason})")
        return None

    # =====================================================
    # VISIBLE COLLECTIONS
    # =====================================================
    def work_orders(self) -> List[WorkOrder]:
        return filter_work_orders(self.profile, self._store.work_orders())

    def assets(self) -> List[Asset]:
        return filter_assets(self.profile, self._store.assets())

    def documents(self) -> List[Document]:
        return filter_documents(self.profile, self._store.documents())

    def variations(self) -> List[Variation]:
        return filter_variations(self.profile, self._store.variations())

    # =====================================================
    # READS
    # =====================================================
    def view_work_order(self, work_order_id: str) -> Optional[WorkOrder]:
        work_order = self._store.get_work_order(work_order_id)
        if work_order is None:
            return None
        if not can_view(self.profile, ResourceType.work_order, work_order):
            return self._deny(ResourceType.work_order, work_order_id, "Work order is outside the principal's scope")
        audit_events.log_work_order_view(self._audit, self.user, work_order_id)
        return work_order

    def view_dashboard(self) -> Optional[Dict[str, Dict[str, float]]]:
        if self.profile is None:
            return self._deny(ResourceType.dashboard, "main", "No access profile")
        audit_events.log_dashboard_view(self._audit, self.user)
        return self._store.dashboard_stats()

    # =====================================================
    # WORK ORDER MUTATIONS
    # =====================================================
    def update_work_order(
        self, work_order_id: str, changes: Union[WorkOrderUpdate, Dict[str, Any]]
    ) -> Optional[WorkOrder]:
        """
        Edit the descriptive fields of a work order.

        ``status`` and ``completed_date`` belong to the approval workflow and
        are refused here; use submit, approve or reject instead.
        """
        if not self.gate.can_edit_work_order(work_order_id):
            return self._deny(ResourceType.work_order, work_order_id, "Not permitted to edit this work order")

        update = changes if isinstance(changes, WorkOrderUpdate) else WorkOrderUpdate.model_validate(changes)
        workflow_fields = sorted(WORKFLOW_FIELDS & update.model_fields_set)
        if workflow_fields:
            return self._deny(
                ResourceType.work_order,
                work_order_id,
                f"{', '.join(workflow_fields)} can only change through submit, approve or reject",
            )

        updated = self._store.update_work_order(work_order_id, update)
        if updated is None:
            return None
        audit_events.log_work_order_update(
            self._audit, self.user, work_order_id, update.model_dump(mode="json", by_alias=True, exclude_unset=True)
        )
        return updated

    def submit_for_approval(self, work_order_id: str) -> Optional[WorkOrder]:
        if not (self.gate.can_submit_for_approval() and self.gate.can_edit_work_order(work_order_id)):
            return self._deny(ResourceType.work_order, work_order_id, "Not permitted to submit this work order")

        updated = self._store.update_work_order(
            work_order_id, WorkOrderUpdate(status=WorkOrderStatus.pending_approval)
        )
        if updated is None:
            return None
        audit_events.log_work_order_submission(self._audit, self.user, work_order_id)
        return updated

    def approve_work_order(self, work_order_id: str, comments: Optional[str] = None) -> Optional[WorkOrder]:
        if not self.gate.can_approve_work_order(work_order_id):
            return self._deny(ResourceType.work_order, work_order_id, "Not permitted to approve this work order")

        updated = self._store.update_work_order(
            work_order_id,
            WorkOrderUpdate(status=WorkOrderStatus.complete, completed_date=now_iso(), progress=100),
        )
        if updated is None:
            return None
        audit_events.log_work_order_approval(self._audit, self.user, work_order_id, comments)
        return updated

    def reject_work_order(self, work_order_id: str, reason: str) -> Optional[WorkOrder]:
        if not self.gate.can_approve_work_order(work_order_id):
            return self._deny(ResourceType.work_order, work_order_id, "Not permitted to reject this work order")

        updated = self._store.update_work_order(work_order_id, WorkOrderUpdate(status=WorkOrderStatus.rejected))
        if updated is None:
            return None
        audit_events.log_work_order_rejection(self._audit, self.user, work_order_id, reason)
        return updated

    # =====================================================
    # DOCUMENTS
    # =====================================================
    def upload_document(self, data: Union[DocumentCreate, Dict[str, Any]]) -> Optional[Document]:
        """Create a document owned by the principal."""
        if not self.gate.can_upload_document():
            return self._deny(ResourceType.document, "new", "Not permitted to upload documents")

        if isinstance(data, DocumentCreate):
            payload = data.model_copy(update={"uploaded_by": self.user.id})
        else:
            payload = DocumentCreate.model_validate(
                {**{k: v for k, v in data.items() if k not in ("uploadedBy", "uploaded_by")}, "uploaded_by": self.user.id}
            )

        document = self._store.create_document(payload)
        audit_events.log_document_upload(self._audit, self.user, document.id, document.name)
        return document

    # =====================================================
    # VARIATIONS
    # =====================================================
    def request_variation(self, data: Union[VariationCreate, Dict[str, Any]]) -> Optional[Variation]:
        """Raise a variation against a work order the principal can see."""
        if isinstance(data, VariationCreate):
            payload = data.model_copy(update={"requested_by": self.user.id})
        else:
            payload = VariationCreate.model_validate(
                {**{k: v for k, v in data.items() if k not in ("requestedBy", "requested_by")}, "requested_by": self.user.id}
            )

        work_order = self._store.get_work_order(payload.job_id)
        if work_order is None:
            return None
        if not can_view(self.profile, ResourceType.work_order, work_order):
            return self._deny(ResourceType.variation, payload.job_id, "Work order is outside the principal's scope")

        variation = self._store.create_variation(payload)
        self._audit.log({
            "user_id": self.user.id,
            "user_email": self.user.email,
            "user_name": self.user.name,
            "action": "create",
            "resource_type": ResourceType.variation,
            "resource_id": variation.id,
            "details": {"fields": {"jobId": variation.job_id, "version": variation.version}},
        })
        return variation

    def decide_variation(
        self,
        variation_id: str,
        approve: bool,
        comments: Optional[str] = None,
    ) -> Optional[Variation]:
        """Approve or reject a visible variation. ``comments`` doubles as the rejection reason."""
        variation = self._store.get_variation(variation_id)
        if variation is None:
            return None
        if not (
            self.profile is not None
            and self.profile.can_approve
            and can_view(self.profile, ResourceType.variation, variation)
        ):
            return self._deny(ResourceType.variation, variation_id, "Not permitted to decide this variation")

        updated = self._store.update_variation_status(VariationDecision(
            id=variation_id,
            status=VariationStatus.approved if approve else VariationStatus.rejected,
            approved_by=self.user.id,
            approval_date=now_iso(),
        ))
        if updated is None:
            return None

        self._audit.log({
            "user_id": self.user.id,
            "user_email": self.user.email,
            "user_name": self.user.name,
            "action": "approve" if approve else "reject",
            "resource_type": ResourceType.variation,
            "resource_id": variation_id,
            "details": {"comments": comments} if approve else {"reason": comments or ""},
        })
        return updated
