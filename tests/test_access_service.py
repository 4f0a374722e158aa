# tests/test_access_service.py

"""
Tests for the principal-scoped access service: filtering, gating and auditing.
"""

import pytest
from pydantic import ValidationError

from models.enums import AuditAction, ResourceType, VariationStatus, WorkOrderStatus
from models.work_order import WorkOrderUpdate


def _last(audit):
    return audit.get_logs(limit=1)[0]


# -------------------------------------------------
# Visible collections
# -------------------------------------------------
def test_scope_lists_only_visible_records(access_service, manager_user):
    scope = access_service.for_principal(manager_user)

    assert [w.id for w in scope.work_orders()] == ["WO0001", "WO0003", "WO0006"]
    assert [a.id for a in scope.assets()] == ["AST001", "AST002"]
    assert [d.id for d in scope.documents()] == ["DOC001", "DOC002"]
    assert [v.id for v in scope.variations()] == ["VAR001"]


def test_unknown_principal_sees_nothing(access_service, unknown_user, audit):
    scope = access_service.for_principal(unknown_user)

    assert scope.profile is None
    assert scope.work_orders() == []
    assert scope.documents() == []
    assert scope.view_dashboard() is None
    assert _last(audit).action == AuditAction.access_denied


# -------------------------------------------------
# Reads
# -------------------------------------------------
def test_view_visible_work_order_is_audited(access_service, contractor_user, audit):
    work_order = access_service.for_principal(contractor_user).view_work_order("WO0001")

    assert work_order.id == "WO0001"
    entry = _last(audit)
    assert entry.action == AuditAction.view
    assert entry.resource_id == "WO0001"
    assert entry.user_name == "Carla Nguyen"


def test_view_hidden_work_order_is_denied(access_service, contractor_user, audit):
    assert access_service.for_principal(contractor_user).view_work_order("WO0002") is None

    entry = _last(audit)
    assert entry.action == AuditAction.access_denied
    assert entry.resource_type == ResourceType.work_order
    assert entry.details.reason


def test_view_missing_work_order_is_not_audited(access_service, contractor_user, audit):
    assert access_service.for_principal(contractor_user).view_work_order("WO9999") is None
    assert len(audit) == 0


def test_view_dashboard(access_service, admin_user, audit):
    stats = access_service.for_principal(admin_user).view_dashboard()

    assert stats["jobs"]["total"] == 5
    assert _last(audit).resource_type == ResourceType.dashboard


# -------------------------------------------------
# Work order mutations
# -------------------------------------------------
def test_update_allow_listed_work_order(access_service, contractor_user, audit, store):
    updated = access_service.for_principal(contractor_user).update_work_order("WO0001", {"progress": 75, "notes": "Fan ordered"})

    assert updated.progress == 75
    assert store.get_work_order("WO0001").notes == "Fan ordered"
    entry = _last(audit)
    assert entry.action == AuditAction.update
    assert entry.details.changes == {"progress": 75, "notes": "Fan ordered"}


def test_update_visible_but_not_allow_listed_is_denied(access_service, contractor_user, audit, store):
    assert access_service.for_principal(contractor_user).update_work_order("WO0006", {"progress": 10}) is None

    assert store.get_work_order("WO0006").progress == 0
    assert _last(audit).action == AuditAction.access_denied


@pytest.mark.parametrize("changes", [
    {"status": "Complete"},
    {"status": "Rejected"},
    {"status": "Pending Approval", "progress": 90},
    {"completedDate": "2024-03-20T10:00:00.000Z"},
])
def test_update_cannot_change_workflow_fields(access_service, contractor_user, audit, store, changes):
    before = store.get_work_order("WO0001")

    assert access_service.for_principal(contractor_user).update_work_order("WO0001", changes) is None

    after = store.get_work_order("WO0001")
    assert after.status == before.status == WorkOrderStatus.in_progress
    assert after.completed_date == before.completed_date
    assert after.progress == before.progress
    entry = _last(audit)
    assert entry.action == AuditAction.access_denied
    assert "approve" in entry.details.reason


def test_admin_update_cannot_complete_work_order(access_service, admin_user, store):
    scope = access_service.for_principal(admin_user)

    assert scope.update_work_order("WO0006", WorkOrderUpdate(status=WorkOrderStatus.complete)) is None
    assert store.get_work_order("WO0006").status != WorkOrderStatus.complete


def test_denied_update_is_audited_before_payload_validation(access_service, contractor_user, audit):
    result = access_service.for_principal(contractor_user).update_work_order("WO0006", {"progress": "lots"})

    assert result is None
    assert _last(audit).action == AuditAction.access_denied


def test_allowed_update_still_validates_payload(access_service, contractor_user):
    with pytest.raises(ValidationError):
        access_service.for_principal(contractor_user).update_work_order("WO0001", {"progress": 250})


def test_submit_for_approval(access_service, contractor_user, audit):
    updated = access_service.for_principal(contractor_user).submit_for_approval("WO0001")

    assert updated.status == WorkOrderStatus.pending_approval
    assert _last(audit).action == AuditAction.submit


def test_viewer_cannot_submit(access_service, viewer_user, audit):
    assert access_service.for_principal(viewer_user).submit_for_approval("WO0003") is None
    assert _last(audit).action == AuditAction.access_denied


def test_manager_approves_allow_listed_work_order(access_service, manager_user, audit):
    approved = access_service.for_principal(manager_user).approve_work_order("WO0001", comments="Good job")

    assert approved.status == WorkOrderStatus.complete
    assert approved.progress == 100
    assert approved.completed_date is not None
    entry = _last(audit)
    assert entry.action == AuditAction.approve
    assert entry.details.comments == "Good job"


def test_contractor_cannot_approve(access_service, contractor_user, audit, store):
    assert access_service.for_principal(contractor_user).approve_work_order("WO0001") is None

    assert store.get_work_order("WO0001").status == WorkOrderStatus.in_progress
    assert _last(audit).action == AuditAction.access_denied


def test_reject_work_order_records_reason(access_service, manager_user, audit):
    rejected = access_service.for_principal(manager_user).reject_work_order("WO0006", "Quote too high")

    assert rejected.status == WorkOrderStatus.rejected
    assert _last(audit).details.reason == "Quote too high"


# -------------------------------------------------
# Documents
# -------------------------------------------------
def test_upload_document_is_owned_by_principal(access_service, contractor_user, audit, store):
    document = access_service.for_principal(contractor_user).upload_document({
        "name": "after-photo.jpg",
        "uploadedBy": "U1",
        "jobId": "WO0001",
    })

    assert document.uploaded_by == "U3"
    assert store.documents()[0].id == document.id
    entry = _last(audit)
    assert entry.action == AuditAction.upload
    assert entry.details.file_name == "after-photo.jpg"


def test_upload_without_flag_is_denied(access_service, restricted_contractor, audit, store):
    assert access_service.for_principal(restricted_contractor).upload_document({"name": "x.pdf"}) is None

    assert len(store.documents()) == 3
    assert _last(audit).action == AuditAction.access_denied


# -------------------------------------------------
# Variations
# -------------------------------------------------
def test_request_variation_on_visible_work_order(access_service, contractor_user, audit):
    variation = access_service.for_principal(contractor_user).request_variation({
        "jobId": "WO0001",
        "title": "Extra sensor",
        "requestedBy": "U9",
        "originalCost": 1800,
        "variationCost": 200,
    })

    assert variation.requested_by == "U3"
    assert variation.version == 2
    assert variation.total_cost == 2000
    entry = _last(audit)
    assert entry.action == AuditAction.create
    assert entry.details.as_map() == {"fields": {"jobId": "WO0001", "version": 2}}


def test_request_variation_on_hidden_work_order_is_denied(access_service, restricted_contractor, audit, store):
    result = access_service.for_principal(restricted_contractor).request_variation({"jobId": "WO0001", "title": "Extra"})

    assert result is None
    assert len(store.variations()) == 2
    assert _last(audit).action == AuditAction.access_denied


def test_request_variation_on_missing_work_order(access_service, contractor_user):
    assert access_service.for_principal(contractor_user).request_variation({"jobId": "WO9999", "title": "Extra"}) is None


def test_manager_decides_visible_variation(access_service, manager_user, audit):
    decided = access_service.for_principal(manager_user).decide_variation("VAR001", approve=True, comments="OK")

    assert decided.status == VariationStatus.approved
    assert decided.approved_by == "U2"
    assert decided.approval_date is not None
    assert _last(audit).action == AuditAction.approve


def test_rejecting_variation_records_reason(access_service, manager_user, audit):
    decided = access_service.for_principal(manager_user).decide_variation("VAR001", approve=False, comments="Not needed")

    assert decided.status == VariationStatus.rejected
    assert _last(audit).details.reason == "Not needed"


def test_variation_decision_requires_approval_flag(access_service, contractor_user, audit, store):
    assert access_service.for_principal(contractor_user).decide_variation("VAR001", approve=True) is None

    assert store.get_variation("VAR001").status == VariationStatus.pending
    assert _last(audit).action == AuditAction.access_denied
