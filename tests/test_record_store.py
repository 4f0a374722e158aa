# tests/test_record_store.py

"""
Tests for the record store: seeding, ID generation, mutations and persistence.
"""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
from unittest.mock import patch

from core.errors import WriteError
from core.storage import JsonFileStorage, MemoryStorage
from models.enums import VariationStatus, WorkOrderStatus
from services.record_store import RecordStore, next_sequential_id
from seed import load_seed


def _work_order(title="Replace filter", assigned_to="U3", created_by="U2"):
    return {"title": title, "assignedTo": assigned_to, "createdBy": created_by, "priority": "Medium"}


def _variation(job_id, cost=100):
    return {
        "jobId": job_id,
        "title": f"Extra work on {job_id}",
        "requestedBy": "U3",
        "originalCost": 1000,
        "variationCost": cost,
        "originalDuration": 4,
        "additionalDuration": 2,
    }


# -------------------------------------------------
# Cold start
# -------------------------------------------------
def test_init_seeds_and_persists_missing_collections(storage):
    store = RecordStore(storage).init()

    assert store.initialized
    assert [w.id for w in store.work_orders()] == ["WO0001", "WO0002", "WO0003", "WO0004", "WO0006"]
    assert len(json.loads(storage.read("maintdesk_work_orders"))) == 5
    assert json.loads(storage.read("maintdesk_attendance")) == []


def test_persisted_rows_use_camel_case_keys(store, storage):
    row = json.loads(storage.read("maintdesk_work_orders"))[0]
    assert row["assignedTo"] == "U3"
    assert "assigned_to" not in row


def test_init_loads_previously_persisted_state(storage):
    storage.write_json("maintdesk_sites", [{"id": "S900", "name": "Depot", "address": "1 Road", "type": "Industrial"}])

    store = RecordStore(storage).init()

    assert [s.id for s in store.sites()] == ["S900"]


def test_corrupt_json_falls_back_to_seed_without_overwriting(storage):
    storage.write("maintdesk_work_orders", "{not json")

    store = RecordStore(storage).init()

    assert len(store.work_orders()) == len(load_seed("work_orders"))
    assert storage.read("maintdesk_work_orders") == "{not json"


def test_non_list_json_falls_back_to_seed(storage):
    storage.write_json("maintdesk_documents", {"id": "DOC001"})

    store = RecordStore(storage).init()

    assert [d.id for d in store.documents()] == ["DOC001", "DOC002", "DOC003"]
    assert json.loads(storage.read("maintdesk_documents")) == {"id": "DOC001"}


def test_unreadable_collection_uses_seed_without_overwriting(tmp_path):
    storage = JsonFileStorage(tmp_path)
    RecordStore(storage).init().update_work_order("WO0001", {"notes": "precious"})
    path = tmp_path / "maintdesk_work_orders.json"
    saved = path.read_text(encoding="utf-8")

    real_read_text = Path.read_text

    def read_text(self, *args, **kwargs):
        if self.name == path.name:
            raise PermissionError(13, "Permission denied", str(self))
        return real_read_text(self, *args, **kwargs)

    with patch.object(Path, "read_text", autospec=True, side_effect=read_text):
        store = RecordStore(storage).init()

    assert store.get_work_order("WO0001").notes == ""
    assert len(store.sites()) == len(load_seed("sites"))
    assert path.read_text(encoding="utf-8") == saved
    assert json.loads(saved)[0]["notes"] == "precious"


def test_init_accepts_explicit_seed(storage):
    store = RecordStore(storage).init({"work_orders": []})
    assert store.work_orders() == []
    assert len(store.users()) == 5


# -------------------------------------------------
# ID generation
# -------------------------------------------------
def test_next_sequential_id_skips_taken_ids():
    assert next_sequential_id(["WO0001", "WO0005"], "WO", 4, 3) == "WO0003"
    assert next_sequential_id(["WO0001", "WO0002"], "WO", 4, 2) == "WO0003"


def test_generated_work_order_ids_never_collide(storage):
    store = RecordStore(storage).init({
        "work_orders": [
            {**load_seed("work_orders")[0], "id": "WO0001"},
            {**load_seed("work_orders")[1], "id": "WO0005"},
        ]
    })

    created = [store.create_work_order(_work_order(title=f"Job {i}")).id for i in range(5)]

    assert len(set(created)) == 5
    assert not {"WO0001", "WO0005"} & set(created)


def test_first_generated_id_after_seed(store):
    # five seeded work orders, WO0006 taken, so the probe lands on WO0007
    assert store.create_work_order(_work_order()).id == "WO0007"


# -------------------------------------------------
# Work orders
# -------------------------------------------------
def test_create_work_order_prepends_and_starts_pending(store, storage):
    wo = store.create_work_order(_work_order(title="  Gutter clean  "))

    assert wo.status == WorkOrderStatus.pending
    assert wo.title == "Gutter clean"
    assert wo.progress == 0
    assert store.work_orders()[0].id == wo.id
    assert json.loads(storage.read("maintdesk_work_orders"))[0]["id"] == wo.id


def test_update_work_order_applies_changes(store):
    updated = store.update_work_order("WO0002", {"status": "In Progress", "progress": 25})

    assert updated.status == WorkOrderStatus.in_progress
    assert updated.progress == 25
    assert updated.updated_at != "2024-03-01T08:15:00.000Z"
    assert store.get_work_order("WO0002") == updated
    assert [w.id for w in store.work_orders()][1] == "WO0002"


def test_update_missing_work_order_returns_none(store):
    assert store.update_work_order("WO9999", {"progress": 10}) is None


def test_work_order_queries(store):
    assert [w.id for w in store.work_orders_by_assignee("U3")] == ["WO0001", "WO0003", "WO0006"]
    assert [w.id for w in store.work_orders_by_status("Pending")] == ["WO0002", "WO0006"]
    assert [w.id for w in store.work_orders_by_priority("Urgent")] == ["WO0002"]


def test_get_by_id_and_records(store):
    assert store.get_by_id("assets", "AST003").name == "Forklift FL-3"
    assert store.get_by_id("assets", "AST999") is None
    assert len(store.records("costs")) == 5

    with pytest.raises(ValueError):
        store.records("quotes")


def test_records_returns_a_copy(store):
    items = store.work_orders()
    items.clear()
    assert len(store.work_orders()) == 5


# -------------------------------------------------
# Variations
# -------------------------------------------------
def test_variation_versions_are_monotonic_per_job(store):
    versions = []
    for _ in range(3):
        versions.append(store.create_variation(_variation("WO0002")).version)
        store.create_variation(_variation("WO0006"))

    assert versions == [1, 2, 3]
    assert [v.version for v in store.variations_by_job("WO0006")] == [3, 2, 1]


def test_variation_version_continues_from_existing(store):
    # VAR001 already holds version 1 for WO0001
    assert store.create_variation(_variation("WO0001")).version == 2


def test_variation_totals_and_defaults(store):
    variation = store.create_variation(_variation("WO0002", cost=250))

    assert variation.id == "VAR003"
    assert variation.status == VariationStatus.pending
    assert variation.total_cost == 1250
    assert variation.total_duration == 6
    assert store.variations()[0].id == "VAR003"


def test_update_variation_status_stamps_approval(store):
    updated = store.update_variation_status({
        "id": "VAR001",
        "status": "Approved",
        "approvedBy": "U2",
        "approvalDate": "2024-03-06T09:00:00.000Z",
    })

    assert updated.status == VariationStatus.approved
    assert updated.approved_by == "U2"
    assert updated.total_cost == 3050
    assert store.update_variation_status({"id": "VAR999", "status": "Rejected"}) is None


# -------------------------------------------------
# Documents
# -------------------------------------------------
def test_create_document_links_and_prepends(store):
    doc = store.create_document({
        "name": "photo.jpg",
        "uploadedBy": "U3",
        "jobId": "WO0001",
        "tags": "site, before",
    })

    assert doc.id == "DOC004"
    assert doc.asset_id == ""
    assert doc.tags == ["site", "before"]
    assert [d.id for d in store.documents_by_job("WO0001")] == ["DOC004", "DOC001"]
    assert [d.id for d in store.documents_by_asset("AST004")] == ["DOC003"]


# -------------------------------------------------
# Attendance / productivity
# -------------------------------------------------
def test_mark_attendance_is_idempotent_per_day(store):
    first = store.mark_attendance({"employeeId": "U3", "date": "2024-03-04", "status": "Present", "markedBy": "U2"})
    second = store.mark_attendance({"employeeId": "U3", "date": "2024-03-04", "status": "Absent", "markedBy": "U2"})

    assert first.id.startswith("ATT-")
    assert second.id == first.id
    assert len(store.attendance_by_employee("U3")) == 1
    assert store.attendance_by_date("2024-03-04")[0].status == "Absent"


def test_new_attendance_records_are_prepended(store):
    store.mark_attendance({"employeeId": "U3", "date": "2024-03-04", "status": "Present", "markedBy": "U2"})
    store.mark_attendance({"employeeId": "U4", "date": "2024-03-04", "status": "Present", "markedBy": "U2"})

    assert [r.employee_id for r in store.attendance_records()] == ["U4", "U3"]
    assert len(store.attendance_by_month("2024-03")) == 2
    assert store.attendance_by_month("2024-04") == []


def test_mark_attendance_rejects_bad_date(store):
    with pytest.raises(ValueError):
        store.mark_attendance({"employeeId": "U3", "date": "04/03/2024", "status": "Present", "markedBy": "U2"})


def test_record_productivity_appends_and_overwrites(store):
    base = {"hoursWorked": 8, "tasksCompleted": 3, "qualityScore": 8, "efficiency": 90, "recordedBy": "U2"}
    first = store.record_productivity({**base, "employeeId": "U3", "date": "2024-03-04"})
    store.record_productivity({**base, "employeeId": "U4", "date": "2024-03-04"})
    again = store.record_productivity({**base, "employeeId": "U3", "date": "2024-03-04", "tasksCompleted": 5})

    assert first.id.startswith("PROD-")
    assert again.id == first.id
    assert [r.employee_id for r in store.productivity_records()] == ["U3", "U4"]
    assert store.productivity_by_employee("U3")[0].tasks_completed == 5
    assert len(store.productivity_by_date("2024-03-04")) == 2


# -------------------------------------------------
# Persistence failures
# -------------------------------------------------
def test_write_failure_keeps_in_memory_change(store, storage):
    failure = WriteError(key="maintdesk_work_orders", message="disk full")

    with patch.object(storage, "write_json", return_value=failure):
        wo = store.create_work_order(_work_order())

    assert store.get_work_order(wo.id) is not None
    assert store.last_write_error == failure
    assert wo.id not in storage.read("maintdesk_work_orders")


def test_shutdown_flushes_and_closes(storage):
    store = RecordStore(storage).init()
    results = store.shutdown()

    assert len(results) == len(store.collection_names)
    assert not store.initialized


# -------------------------------------------------
# Derived totals
# -------------------------------------------------
def test_total_cost_by_job(store):
    assert store.total_cost_by_job("WO0001") == {"estimated": 1800, "actual": 1430}
    assert store.total_cost_by_job("WO0006") == {"estimated": 0, "actual": 0}


def test_overdue_maintenance(store):
    now = datetime(2024, 6, 1, tzinfo=timezone.utc)
    assert [m.id for m in store.overdue_maintenance(now)] == ["MS001"]


def test_dashboard_stats(store):
    stats = store.dashboard_stats(now=datetime(2024, 6, 1, tzinfo=timezone.utc))

    assert stats["jobs"] == {
        "total": 5,
        "completed": 1,
        "in_progress": 1,
        "pending": 2,
        "urgent": 1,
        "completion_rate": 20,
    }
    assert stats["assets"] == {"total": 4, "operational": 3, "under_maintenance": 1}
    assert stats["maintenance"] == {"overdue": 1, "scheduled": 2}
    assert stats["costs"]["total"] == 3100
    assert stats["costs"]["estimated"] == 3650
    assert stats["costs"]["variance"] == -550
    assert stats["costs"]["variance_percentage"] == -15


def test_employees_are_contractors_and_managers(store):
    assert [u.id for u in store.employees()] == ["U2", "U3", "U4", "U5"]
    assert [u.id for u in store.users_by_role("Manager")] == ["U2", "U5"]
    assert [a.id for a in store.assets_by_site("S002")] == ["AST003", "AST004"]
    assert [a.id for a in store.assets_by_status("Under Maintenance")] == ["AST002"]
