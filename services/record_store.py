# services/record_store.py

"""
Record store: typed in-memory collections with write-through persistence.

Every mutation updates the in-memory list first and then re-serialises the
whole collection under its storage key. A failed write is logged and kept as
``last_write_error``; the in-memory change stands and is not retried.

Usage:
    store = RecordStore(MemoryStorage()).init()
    wo = store.create_work_order(WorkOrderCreate(...))
    store.work_orders_by_assignee("U3")
    store.shutdown()
"""

from datetime import datetime
from threading import RLock
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import ValidationError

from core.errors import StorageReadError, WriteError, WriteResult
from core.logging_config import logger
from core.storage import DurableStorage
from core.utils import now_iso, round_half_up, stamped_id, utc_now
from models.asset import Asset
from models.base import RecordModel
from models.cost import CostEntry
from models.document import Document, DocumentCreate
from models.enums import Priority, UserRole, VariationStatus, WorkOrderStatus
from models.maintenance import MaintenanceSchedule
from models.site import Site
from models.user import User
from models.variation import Variation, VariationCreate, VariationDecision
from models.work_order import WorkOrder, WorkOrderCreate, WorkOrderUpdate
from models.workforce import AttendanceMark, AttendanceRecord, ProductivityEntry, ProductivityRecord
from seed import load_seed

T = TypeVar("T", bound=RecordModel)

STORAGE_KEY_PREFIX = "maintdesk_"


# -----------------------------------------------------
# ID generation
# -----------------------------------------------------
def next_sequential_id(existing_ids: Iterable[str], prefix: str, width: int, start: int) -> str:
    """
    ``<prefix><counter zero-padded to width>`` starting at ``start``.
    Probes forward until the candidate is not already taken, so gaps and
    out-of-band IDs in the collection never cause a collision.
    """
    taken = set(existing_ids)
    counter = start
    candidate = f"{prefix}{counter:0{width}d}"
    while candidate in taken:
        counter += 1
        candidate = f"{prefix}{counter:0{width}d}"
    return candidate


# -----------------------------------------------------
# Collection
# -----------------------------------------------------
class Collection(Generic[T]):
    """One typed, ordered collection and its storage key."""

    def __init__(
        self,
        name: str,
        model: Type[T],
        id_prefix: Optional[str] = None,
        id_width: int = 3,
    ):
        self.name = name
        self.model = model
        self.storage_key = f"{STORAGE_KEY_PREFIX}{name}"
        self.id_prefix = id_prefix
        self.id_width = id_width
        self._items: List[T] = []

    @property
    def items(self) -> List[T]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def replace_all(self, items: List[T]):
        self._items = list(items)

    def get(self, record_id: str) -> Optional[T]:
        for item in self._items:
            if item.id == record_id:
                return item
        return None

    def where(self, predicate: Callable[[T], bool]) -> List[T]:
        return [item for item in self._items if predicate(item)]

    def next_id(self) -> str:
        if not self.id_prefix:
            raise ValueError(f"Collection '{self.name}' does not generate sequential IDs")
        return next_sequential_id(
            (item.id for item in self._items),
            self.id_prefix,
            self.id_width,
            len(self._items) + 1,
        )

    def parse_rows(self, rows: Any) -> List[T]:
        """Validate raw rows. Raises ValueError / ValidationError when malformed."""
        if not isinstance(rows, list):
            raise ValueError(f"expected a JSON array, got {type(rows).__name__}")
        return [self.model.model_validate(row) for row in rows]

    def to_rows(self) -> List[Dict[str, Any]]:
        return [item.to_storage() for item in self._items]


# -----------------------------------------------------
# Record store
# -----------------------------------------------------
class RecordStore:
    """Holds every collection for one process. Inject it; do not share globally."""

    def __init__(self, storage: DurableStorage):
        self._storage = storage
        self._lock = RLock()
        self._initialized = False
        self.last_write_error: Optional[WriteError] = None

        self._collections: Dict[str, Collection] = {
            "users": Collection("users", User),
            "sites": Collection("sites", Site),
            "assets": Collection("assets", Asset),
            "work_orders": Collection("work_orders", WorkOrder, id_prefix="WO", id_width=4),
            "costs": Collection("costs", CostEntry),
            "maintenance": Collection("maintenance", MaintenanceSchedule),
            "variations": Collection("variations", Variation, id_prefix="VAR", id_width=3),
            "documents": Collection("documents", Document, id_prefix="DOC", id_width=3),
            "attendance": Collection("attendance", AttendanceRecord),
            "productivity": Collection("productivity", ProductivityRecord),
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self, seed: Optional[Mapping[str, List[Dict[str, Any]]]] = None) -> "RecordStore":
        """
        Load every collection from storage.

        ``seed`` overrides the bundled dataset per collection name. A missing
        stored collection is seeded and the seed is persisted immediately; a
        malformed one falls back to the seed without touching storage.
        """
        with self._lock:
            for name, collection in self._collections.items():
                if seed is not None and name in seed:
                    seed_rows = list(seed[name])
                else:
                    seed_rows = load_seed(name)
                self._load_collection(collection, seed_rows)
            self._initialized = True
        logger.info(
            "Record store initialised: "
            + ", ".join(f"{name}={len(c)}" for name, c in self._collections.items())
        )
        return self

    def shutdown(self) -> List[WriteResult]:
        """Flush every collection and mark the store closed."""
        with self._lock:
            results = [self._persist(c) for c in self._collections.values()] if self._initialized else []
            self._initialized = False
        logger.info("Record store shut down")
        return results

    @property
    def initialized(self) -> bool:
        return self._initialized

    def _load_collection(self, collection: Collection, seed_rows: List[Dict[str, Any]]):
        try:
            stored = self._storage.read_json(collection.storage_key)
        except StorageReadError as e:
            # the durable copy exists; never overwrite it with the seed
            logger.warning(f"Stored {collection.name} could not be read ({e.detail}); using seed data in memory")
            collection.replace_all(collection.parse_rows(seed_rows))
            return
        except ValueError as e:
            logger.warning(f"Stored {collection.name} is not valid JSON ({e}); using seed data")
            collection.replace_all(collection.parse_rows(seed_rows))
            return

        if stored is None:
            collection.replace_all(collection.parse_rows(seed_rows))
            self._persist(collection)
            return

        try:
            collection.replace_all(collection.parse_rows(stored))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Stored {collection.name} is malformed ({e}); using seed data")
            collection.replace_all(collection.parse_rows(seed_rows))

    def _persist(self, collection: Collection) -> WriteResult:
        result = self._storage.write_json(collection.storage_key, collection.to_rows())
        if isinstance(result, WriteError):
            self.last_write_error = result
            logger.error(f"Failed to save {collection.name}; in-memory state kept ({result.message})")
        return result

    def _collection(self, kind: str) -> Collection:
        try:
            return self._collections[kind]
        except KeyError:
            raise ValueError(f"Unknown collection: {kind}") from None

    # ------------------------------------------------------------------
    # Generic access
    # ------------------------------------------------------------------

    def records(self, kind: str) -> List[RecordModel]:
        """Every record of a collection, in stored order (a new list)."""
        return self._collection(kind).items

    def get_by_id(self, kind: str, record_id: str) -> Optional[RecordModel]:
        return self._collection(kind).get(record_id)

    @property
    def collection_names(self) -> List[str]:
        return list(self._collections)

    # ------------------------------------------------------------------
    # Users / sites
    # ------------------------------------------------------------------

    def users(self) -> List[User]:
        return self._collection("users").items

    def get_user(self, user_id: str) -> Optional[User]:
        return self._collection("users").get(user_id)

    def users_by_role(self, role: Union[UserRole, str]) -> List[User]:
        return self._collection("users").where(lambda u: u.role == role)

    def employees(self) -> List[User]:
        return self._collection("users").where(lambda u: u.is_employee)

    def sites(self) -> List[Site]:
        return self._collection("sites").items

    def get_site(self, site_id: str) -> Optional[Site]:
        return self._collection("sites").get(site_id)

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def assets(self) -> List[Asset]:
        return self._collection("assets").items

    def get_asset(self, asset_id: str) -> Optional[Asset]:
        return self._collection("assets").get(asset_id)

    def assets_by_site(self, site: str) -> List[Asset]:
        return self._collection("assets").where(lambda a: a.site == site)

    def assets_by_status(self, status: str) -> List[Asset]:
        return self._collection("assets").where(lambda a: a.status == status)

    # ------------------------------------------------------------------
    # Work orders
    # ------------------------------------------------------------------

    def work_orders(self) -> List[WorkOrder]:
        return self._collection("work_orders").items

    def get_work_order(self, work_order_id: str) -> Optional[WorkOrder]:
        return self._collection("work_orders").get(work_order_id)

    def work_orders_by_status(self, status: Union[WorkOrderStatus, str]) -> List[WorkOrder]:
        return self._collection("work_orders").where(lambda w: w.status == status)

    def work_orders_by_assignee(self, user_id: str) -> List[WorkOrder]:
        return self._collection("work_orders").where(lambda w: w.assigned_to == user_id)

    def work_orders_by_priority(self, priority: Union[Priority, str]) -> List[WorkOrder]:
        return self._collection("work_orders").where(lambda w: w.priority == priority)

    def create_work_order(self, data: Union[WorkOrderCreate, Dict[str, Any]]) -> WorkOrder:
        payload = data if isinstance(data, WorkOrderCreate) else WorkOrderCreate.model_validate(data)
        collection = self._collection("work_orders")

        with self._lock:
            now = now_iso()
            work_order = WorkOrder(
                id=collection.next_id(),
                title=payload.title,
                description=payload.description,
                asset_id=payload.asset_id,
                assigned_to=payload.assigned_to,
                created_by=payload.created_by,
                priority=payload.priority,
                status=WorkOrderStatus.pending,
                category=payload.category,
                scheduled_date=payload.scheduled_date,
                due_date=payload.due_date,
                completed_date=None,
                estimated_hours=payload.estimated_hours,
                actual_hours=0,
                estimated_cost=payload.estimated_cost,
                site=payload.site,
                location=payload.location,
                progress=0,
                checklist_id=payload.checklist_id,
                attachments=payload.attachments or [],
                notes=payload.notes or "",
                created_at=now,
                updated_at=now,
            )
            collection.replace_all([work_order] + collection.items)
            self._persist(collection)

        logger.info(f"Created work order {work_order.id} assigned to {work_order.assigned_to}")
        return work_order

    def update_work_order(
        self, work_order_id: str, changes: Union[WorkOrderUpdate, Dict[str, Any]]
    ) -> Optional[WorkOrder]:
        """Apply a partial update and stamp ``updated_at``. Returns None if not found."""
        update = changes if isinstance(changes, WorkOrderUpdate) else WorkOrderUpdate.model_validate(changes)
        fields = update.model_dump(exclude_unset=True)
        collection = self._collection("work_orders")

        with self._lock:
            existing = collection.get(work_order_id)
            if existing is None:
                return None

            updated = existing.model_copy(update={**fields, "updated_at": now_iso()})
            collection.replace_all([updated if w.id == work_order_id else w for w in collection.items])
            self._persist(collection)

        return updated

    # ------------------------------------------------------------------
    # Maintenance schedules
    # ------------------------------------------------------------------

    def maintenance_schedules(self) -> List[MaintenanceSchedule]:
        return self._collection("maintenance").items

    def get_maintenance(self, schedule_id: str) -> Optional[MaintenanceSchedule]:
        return self._collection("maintenance").get(schedule_id)

    def overdue_maintenance(self, now: Optional[datetime] = None) -> List[MaintenanceSchedule]:
        now = now or utc_now()
        return self._collection("maintenance").where(lambda m: m.is_overdue(now))

    # ------------------------------------------------------------------
    # Costs
    # ------------------------------------------------------------------

    def costs(self) -> List[CostEntry]:
        return self._collection("costs").items

    def costs_by_job(self, job_id: str) -> List[CostEntry]:
        return self._collection("costs").where(lambda c: c.job_id == job_id)

    def total_cost_by_job(self, job_id: str) -> Dict[str, float]:
        job_costs = self.costs_by_job(job_id)
        return {
            "estimated": sum(c.estimated_cost for c in job_costs),
            "actual": sum(c.actual_cost for c in job_costs),
        }

    # ------------------------------------------------------------------
    # Variations
    # ------------------------------------------------------------------

    def variations(self) -> List[Variation]:
        return self._collection("variations").items

    def get_variation(self, variation_id: str) -> Optional[Variation]:
        return self._collection("variations").get(variation_id)

    def variations_by_job(self, job_id: str) -> List[Variation]:
        return self._collection("variations").where(lambda v: v.job_id == job_id)

    def create_variation(self, data: Union[VariationCreate, Dict[str, Any]]) -> Variation:
        payload = data if isinstance(data, VariationCreate) else VariationCreate.model_validate(data)
        collection = self._collection("variations")

        with self._lock:
            versions = [v.version for v in collection.items if v.job_id == payload.job_id]
            variation = Variation(
                id=collection.next_id(),
                job_id=payload.job_id,
                title=payload.title,
                description=payload.description,
                type=payload.type,
                status=VariationStatus.pending,
                requested_by=payload.requested_by,
                approved_by=None,
                request_date=now_iso(),
                approval_date=None,
                original_cost=payload.original_cost,
                variation_cost=payload.variation_cost,
                total_cost=payload.original_cost + payload.variation_cost,
                original_duration=payload.original_duration,
                additional_duration=payload.additional_duration,
                total_duration=payload.original_duration + payload.additional_duration,
                reason=payload.reason,
                impact=payload.impact,
                version=max(versions) + 1 if versions else 1,
            )
            collection.replace_all([variation] + collection.items)
            self._persist(collection)

        logger.info(f"Created variation {variation.id} v{variation.version} for {variation.job_id}")
        return variation

    def update_variation_status(self, decision: Union[VariationDecision, Dict[str, Any]]) -> Optional[Variation]:
        """Set status and stamp approver/approval date. Returns None if not found."""
        decision = decision if isinstance(decision, VariationDecision) else VariationDecision.model_validate(decision)
        collection = self._collection("variations")

        with self._lock:
            existing = collection.get(decision.id)
            if existing is None:
                return None

            updated = existing.model_copy(update={
                "status": decision.status,
                "approved_by": decision.approved_by,
                "approval_date": decision.approval_date,
            })
            collection.replace_all([updated if v.id == decision.id else v for v in collection.items])
            self._persist(collection)

        return updated

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def documents(self) -> List[Document]:
        return self._collection("documents").items

    def get_document(self, document_id: str) -> Optional[Document]:
        return self._collection("documents").get(document_id)

    def documents_by_job(self, job_id: str) -> List[Document]:
        return self._collection("documents").where(lambda d: d.job_id == job_id)

    def documents_by_asset(self, asset_id: str) -> List[Document]:
        return self._collection("documents").where(lambda d: d.asset_id == asset_id)

    def create_document(self, data: Union[DocumentCreate, Dict[str, Any]]) -> Document:
        payload = data if isinstance(data, DocumentCreate) else DocumentCreate.model_validate(data)
        collection = self._collection("documents")

        with self._lock:
            document = Document(
                id=collection.next_id(),
                name=payload.name,
                type=payload.type,
                category=payload.category,
                size=payload.size,
                uploaded_by=payload.uploaded_by,
                upload_date=now_iso(),
                job_id=payload.job_id or "",
                asset_id=payload.asset_id or "",
                description=payload.description,
                url=payload.url,
                tags=payload.tags,
            )
            collection.replace_all([document] + collection.items)
            self._persist(collection)

        logger.info(f"Created document {document.id} ({document.name})")
        return document

    # ------------------------------------------------------------------
    # Attendance
    # ------------------------------------------------------------------

    def attendance_records(self) -> List[AttendanceRecord]:
        return self._collection("attendance").items

    def attendance_by_employee(self, employee_id: str) -> List[AttendanceRecord]:
        return self._collection("attendance").where(lambda r: r.employee_id == employee_id)

    def attendance_by_date(self, day: str) -> List[AttendanceRecord]:
        return self._collection("attendance").where(lambda r: r.date == day)

    def attendance_by_month(self, month: str) -> List[AttendanceRecord]:
        return self._collection("attendance").where(lambda r: r.date.startswith(month))

    def mark_attendance(self, data: Union[AttendanceMark, Dict[str, Any]]) -> AttendanceRecord:
        """
        Record attendance for ``(employee_id, date)``.
        A repeat mark overwrites the earlier record in place and keeps its ID.
        """
        mark = data if isinstance(data, AttendanceMark) else AttendanceMark.model_validate(data)
        collection = self._collection("attendance")

        with self._lock:
            items = collection.items
            index = _find_index(items, lambda r: r.employee_id == mark.employee_id and r.date == mark.date)
            record = AttendanceRecord(
                id=items[index].id if index is not None else stamped_id("ATT"),
                employee_id=mark.employee_id,
                date=mark.date,
                status=mark.status,
                marked_by=mark.marked_by,
                marked_at=now_iso(),
                notes=mark.notes,
            )
            if index is not None:
                items[index] = record
            else:
                items = [record] + items
            collection.replace_all(items)
            self._persist(collection)

        return record

    # ------------------------------------------------------------------
    # Productivity
    # ------------------------------------------------------------------

    def productivity_records(self) -> List[ProductivityRecord]:
        return self._collection("productivity").items

    def productivity_by_employee(self, employee_id: str) -> List[ProductivityRecord]:
        return self._collection("productivity").where(lambda r: r.employee_id == employee_id)

    def productivity_by_date(self, day: str) -> List[ProductivityRecord]:
        return self._collection("productivity").where(lambda r: r.date == day)

    def record_productivity(self, data: Union[ProductivityEntry, Dict[str, Any]]) -> ProductivityRecord:
        """Same idempotency as attendance: one record per ``(employee_id, date)``."""
        entry = data if isinstance(data, ProductivityEntry) else ProductivityEntry.model_validate(data)
        collection = self._collection("productivity")

        with self._lock:
            items = collection.items
            index = _find_index(items, lambda r: r.employee_id == entry.employee_id and r.date == entry.date)
            record = ProductivityRecord(
                id=items[index].id if index is not None else stamped_id("PROD"),
                employee_id=entry.employee_id,
                date=entry.date,
                hours_worked=entry.hours_worked,
                tasks_completed=entry.tasks_completed,
                quality_score=entry.quality_score,
                efficiency=entry.efficiency,
                notes=entry.notes,
                recorded_by=entry.recorded_by,
                recorded_at=now_iso(),
            )
            if index is not None:
                items[index] = record
            else:
                items.append(record)
            collection.replace_all(items)
            self._persist(collection)

        return record

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def dashboard_stats(self, now: Optional[datetime] = None) -> Dict[str, Dict[str, float]]:
        """Aggregate counts and cost variance. Recomputed on every call."""
        jobs = self.work_orders()
        assets = self.assets()
        costs = self.costs()

        total_jobs = len(jobs)
        completed = sum(1 for j in jobs if j.status == WorkOrderStatus.complete)
        total_actual = sum(c.actual_cost for c in costs)
        total_estimated = sum(c.estimated_cost for c in costs)
        variance = total_actual - total_estimated

        return {
            "jobs": {
                "total": total_jobs,
                "completed": completed,
                "in_progress": sum(1 for j in jobs if j.status == WorkOrderStatus.in_progress),
                "pending": sum(1 for j in jobs if j.status == WorkOrderStatus.pending),
                "urgent": sum(1 for j in jobs if j.priority == Priority.urgent),
                "completion_rate": round_half_up(completed / total_jobs * 100) if total_jobs else 0,
            },
            "assets": {
                "total": len(assets),
                "operational": sum(1 for a in assets if a.status == "Operational"),
                "under_maintenance": sum(1 for a in assets if a.status == "Under Maintenance"),
            },
            "maintenance": {
                "overdue": len(self.overdue_maintenance(now)),
                "scheduled": sum(1 for m in self.maintenance_schedules() if m.status == "Active"),
            },
            "costs": {
                "total": total_actual,
                "estimated": total_estimated,
                "variance": variance,
                "variance_percentage": round_half_up(variance / total_estimated * 100) if total_estimated else 0,
            },
        }


def _find_index(items: List[T], predicate: Callable[[T], bool]) -> Optional[int]:
    for i, item in enumerate(items):
        if predicate(item):
            return i
    return None
