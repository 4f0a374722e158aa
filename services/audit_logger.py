# services/audit_logger.py

"""
Audit logger: append-only trail of privileged actions.

Entries are kept newest first in memory (bounded by ``memory_limit``) and the
newest ``persist_limit`` are written to durable storage after every append.
Persist failures are logged and exposed as ``last_write_error``; they never
reach the caller.

Usage:
    audit = AuditLogger(storage)
    audit.load_logs()
    audit.log(AuditEntryCreate(user_id="U2", ..., action="approve", details={"comments": "ok"}))
    audit.get_logs(resource_type="work_order", limit=10)
"""

import csv
import io
import json
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from core.errors import StorageReadError, WriteError, WriteResult
from core.logging_config import logger
from core.storage import DurableStorage
from core.utils import iso_timestamp, stamped_id, utc_now
from models.audit import AuditEntryCreate, AuditLogEntry
from models.enums import AuditAction, ResourceType

AUDIT_STORAGE_KEY = "maintdesk_audit_logs"
DEFAULT_MEMORY_LIMIT = 1000
DEFAULT_PERSIST_LIMIT = 100

CSV_HEADER = ["Timestamp", "User", "Action", "Resource Type", "Resource ID", "Details"]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class AuditLogger:

    def __init__(
        self,
        storage: DurableStorage,
        memory_limit: int = DEFAULT_MEMORY_LIMIT,
        persist_limit: int = DEFAULT_PERSIST_LIMIT,
        storage_key: str = AUDIT_STORAGE_KEY,
    ):
        if memory_limit < 1 or persist_limit < 0:
            raise ValueError("memory_limit must be >= 1 and persist_limit >= 0")
        self._storage = storage
        self._storage_key = storage_key
        self.memory_limit = memory_limit
        self.persist_limit = persist_limit
        self._logs: List[AuditLogEntry] = []
        self._lock = Lock()
        self.last_write_error: Optional[WriteError] = None

    # =====================================================
    # WRITE
    # =====================================================
    def log(self, entry: Union[AuditEntryCreate, Dict[str, Any]]) -> AuditLogEntry:
        """Stamp ``id`` and ``timestamp``, prepend, trim and persist."""
        if not isinstance(entry, AuditEntryCreate):
            entry = AuditEntryCreate.model_validate(entry)

        now = utc_now()
        record = AuditLogEntry(
            **entry.model_dump(exclude={"details"}),
            details=entry.details,
            id=stamped_id("audit", now),
            timestamp=now,
        )

        with self._lock:
            self._logs.insert(0, record)
            if len(self._logs) > self.memory_limit:
                del self._logs[self.memory_limit:]
            self._persist()

        logger.debug(
            f"Audit: {record.user_email} {record.action.value} "
            f"{record.resource_type.value}/{record.resource_id}"
        )
        return record

    def _persist(self) -> WriteResult:
        rows = [e.to_storage() for e in self._logs[: self.persist_limit]]
        result = self._storage.write_json(self._storage_key, rows)
        if isinstance(result, WriteError):
            self.last_write_error = result
            logger.error(f"Failed to save audit logs ({result.message})")
        return result

    def load_logs(self) -> int:
        """
        Restore the durable window into memory.
        Missing or malformed storage leaves the log empty.
        """
        try:
            stored = self._storage.read_json(self._storage_key)
            if stored is None:
                entries = []
            elif not isinstance(stored, list):
                raise ValueError("stored audit log is not a list")
            else:
                entries = [AuditLogEntry.model_validate(row) for row in stored]
        except (StorageReadError, ValueError, ValidationError) as e:
            logger.warning(f"Failed to load audit logs: {e}")
            entries = []

        with self._lock:
            self._logs = entries[: self.memory_limit]
        return len(self._logs)

    def clear_logs(self) -> WriteResult:
        with self._lock:
            self._logs = []
            result = self._storage.remove(self._storage_key)
        if isinstance(result, WriteError):
            self.last_write_error = result
        logger.info("Audit logs cleared")
        return result

    # =====================================================
    # READ
    # =====================================================
    def get_logs(
        self,
        user_id: Optional[str] = None,
        action: Optional[Union[AuditAction, str]] = None,
        resource_type: Optional[Union[ResourceType, str]] = None,
        resource_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[AuditLogEntry]:
        """
        Conjunctive filter over the in-memory log, newest first.
        ``start_date`` / ``end_date`` are inclusive; ``limit`` applies last.
        """
        with self._lock:
            results = list(self._logs)

        if user_id:
            results = [e for e in results if e.user_id == user_id]
        if action:
            results = [e for e in results if e.action == action]
        if resource_type:
            results = [e for e in results if e.resource_type == resource_type]
        if resource_id:
            results = [e for e in results if e.resource_id == resource_id]
        if start_date is not None:
            start = _as_utc(start_date)
            results = [e for e in results if e.timestamp >= start]
        if end_date is not None:
            end = _as_utc(end_date)
            results = [e for e in results if e.timestamp <= end]

        if limit is not None:
            results = results[:limit]
        return results

    def get_recent_activity(self, limit: int = 20) -> List[AuditLogEntry]:
        return self.get_logs(limit=limit)

    def get_user_activity(self, user_id: str, limit: int = 50) -> List[AuditLogEntry]:
        return self.get_logs(user_id=user_id, limit=limit)

    def get_resource_activity(self, resource_type: Union[ResourceType, str], resource_id: str) -> List[AuditLogEntry]:
        return self.get_logs(resource_type=resource_type, resource_id=resource_id)

    def __len__(self) -> int:
        return len(self._logs)

    # =====================================================
    # EXPORT
    # =====================================================
    def export_logs(self, format: str = "json") -> str:
        """Render the full in-memory log as ``json`` or ``csv``."""
        with self._lock:
            logs = list(self._logs)

        if format == "json":
            return json.dumps([e.to_storage() for e in logs], indent=2)

        if format == "csv":
            buffer = io.StringIO()
            writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
            writer.writerow(CSV_HEADER)
            for e in logs:
                writer.writerow([
                    iso_timestamp(e.timestamp),
                    f"{e.user_name} ({e.user_email})",
                    e.action.value,
                    e.resource_type.value,
                    e.resource_id,
                    json.dumps(e.details.as_map()),
                ])
            return buffer.getvalue()

        raise ValueError(f"Unsupported export format: {format}")
