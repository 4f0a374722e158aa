# services/audit_events.py

"""
Shorthand recorders for the audit actions the dashboard emits most.
Each takes the acting principal and fills user id/email/name from it.
"""

from typing import Any, Dict, Optional

from models.audit import AuditEntryCreate, AuditLogEntry
from models.enums import AuditAction, ResourceType
from models.user import CurrentUser
from services.audit_logger import AuditLogger


def _record(
    audit: AuditLogger,
    user: CurrentUser,
    action: AuditAction,
    resource_type: ResourceType,
    resource_id: str,
    details: Optional[Dict[str, Any]] = None,
) -> AuditLogEntry:
    return audit.log(AuditEntryCreate(
        user_id=user.id,
        user_email=user.email,
        user_name=user.name,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        details=details or {},
    ))


# -----------------------------------------------------
# Work orders
# -----------------------------------------------------
def log_work_order_view(audit: AuditLogger, user: CurrentUser, work_order_id: str) -> AuditLogEntry:
    return _record(audit, user, AuditAction.view, ResourceType.work_order, work_order_id)


def log_work_order_update(
    audit: AuditLogger, user: CurrentUser, work_order_id: str, changes: Dict[str, Any]
) -> AuditLogEntry:
    return _record(audit, user, AuditAction.update, ResourceType.work_order, work_order_id, {"changes": changes})


def log_work_order_approval(
    audit: AuditLogger, user: CurrentUser, work_order_id: str, comments: Optional[str] = None
) -> AuditLogEntry:
    return _record(audit, user, AuditAction.approve, ResourceType.work_order, work_order_id, {"comments": comments})


def log_work_order_rejection(audit: AuditLogger, user: CurrentUser, work_order_id: str, reason: str) -> AuditLogEntry:
    return _record(audit, user, AuditAction.reject, ResourceType.work_order, work_order_id, {"reason": reason})


def log_work_order_submission(audit: AuditLogger, user: CurrentUser, work_order_id: str) -> AuditLogEntry:
    return _record(audit, user, AuditAction.submit, ResourceType.work_order, work_order_id)


# -----------------------------------------------------
# Documents / dashboard
# -----------------------------------------------------
def log_document_upload(
    audit: AuditLogger, user: CurrentUser, document_id: str, file_name: str
) -> AuditLogEntry:
    return _record(audit, user, AuditAction.upload, ResourceType.document, document_id, {"file_name": file_name})


def log_dashboard_view(audit: AuditLogger, user: CurrentUser) -> AuditLogEntry:
    return _record(audit, user, AuditAction.view, ResourceType.dashboard, "main")


def log_access_denied(
    audit: AuditLogger,
    user: CurrentUser,
    resource_type: ResourceType,
    resource_id: str,
    reason: str,
) -> AuditLogEntry:
    return _record(audit, user, AuditAction.access_denied, resource_type, resource_id, {"reason": reason})
