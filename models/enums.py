from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# DATA ACCESS TIER
# -----------------------------------------------------
class DataAccessTier(BaseStrEnum):
    """Coarse default-visibility bucket for an access profile."""

    all = "all"
    managed = "managed"
    assigned = "assigned"
    readonly = "readonly"


# -----------------------------------------------------
# USER ROLE (directory records)
# -----------------------------------------------------
class UserRole(BaseStrEnum):
    admin = "Admin"
    manager = "Manager"
    contractor = "Contractor"


# -----------------------------------------------------
# WORK ORDER STATUS
# -----------------------------------------------------
class WorkOrderStatus(BaseStrEnum):
    """Workflow state for a work order (transitions owned by the workflow layer)."""

    pending = "Pending"
    in_progress = "In Progress"
    pending_approval = "Pending Approval"
    complete = "Complete"
    rejected = "Rejected"


# -----------------------------------------------------
# PRIORITY
# -----------------------------------------------------
class Priority(BaseStrEnum):
    low = "Low"
    medium = "Medium"
    high = "High"
    urgent = "Urgent"


# -----------------------------------------------------
# VARIATION STATUS
# -----------------------------------------------------
class VariationStatus(BaseStrEnum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


# -----------------------------------------------------
# ATTENDANCE STATUS
# -----------------------------------------------------
class AttendanceStatus(BaseStrEnum):
    present = "Present"
    absent = "Absent"


# -----------------------------------------------------
# AUDIT ACTION
# -----------------------------------------------------
class AuditAction(BaseStrEnum):
    view = "view"
    create = "create"
    update = "update"
    delete = "delete"
    approve = "approve"
    reject = "reject"
    submit = "submit"
    upload = "upload"
    download = "download"
    login = "login"
    logout = "logout"
    access_denied = "access_denied"


# -----------------------------------------------------
# RESOURCE TYPE
# -----------------------------------------------------
class ResourceType(BaseStrEnum):
    work_order = "work_order"
    asset = "asset"
    document = "document"
    variation = "variation"
    quote = "quote"
    user = "user"
    report = "report"
    dashboard = "dashboard"
