# -------------------------
# Enums
# -------------------------
from .enums import (
    AttendanceStatus,
    AuditAction,
    DataAccessTier,
    Priority,
    ResourceType,
    UserRole,
    VariationStatus,
    WorkOrderStatus,
)

# -------------------------
# Directory / principals
# -------------------------
from .user import CurrentUser, User
from .access import AccessProfile

# -------------------------
# Records
# -------------------------
from .site import Site
from .asset import Asset
from .cost import CostEntry
from .maintenance import MaintenanceSchedule
from .work_order import WorkOrder, WorkOrderCreate, WorkOrderUpdate
from .variation import Variation, VariationCreate, VariationDecision
from .document import Document, DocumentCreate

# -------------------------
# Workforce
# -------------------------
from .workforce import (
    AttendanceMark,
    AttendanceRecord,
    AttendanceReport,
    PaymentCalculation,
    ProductivityEntry,
    ProductivityRecord,
    ProductivityReport,
    WeeklyAttendanceReport,
)

# -------------------------
# Audit
# -------------------------
from .audit import AuditEntryCreate, AuditLogEntry
