# ============================================
# CENTRALIZED ROLE → PERMISSIONS MAP
# ============================================
# Only permissions that back an AccessProfile capability flag live here.
# Visibility comes from the data access tier, not from this map.
ROLE_PERMISSIONS = {

    # =====================================================
    # SUPER ADMIN: Full access to everything
    # =====================================================
    "superadmin": ["*"],

    # =====================================================
    # ORGANISATION ADMIN
    # =====================================================
    "orgadmin": [
        "work_orders:approve",
        "work_orders:submit",
        "documents:upload",
        "users:manage",
    ],

    # =====================================================
    # MANAGER: approves their team's work
    # =====================================================
    "manager": [
        "work_orders:approve",
        "work_orders:submit",
        "documents:upload",
    ],

    # =====================================================
    # STAFF / CONTRACTOR: submits assigned work
    # =====================================================
    "staff_employee": [
        "work_orders:submit",
        "documents:upload",
    ],

    # =====================================================
    # VIEWER: read only
    # =====================================================
    "viewer": [],
}


# ============================================
# AccessProfile flag → permission that grants it
# ============================================
CAPABILITY_PERMISSIONS = {
    "can_approve": "work_orders:approve",
    "can_manage_users": "users:manage",
    "can_submit_for_approval": "work_orders:submit",
    "can_upload_documents": "documents:upload",
}


# ============================================
# ROLE → DEFAULT DATA ACCESS TIER
# ============================================
ROLE_DEFAULT_TIER = {
    "superadmin": "all",
    "orgadmin": "all",
    "manager": "managed",
    "staff_employee": "assigned",
    "viewer": "readonly",
}


# Older role names still found in user directories
LEGACY_ROLE_MAP = {
    "platform_owner": "superadmin",
    "owner": "orgadmin",
    "technician": "staff_employee",
    "admin": "orgadmin",
    "contractor": "staff_employee",
}
