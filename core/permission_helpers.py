from typing import Dict, Iterable, Optional

from core.permissions import CAPABILITY_PERMISSIONS, LEGACY_ROLE_MAP, ROLE_DEFAULT_TIER, ROLE_PERMISSIONS


# -----------------------------------------------------
# Role normalisation
# -----------------------------------------------------
def to_role(role: Optional[str]) -> str:
    """
    Map a role string to a known role.
    Legacy names are translated; anything unknown becomes 'viewer'.
    """
    if not role:
        return "viewer"

    normalized = role.strip().lower()
    if normalized in ROLE_PERMISSIONS:
        return normalized

    return LEGACY_ROLE_MAP.get(normalized, "viewer")


def default_tier_for_role(role: Optional[str]) -> str:
    return ROLE_DEFAULT_TIER.get(to_role(role), "readonly")


# -----------------------------------------------------
# Collect effective permissions:
#   • role-based permissions
#   • per-user permission overrides
# -----------------------------------------------------
def get_effective_permissions(role: Optional[str], overrides: Optional[Iterable[str]] = None) -> set:
    role = to_role(role)

    # Super admin = master key
    if role == "superadmin":
        return {"*"}

    role_perms = set(ROLE_PERMISSIONS.get(role, []))

    user_overrides = set()
    if overrides is not None and not isinstance(overrides, str):
        user_overrides = {p for p in overrides if isinstance(p, str)}

    return role_perms.union(user_overrides)


# -----------------------------------------------------
# Permission evaluation
# -----------------------------------------------------
def has_permission(role: Optional[str], permission: str, overrides: Optional[Iterable[str]] = None) -> bool:
    effective = get_effective_permissions(role, overrides)

    # Wildcard grants everything
    if "*" in effective:
        return True

    return permission in effective



def capability_flags(role: Optional[str], overrides: Optional[Iterable[str]] = None) -> Dict[str, bool]:
    """AccessProfile capability flags granted by a role plus overrides."""
    return {
        flag: has_permission(role, permission, overrides)
        for flag, permission in CAPABILITY_PERMISSIONS.items()
    }
