# services/access_policy.py

"""
Access policy resolver: maps a principal email to its AccessProfile.

Lookups are case-insensitive exact matches on a mapping built once at
construction. A missing profile means no access; callers must never read
``None`` as "everything".

Profile rows may leave out the data access tier or any capability flag;
those default from the row's ``role`` (plus an optional ``permissions``
override list). Explicit values always win.

Usage:
    resolver = AccessPolicyResolver.from_json_file(Path("config/access_profiles.json"))
    profile = resolver.resolve("Mark.Ellison@maintdesk.io")
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from pydantic.alias_generators import to_camel

from core.logging_config import logger
from core.permission_helpers import capability_flags, default_tier_for_role, to_role
from models.access import AccessProfile
from seed import load_access_profiles


def normalize_identity(email: str) -> str:
    return email.strip().lower()


def _has_field(row: Mapping[str, Any], field: str) -> bool:
    return field in row or to_camel(field) in row


def with_role_defaults(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Fill the tier and capability flags a profile row leaves out."""
    role = row.get("role")
    filled = dict(row)

    if not _has_field(row, "data_access_tier"):
        filled["data_access_tier"] = default_tier_for_role(role)

    for flag, granted in capability_flags(role, row.get("permissions")).items():
        if not _has_field(row, flag):
            filled[flag] = granted

    return filled


class AccessPolicyResolver:
    """Immutable identity → profile mapping."""

    def __init__(self, profiles: Mapping[str, Union[AccessProfile, Dict[str, Any]]]):
        mapping: Dict[str, AccessProfile] = {}
        for email, profile in profiles.items():
            key = normalize_identity(email)
            if key in mapping:
                raise ValueError(f"Duplicate access profile for identity: {key}")
            if not isinstance(profile, AccessProfile):
                profile = AccessProfile.model_validate(with_role_defaults(profile))
            mapping[key] = profile
        self._profiles = mapping

    @classmethod
    def from_json_file(cls, path: Path) -> "AccessPolicyResolver":
        """Load an ``{email: profile}`` JSON object."""
        with Path(path).open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a JSON object of email → profile")
        logger.info(f"Loaded {len(data)} access profiles from {path}")
        return cls(data)

    @classmethod
    def from_bundled_profiles(cls) -> "AccessPolicyResolver":
        return cls(load_access_profiles())

    def resolve(self, email: Optional[str]) -> Optional[AccessProfile]:
        """Profile for ``email`` or None (deny)."""
        if not email:
            return None
        return self._profiles.get(normalize_identity(email))

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, email: str) -> bool:
        return self.resolve(email) is not None


# -----------------------------------------------------
# Profile construction from a role
# -----------------------------------------------------
def build_profile(
    user_id: str,
    role: Optional[str],
    tier: Optional[str] = None,
    name: Optional[str] = None,
    assigned_work_orders: Iterable[str] = (),
    assigned_assets: Iterable[str] = (),
    assigned_documents: Iterable[str] = (),
    assigned_variations: Iterable[str] = (),
    managed_users: Iterable[str] = (),
    permission_overrides: Optional[Iterable[str]] = None,
) -> AccessProfile:
    """
    Derive a profile from the role permission map.

    The tier defaults to the role's tier; capability flags come from the
    role's permissions plus any per-user overrides.
    """
    role = to_role(role)
    overrides = list(permission_overrides or [])

    return AccessProfile(
        user_id=user_id,
        role=role,
        name=name,
        data_access_tier=tier or default_tier_for_role(role),
        assigned_work_orders=assigned_work_orders,
        assigned_assets=assigned_assets,
        assigned_documents=assigned_documents,
        assigned_variations=assigned_variations,
        managed_users=managed_users,
        **capability_flags(role, overrides),
    )
