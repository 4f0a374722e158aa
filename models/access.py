# models/access.py

from typing import FrozenSet, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .enums import DataAccessTier


class AccessProfile(BaseModel):
    """
    What one principal may see and do.

    The tier sets default visibility; the allow-lists narrow or extend it per
    resource type. Profiles are immutable for the whole session.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    user_id: str
    role: str
    data_access_tier: DataAccessTier = DataAccessTier.readonly

    assigned_work_orders: FrozenSet[str] = frozenset()
    assigned_assets: FrozenSet[str] = frozenset()
    assigned_documents: FrozenSet[str] = frozenset()
    assigned_variations: FrozenSet[str] = frozenset()
    managed_users: FrozenSet[str] = frozenset()

    can_approve: bool = False
    can_manage_users: bool = False
    can_submit_for_approval: bool = False
    can_upload_documents: bool = False

    # Display name, carried into audit entries when available
    name: Optional[str] = Field(None, description="Display name of the principal")

    # -------------------------------------------------
    # Unknown tiers degrade to readonly, never to all
    # -------------------------------------------------
    @field_validator("data_access_tier", mode="before")
    def coerce_tier(cls, v):
        if isinstance(v, DataAccessTier):
            return v
        if isinstance(v, str) and v.strip().lower() in DataAccessTier.list():
            return v.strip().lower()
        return DataAccessTier.readonly

    @field_validator(
        "assigned_work_orders",
        "assigned_assets",
        "assigned_documents",
        "assigned_variations",
        "managed_users",
        mode="before",
    )
    def normalize_id_sets(cls, v):
        if not v:
            return frozenset()
        return frozenset(str(item) for item in v if item)
