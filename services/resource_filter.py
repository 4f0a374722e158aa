# services/resource_filter.py

"""
Resource filter engine.

One pure function per resource type per tier, picked from a table keyed by
``DataAccessTier``. A record is kept when any clause for the tier matches.
Inputs are never mutated; the result is a new list in the original order.
A missing profile sees nothing.
"""

from typing import Callable, Dict, List, Optional, Sequence, TypeVar

from models.access import AccessProfile
from models.asset import Asset
from models.document import Document
from models.enums import DataAccessTier, ResourceType
from models.variation import Variation
from models.work_order import WorkOrder

T = TypeVar("T")
Rule = Callable[[AccessProfile, object], bool]


def _nothing(profile: AccessProfile, record) -> bool:
    return False


def _everything(profile: AccessProfile, record) -> bool:
    return True


# =====================================================
# WORK ORDERS
# =====================================================
def _work_order_managed(p: AccessProfile, w: WorkOrder) -> bool:
    return (
        w.id in p.assigned_work_orders
        or w.assigned_to in p.managed_users
        or w.created_by == p.user_id
    )


def _work_order_assigned(p: AccessProfile, w: WorkOrder) -> bool:
    return w.id in p.assigned_work_orders or w.assigned_to == p.user_id


WORK_ORDER_RULES: Dict[DataAccessTier, Rule] = {
    DataAccessTier.all: _everything,
    DataAccessTier.managed: _work_order_managed,
    DataAccessTier.assigned: _work_order_assigned,
    DataAccessTier.readonly: _nothing,
}


# =====================================================
# ASSETS
# =====================================================
def _asset_managed(p: AccessProfile, a: Asset) -> bool:
    return a.id in p.assigned_assets


ASSET_RULES: Dict[DataAccessTier, Rule] = {
    DataAccessTier.all: _everything,
    DataAccessTier.managed: _asset_managed,
    DataAccessTier.assigned: _nothing,
    DataAccessTier.readonly: _nothing,
}


# =====================================================
# DOCUMENTS
# =====================================================
def _document_allow_listed(p: AccessProfile, d: Document) -> bool:
    return d.id in p.assigned_documents


def _document_assigned(p: AccessProfile, d: Document) -> bool:
    return d.id in p.assigned_documents or (bool(d.job_id) and d.job_id in p.assigned_work_orders)


DOCUMENT_RULES: Dict[DataAccessTier, Rule] = {
    DataAccessTier.all: _everything,
    DataAccessTier.managed: _document_allow_listed,
    DataAccessTier.assigned: _document_assigned,
    DataAccessTier.readonly: _document_allow_listed,
}


# =====================================================
# VARIATIONS
# =====================================================
def _variation_managed(p: AccessProfile, v: Variation) -> bool:
    return v.job_id in p.assigned_work_orders or v.requested_by in p.managed_users


def _variation_assigned(p: AccessProfile, v: Variation) -> bool:
    return (
        v.id in p.assigned_variations
        or v.requested_by == p.user_id
        or v.job_id in p.assigned_work_orders
    )


VARIATION_RULES: Dict[DataAccessTier, Rule] = {
    DataAccessTier.all: _everything,
    DataAccessTier.managed: _variation_managed,
    DataAccessTier.assigned: _variation_assigned,
    DataAccessTier.readonly: _nothing,
}


RULES_BY_RESOURCE: Dict[ResourceType, Dict[DataAccessTier, Rule]] = {
    ResourceType.work_order: WORK_ORDER_RULES,
    ResourceType.asset: ASSET_RULES,
    ResourceType.document: DOCUMENT_RULES,
    ResourceType.variation: VARIATION_RULES,
}


def _check_rule_tables():
    for resource, table in RULES_BY_RESOURCE.items():
        missing = [tier.value for tier in DataAccessTier if tier not in table]
        if missing:
            raise RuntimeError(f"No {resource.value} filter for tier(s): {', '.join(missing)}")


_check_rule_tables()


# =====================================================
# PUBLIC API
# =====================================================
def filter_records(
    profile: Optional[AccessProfile],
    resource_type: ResourceType,
    records: Sequence[T],
) -> List[T]:
    """Subset of ``records`` the profile may see, in original order."""
    if profile is None:
        return []
    table = RULES_BY_RESOURCE.get(ResourceType(resource_type))
    if table is None:
        return []
    rule = table.get(profile.data_access_tier, _nothing)
    return [record for record in records if rule(profile, record)]


def filter_work_orders(profile: Optional[AccessProfile], work_orders: Sequence[WorkOrder]) -> List[WorkOrder]:
    return filter_records(profile, ResourceType.work_order, work_orders)


def filter_assets(profile: Optional[AccessProfile], assets: Sequence[Asset]) -> List[Asset]:
    return filter_records(profile, ResourceType.asset, assets)


def filter_documents(profile: Optional[AccessProfile], documents: Sequence[Document]) -> List[Document]:
    return filter_records(profile, ResourceType.document, documents)


def filter_variations(profile: Optional[AccessProfile], variations: Sequence[Variation]) -> List[Variation]:
    return filter_records(profile, ResourceType.variation, variations)


def can_view(profile: Optional[AccessProfile], resource_type: ResourceType, record) -> bool:
    """Point form of the filter: would ``record`` survive filtering?"""
    return bool(filter_records(profile, resource_type, [record]))
