# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest

from core.config import Settings
from core.storage import MemoryStorage
from models.user import CurrentUser
from services.access_policy import AccessPolicyResolver
from services.access_service import AccessService
from services.audit_logger import AuditLogger
from services.record_store import RecordStore


@pytest.fixture
def storage():
    """Fresh in-memory storage per test."""
    return MemoryStorage()


@pytest.fixture
def store(storage):
    """Record store seeded from the bundled dataset."""
    return RecordStore(storage).init()


@pytest.fixture
def audit(storage):
    return AuditLogger(storage)


@pytest.fixture
def resolver():
    return AccessPolicyResolver.from_bundled_profiles()


@pytest.fixture
def access_service(store, resolver, audit):
    return AccessService(store, resolver, audit)


@pytest.fixture
def memory_settings(tmp_path):
    """Settings that keep everything in memory."""
    return Settings(STORAGE_BACKEND="memory", DATA_DIR=str(tmp_path))


# -------------------------------------------------
# Principals (match the bundled access profiles)
# -------------------------------------------------
@pytest.fixture
def admin_user():
    return CurrentUser(id="U1", email="alice.moreno@maintdesk.io", name="Alice Moreno", role="orgadmin")


@pytest.fixture
def manager_user():
    return CurrentUser(id="U2", email="mark.ellison@maintdesk.io", name="Mark Ellison", role="manager")


@pytest.fixture
def contractor_user():
    return CurrentUser(id="U3", email="carla.nguyen@maintdesk.io", name="Carla Nguyen", role="staff_employee")


@pytest.fixture
def restricted_contractor():
    """Contractor who may not upload documents."""
    return CurrentUser(id="U4", email="dan.okafor@maintdesk.io", name="Dan Okafor", role="staff_employee")


@pytest.fixture
def viewer_user():
    return CurrentUser(id="U9", email="auditor@maintdesk.io", name="External Auditor", role="viewer")


@pytest.fixture
def unknown_user():
    """Authenticated, but no access profile exists."""
    return CurrentUser(id="U99", email="stranger@example.com", name="Stranger")
