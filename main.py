from pathlib import Path
from typing import Dict, List, Mapping, Optional

# Core
from core.config import Settings, settings as default_settings
from core.config_validator import validate_config_on_startup
from core.errors import WriteResult
from core.logging_config import logger, set_log_level
from core.storage import DurableStorage, create_storage

# Services
from models.user import CurrentUser
from models.workforce import PaymentCalculation
from services import metrics
from services.access_policy import AccessPolicyResolver
from services.access_service import AccessService, PrincipalScope
from services.audit_logger import AuditLogger
from services.record_store import RecordStore


# -------------------------------------------------
# Application container
# -------------------------------------------------
class MaintdeskApp:
    """
    Everything one process needs, wired once and passed around explicitly.
    Call ``init()`` before use and ``shutdown()`` on exit.
    """

    def __init__(
        self,
        settings: Settings,
        storage: DurableStorage,
        store: RecordStore,
        resolver: AccessPolicyResolver,
        audit: AuditLogger,
    ):
        self.settings = settings
        self.storage = storage
        self.store = store
        self.resolver = resolver
        self.audit = audit
        self.access = AccessService(store, resolver, audit)

    def init(self, seed: Optional[Mapping[str, List[Dict]]] = None) -> "MaintdeskApp":
        logger.info(f"Starting {self.settings.PROJECT_NAME} ({self.settings.ENV})")
        self.store.init(seed)
        restored = self.audit.load_logs()
        logger.info(f"Restored {restored} audit entries")
        return self

    def shutdown(self) -> List[WriteResult]:
        results = self.store.shutdown()
        logger.info(f"{self.settings.PROJECT_NAME} stopped")
        return results

    def scope_for(self, user: CurrentUser) -> PrincipalScope:
        return self.access.for_principal(user)

    def calculate_payment(self, employee_id: str, period: str, base_pay: Optional[float] = None) -> PaymentCalculation:
        """Payroll for one employee, defaulting base pay from this app's settings."""
        if base_pay is None:
            base_pay = self.settings.DEFAULT_BASE_PAY
        return metrics.calculate_payment(self.store, employee_id, period, base_pay)


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def _build_resolver(settings: Settings) -> AccessPolicyResolver:
    path = settings.ACCESS_PROFILES_PATH
    if path and Path(path).exists():
        return AccessPolicyResolver.from_json_file(Path(path))
    return AccessPolicyResolver.from_bundled_profiles()


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[DurableStorage] = None,
) -> MaintdeskApp:
    settings = settings or default_settings
    set_log_level(settings.LOG_LEVEL)
    validate_config_on_startup(settings)

    storage = storage or create_storage(settings.STORAGE_BACKEND, settings.DATA_DIR)
    audit = AuditLogger(
        storage,
        memory_limit=settings.AUDIT_MEMORY_LIMIT,
        persist_limit=settings.AUDIT_PERSIST_LIMIT,
    )

    return MaintdeskApp(
        settings=settings,
        storage=storage,
        store=RecordStore(storage),
        resolver=_build_resolver(settings),
        audit=audit,
    )


if __name__ == "__main__":
    app = create_app().init()
    stats = app.store.dashboard_stats()
    logger.info(f"Dashboard: {stats}")
    app.shutdown()
