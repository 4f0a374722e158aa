# core/config_validator.py

from typing import List, Optional
from pathlib import Path

from core.config import Settings, settings as default_settings
from core.logging_config import logger

STORAGE_BACKENDS = ("file", "memory")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def validate_required_config(settings: Optional[Settings] = None) -> List[str]:
    """
    Validate settings that the layer cannot run without.
    Returns a list of human-readable problems (empty when valid).
    """
    settings = settings or default_settings
    problems = []

    if settings.STORAGE_BACKEND not in STORAGE_BACKENDS:
        problems.append(
            f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)} "
            f"(got '{settings.STORAGE_BACKEND}')"
        )

    if settings.STORAGE_BACKEND == "file" and not settings.DATA_DIR:
        problems.append("DATA_DIR is required when STORAGE_BACKEND=file")

    if settings.AUDIT_MEMORY_LIMIT < 1:
        problems.append("AUDIT_MEMORY_LIMIT must be >= 1")

    if settings.AUDIT_PERSIST_LIMIT < 0:
        problems.append("AUDIT_PERSIST_LIMIT must be >= 0")

    if settings.DEFAULT_BASE_PAY < 0:
        problems.append("DEFAULT_BASE_PAY must be >= 0")

    return problems


def validate_optional_config(settings: Optional[Settings] = None) -> List[str]:
    """
    Validate optional but recommended configuration.
    Returns list of warnings.
    """
    settings = settings or default_settings
    warnings = []

    if settings.ACCESS_PROFILES_PATH and not Path(settings.ACCESS_PROFILES_PATH).exists():
        warnings.append(
            f"ACCESS_PROFILES_PATH '{settings.ACCESS_PROFILES_PATH}' does not exist "
            "(bundled profiles will be used)"
        )

    if settings.AUDIT_PERSIST_LIMIT > settings.AUDIT_MEMORY_LIMIT:
        warnings.append("AUDIT_PERSIST_LIMIT exceeds AUDIT_MEMORY_LIMIT (durable window capped by memory)")

    if settings.LOG_LEVEL.upper() not in LOG_LEVELS:
        warnings.append(f"LOG_LEVEL '{settings.LOG_LEVEL}' is not a known level (INFO will be used)")

    return warnings


def validate_config_on_startup(settings: Optional[Settings] = None):
    """
    Validate configuration when the app container starts.
    Raises RuntimeError if critical config is invalid.
    Logs warnings for optional config.
    """
    missing_required = validate_required_config(settings)
    missing_optional = validate_optional_config(settings)

    if missing_required:
        error_msg = f"Invalid configuration: {'; '.join(missing_required)}"
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    for warning in missing_optional:
        logger.warning(f"Optional configuration issue: {warning}")

    logger.info("Configuration validation passed")
