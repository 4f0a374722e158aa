# core/errors.py

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class WriteOk:
    key: str


@dataclass(frozen=True)
class WriteError:
    """A durable write that failed. The in-memory state is still authoritative."""
    key: str
    message: str


WriteResult = Union[WriteOk, WriteError]


class StorageReadError(Exception):
    """A stored key exists but could not be read. Distinct from "key absent"."""

    def __init__(self, key: str, detail: str):
        super().__init__(f"Failed to read storage key '{key}': {detail}")
        self.key = key
        self.detail = detail


class EmployeeNotFoundError(LookupError):
    """Raised when a payroll calculation names an unknown employee."""

    def __init__(self, employee_id: str):
        super().__init__(f"Employee not found: {employee_id}")
        self.employee_id = employee_id


def extract_storage_error(error: Exception) -> str:
    """
    Safely extract readable details from storage errors.
    Handles:
      • OSError (errno + filename)
      • JSON / serialization errors
      • Generic Python exceptions
    """

    # Case 1: filesystem errors carry strerror / filename
    if isinstance(error, OSError) and error.strerror:
        if error.filename:
            return f"{error.strerror}: {error.filename}"
        return str(error.strerror)

    # Case 2: errors with args (common)
    if hasattr(error, "args") and error.args:
        try:
            return str(error.args[0])
        except Exception:
            pass

    # Case 3: Plain string fallback
    try:
        return str(error) or error.__class__.__name__
    except Exception:
        return "Unknown storage error"


def handle_storage_error(error: Exception, key: str, operation: str = "Storage write") -> WriteError:
    """
    Handle a storage failure with consistent formatting.
    Returns WriteError (doesn't raise) so the caller can keep going.

    Args:
        error: The exception that occurred
        key: Storage key that was being written
        operation: Description of what failed (e.g., "Failed to save work orders")
    """
    from core.logging_config import logger

    detail = extract_storage_error(error)
    logger.error(f"{operation} [{key}]: {detail}")
    return WriteError(key=key, message=f"{operation}: {detail}")
