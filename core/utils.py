# core/utils.py

import math
import random
import string
from datetime import datetime, timezone

_BASE36 = string.digits + string.ascii_lowercase


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with .5 going up.
    Dashboard percentages and payroll bonuses use this, not banker's rounding.
    """
    return int(math.floor(value + 0.5))


def round_2(value: float) -> float:
    """Half-up rounding to 2 decimals (report averages)."""
    return math.floor(value * 100 + 0.5) / 100


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(value: datetime) -> str:
    """
    Format as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.
    Naive datetimes are treated as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def now_iso() -> str:
    return iso_timestamp(utc_now())


def epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def random_suffix(length: int = 9) -> str:
    """Short lowercase base36 token used in generated record IDs."""
    return "".join(random.choice(_BASE36) for _ in range(length))


def stamped_id(prefix: str, when: datetime = None) -> str:
    """``<prefix>-<epoch-ms>-<random>``, e.g. ``ATT-1712345678901-k3j9x0q2a``."""
    return f"{prefix}-{epoch_ms(when or utc_now())}-{random_suffix()}"
