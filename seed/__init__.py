# seed/__init__.py

"""
Bundled initial dataset.

The record store seeds a collection from here the first time it finds no
persisted copy, then writes the seed back so later reads are stable.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

SEED_DIR = Path(__file__).parent

# collection name → seed file
SEED_FILES = {
    "users": "users.json",
    "sites": "sites.json",
    "assets": "assets.json",
    "work_orders": "work_orders.json",
    "costs": "costs.json",
    "maintenance": "maintenance.json",
    "variations": "variations.json",
    "documents": "documents.json",
}

ACCESS_PROFILES_FILE = SEED_DIR / "access_profiles.json"


def load_seed(name: str) -> List[Dict[str, Any]]:
    """Return a fresh copy of the seed rows for ``name`` (empty if none)."""
    filename = SEED_FILES.get(name)
    if filename is None:
        return []
    with (SEED_DIR / filename).open("r", encoding="utf-8") as f:
        return json.load(f)


def load_all_seeds() -> Dict[str, List[Dict[str, Any]]]:
    return {name: load_seed(name) for name in SEED_FILES}


def load_access_profiles() -> Dict[str, Dict[str, Any]]:
    with ACCESS_PROFILES_FILE.open("r", encoding="utf-8") as f:
        return json.load(f)
