from typing import Optional, List
from pydantic import Field, field_validator

from .base import RecordModel


# ======================================================
# STORED DOCUMENT
# ======================================================

class Document(RecordModel):
    """
    An uploaded file's metadata.
    ``job_id`` / ``asset_id`` are empty strings when the document is not
    linked to a work order or asset.
    """
    id: str
    name: str
    type: Optional[str] = None
    category: Optional[str] = None
    size: int = 0
    uploaded_by: str
    upload_date: str
    job_id: str = ""
    asset_id: str = ""
    description: str = ""
    url: str = ""
    tags: List[str] = []


# ======================================================
# CREATE
# ======================================================

class DocumentCreate(RecordModel):
    name: str = Field(..., min_length=1, description="File name shown in listings")
    type: Optional[str] = None
    category: Optional[str] = None
    description: str = ""
    url: str = ""
    size: int = Field(0, ge=0)
    uploaded_by: str
    tags: List[str] = []
    job_id: Optional[str] = None
    asset_id: Optional[str] = None

    # -----------------------------
    # Validators
    # -----------------------------
    @field_validator("tags", mode="before")
    def normalize_tags(cls, v):
        if not v:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [t.strip() for t in v if t and str(t).strip()]
