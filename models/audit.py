# models/audit.py

from datetime import datetime
from typing import Annotated, Any, Dict, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator
from pydantic.alias_generators import to_camel

from core.utils import iso_timestamp
from .enums import AuditAction, ResourceType


# ======================================================
# DETAILS (one variant per action)
# ======================================================

class _Details(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def as_map(self) -> Dict[str, Any]:
        """Details as written to exports (variant tag and empty values dropped)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"kind"}, exclude_none=True)


class ViewDetails(_Details):
    kind: Literal["view"] = "view"


class CreateDetails(_Details):
    kind: Literal["create"] = "create"
    record: Optional[Dict[str, Any]] = Field(None, alias="fields")


class UpdateDetails(_Details):
    kind: Literal["update"] = "update"
    changes: Dict[str, Any] = {}


class DeleteDetails(_Details):
    kind: Literal["delete"] = "delete"
    reason: Optional[str] = None


class ApproveDetails(_Details):
    kind: Literal["approve"] = "approve"
    comments: Optional[str] = None


class RejectDetails(_Details):
    kind: Literal["reject"] = "reject"
    reason: str


class SubmitDetails(_Details):
    kind: Literal["submit"] = "submit"


class UploadDetails(_Details):
    kind: Literal["upload"] = "upload"
    file_name: str


class DownloadDetails(_Details):
    kind: Literal["download"] = "download"
    file_name: Optional[str] = None


class LoginDetails(_Details):
    kind: Literal["login"] = "login"


class LogoutDetails(_Details):
    kind: Literal["logout"] = "logout"


class AccessDeniedDetails(_Details):
    kind: Literal["access_denied"] = "access_denied"
    reason: str


AuditDetails = Annotated[
    Union[
        ViewDetails,
        CreateDetails,
        UpdateDetails,
        DeleteDetails,
        ApproveDetails,
        RejectDetails,
        SubmitDetails,
        UploadDetails,
        DownloadDetails,
        LoginDetails,
        LogoutDetails,
        AccessDeniedDetails,
    ],
    Field(discriminator="kind"),
]


# ======================================================
# ENTRIES
# ======================================================

class AuditEntryCreate(BaseModel):
    """
    What callers hand to the audit logger.
    The logger assigns ``id`` and ``timestamp``.

    ``details`` may be a variant instance or a plain dict; a dict without a
    ``kind`` tag is tagged with the entry's action.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    user_id: str
    user_email: str
    user_name: str
    action: AuditAction
    resource_type: ResourceType
    resource_id: str
    details: AuditDetails

    @model_validator(mode="before")
    @classmethod
    def tag_details(cls, data):
        if not isinstance(data, dict):
            return data
        action = data.get("action")
        if isinstance(action, AuditAction):
            action = action.value
        details = data.get("details")
        if details is None:
            details = {}
        if isinstance(details, dict) and "kind" not in details:
            data = {**data, "details": {**details, "kind": action}}
        return data

    @model_validator(mode="after")
    def details_match_action(self):
        if self.details.kind != self.action.value:
            raise ValueError(
                f"details variant '{self.details.kind}' does not match action '{self.action.value}'"
            )
        return self


class AuditLogEntry(AuditEntryCreate):
    """An immutable record of one privileged action."""

    id: str
    timestamp: datetime

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        return iso_timestamp(value)

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
