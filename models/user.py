# models/user.py

from typing import Optional
from pydantic import BaseModel, EmailStr, field_validator

from .base import RecordModel
from .enums import UserRole


# ===============================================================
# DIRECTORY USERS (seeded collection)
# ===============================================================

class User(RecordModel):
    """
    A person in the organisation directory.
    Contractors and managers are the employees that payroll reports cover.
    """
    id: str
    name: str
    email: str
    role: UserRole
    phone: Optional[str] = None
    avatar: Optional[str] = None
    department: Optional[str] = None
    active: bool = True
    joined_date: Optional[str] = None

    @property
    def is_employee(self) -> bool:
        return self.role in (UserRole.contractor, UserRole.manager)


# ===============================================================
# AUTHENTICATED PRINCIPAL
# ===============================================================

class CurrentUser(BaseModel):
    """
    The already-authenticated principal handed to the access layer by the
    session collaborator. Credentials are never seen here.
    """
    id: str
    email: EmailStr
    name: str
    role: Optional[str] = None

    @field_validator("email", mode="before")
    def strip_email(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v
