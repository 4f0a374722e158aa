from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Maintdesk Access Layer"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # Durable storage
    # -------------------------------------------------
    # file   → one JSON document per collection key under DATA_DIR
    # memory → process-local dict (tests, previews)
    STORAGE_BACKEND: str = Field("file", description="file | memory")
    DATA_DIR: str = Field("./data", description="Directory for file-backed collections")

    # -------------------------------------------------
    # Access profiles
    # -------------------------------------------------
    # JSON object of email → profile. Falls back to the bundled profiles.
    ACCESS_PROFILES_PATH: Optional[str] = None

    # -------------------------------------------------
    # Audit trail retention
    # -------------------------------------------------
    AUDIT_MEMORY_LIMIT: int = Field(1000, description="Entries kept in memory (newest first)")
    AUDIT_PERSIST_LIMIT: int = Field(100, description="Entries written to durable storage")

    # -------------------------------------------------
    # Payroll
    # -------------------------------------------------
    DEFAULT_BASE_PAY: float = Field(1000, description="Base pay used when the caller passes none")

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()
