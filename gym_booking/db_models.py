"""
Database models using SQLModel
Provides type-safe ORM with Pydantic validation
"""

from sqlmodel import SQLModel, Field
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware current UTC time; naive datetimes are not accepted for storage"""
    return datetime.now(timezone.utc)


class ClientSetting(SQLModel, table=True):
    """Key/value settings kept on the client (e.g. the endpoint URL)"""

    __tablename__ = "client_settings"

    key: str = Field(primary_key=True, max_length=100)
    value: str = Field(max_length=2000)
    updated_at: datetime = Field(default_factory=utc_now)
