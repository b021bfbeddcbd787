from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StorageEntry(SQLModel, table=True):
    __tablename__ = "client_storage"

    key: str = Field(primary_key=True, max_length=128)
    value: str
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
