from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KVEntry(SQLModel, table=True):
    __tablename__ = "kv_entry"

    key: str = Field(primary_key=True, max_length=128)
    value: str
    # bumped when the persisted payload shape changes
    schema_version: int = Field(default=1)
    updated_at: datetime = Field(default_factory=_utcnow)
