from sqlmodel import create_engine, SQLModel
import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./quotations.db")
SQL_ECHO = os.getenv("SQL_ECHO", "0") == "1"

_engine = None


def get_engine():
    global _engine
    if _engine is None:
        connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
        _engine = create_engine(DATABASE_URL, echo=SQL_ECHO, connect_args=connect_args)
    return _engine


def create_tables(engine=None) -> None:
    # models must be imported so their tables are registered on the metadata
    from app.models import kv_entry  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())
