from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import inspect, text
from sqlmodel import Field, SQLModel, create_engine, Session

from . import config


class JobStatus(str, Enum):
    DRAFT = "DRAFT"
    READY = "READY"
    FAILED = "FAILED"


class ProposalJob(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    client_name: str
    slug: str = Field(index=True)
    payload_path: str
    service_count: int = 0
    status: JobStatus = Field(default=JobStatus.DRAFT)
    fail_code: Optional[str] = None
    fail_detail: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Artifact(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    job_id: int = Field(foreign_key="proposaljob.id")
    type: str
    path: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


engine = create_engine(f"sqlite:///{config.DB_PATH}")


def reset_engine() -> None:
    global engine
    engine = create_engine(f"sqlite:///{config.DB_PATH}")


def init_db() -> None:
    config.OUT_DIR.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)
    _migrate_db()


def _migrate_db() -> None:
    """Add columns introduced after the first schema to existing databases."""
    inspector = inspect(engine)
    if "proposaljob" not in inspector.get_table_names():
        return
    columns = {col["name"] for col in inspector.get_columns("proposaljob")}
    with engine.begin() as conn:
        if "service_count" not in columns:
            conn.execute(text("ALTER TABLE proposaljob ADD COLUMN service_count INTEGER DEFAULT 0"))
        if "fail_code" not in columns:
            conn.execute(text("ALTER TABLE proposaljob ADD COLUMN fail_code TEXT"))
        if "fail_detail" not in columns:
            conn.execute(text("ALTER TABLE proposaljob ADD COLUMN fail_detail TEXT"))


def get_session() -> Session:
    return Session(engine, expire_on_commit=False)
