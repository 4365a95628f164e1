# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""SQLAlchemy engine factory and table definitions."""
from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, MetaData, String,
    Table, Text, create_engine, text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from team_engine.core.config import settings

metadata = MetaData()

teams = Table(
    "teams", metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("leader_id", String(255), nullable=False, unique=True),
    Column("status", String(32), nullable=False, server_default="pending"),
    Column("roster_version", Integer, nullable=False, server_default="0"),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

team_members = Table(
    "team_members", metadata,
    Column("team_id", String(36), ForeignKey("teams.id"), primary_key=True),
    # One team per user, system-wide
    Column("user_id", String(255), primary_key=True, unique=True),
    Column("role", String(32), nullable=False),
    Column("joined_at", DateTime(timezone=True), nullable=False),
)

join_requests = Table(
    "join_requests", metadata,
    Column("id", String(36), primary_key=True),
    Column("team_id", String(36), ForeignKey("teams.id"), nullable=False),
    Column("user_id", String(255), nullable=False),
    Column("role", String(32), nullable=False),
    Column("status", String(16), nullable=False, server_default="pending"),
    Column("message", Text),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("decided_at", DateTime(timezone=True)),
    Column("decided_by", String(255)),
)

Index(
    "uq_join_requests_one_pending",
    join_requests.c.team_id, join_requests.c.user_id,
    unique=True,
    sqlite_where=text("status = 'pending'"),
    postgresql_where=text("status = 'pending'"),
)

attendance = Table(
    "attendance", metadata,
    Column("team_id", String(36), ForeignKey("teams.id"), primary_key=True),
    Column("member_id", String(255), primary_key=True),
    Column("day", Integer, primary_key=True),
    Column("present", Boolean, nullable=False),
)


def create_db_engine(url: str | None = None) -> Engine:
    """Build an engine; in-process SQLite shares one connection across threads."""
    url = url or settings.DATABASE_URL
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.POOL_SIZE,
        max_overflow=settings.MAX_OVERFLOW,
        pool_recycle=settings.POOL_RECYCLE,
    )


def create_schema(engine: Engine) -> None:
    metadata.create_all(engine)
