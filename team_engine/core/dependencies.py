# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency wiring for the store and services.
"""

from team_engine.core.config import settings
from team_engine.core.database import create_db_engine, create_schema
from team_engine.repositories import InMemoryTeamStore, SqlTeamStore
from team_engine.services.attendance_service import AttendanceService
from team_engine.services.join_request_service import JoinRequestService
from team_engine.services.notification_client import NotificationClient
from team_engine.services.team_service import TeamService


def build_store():
    """SQL store when DATABASE_URL is set, in-memory store otherwise."""
    if settings.DATABASE_URL:
        engine = create_db_engine(settings.DATABASE_URL)
        create_schema(engine)
        return SqlTeamStore(engine)
    return InMemoryTeamStore()


# ── Singletons ──
_store = build_store()
_notification_client = NotificationClient()

_team_service = TeamService(store=_store, notification_client=_notification_client)
_join_request_service = JoinRequestService(store=_store, team_service=_team_service)
_attendance_service = AttendanceService(store=_store)


# ── FastAPI dependency functions ──
def get_store():
    return _store


def get_team_service() -> TeamService:
    return _team_service


def get_join_request_service() -> JoinRequestService:
    return _join_request_service


def get_attendance_service() -> AttendanceService:
    return _attendance_service
