# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for teams, memberships, join requests and attendance."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from team_engine.core.errors import (
    DuplicateRecordError,
    RequestDecidedError,
    StaleRosterError,
)
from team_engine.core.logging import get_logger
from team_engine.models.domain import (
    AttendanceRecord,
    JoinRequest,
    RequestStatus,
    RosterEntry,
    RosterSnapshot,
    Team,
    TeamMember,
    TeamStatus,
)

logger = get_logger(__name__)

TEAM_COLS = "id, name, leader_id, status, roster_version, created_at"
REQUEST_COLS = (
    "id, team_id, user_id, role, status, message, created_at, decided_at, decided_by"
)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class SqlTeamStore:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Teams ──────────────────────────────────────────────────────────

    def insert_team(self, team: Team, leader: TeamMember) -> None:
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    text(f"""
                        INSERT INTO teams ({TEAM_COLS})
                        VALUES (:id, :name, :leader_id, :status, :roster_version, :created_at)
                    """),
                    {"id": team.id, "name": team.name, "leader_id": team.leader_id,
                     "status": team.status.value, "roster_version": team.roster_version,
                     "created_at": _iso(team.created_at)},
                )
                self._insert_member(conn, leader)
        except IntegrityError as exc:
            raise DuplicateRecordError(str(exc.orig)) from exc

    def get_team(self, team_id: str) -> Optional[Team]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {TEAM_COLS} FROM teams WHERE id = :id"), {"id": team_id},
            ).mappings().first()
        return Team(**row) if row else None

    def list_teams(self, status: Optional[TeamStatus] = None) -> List[Team]:
        where = "WHERE status = :status" if status is not None else ""
        params = {"status": status.value} if status is not None else {}
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {TEAM_COLS} FROM teams {where} ORDER BY created_at DESC"),
                params,
            ).mappings().all()
        return [Team(**r) for r in rows]

    def team_led_by(self, user_id: str) -> Optional[str]:
        with self._engine.connect() as conn:
            return conn.execute(
                text("SELECT id FROM teams WHERE leader_id = :uid"), {"uid": user_id},
            ).scalar()

    def update_team_status(self, team_id: str, status: TeamStatus) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                text("UPDATE teams SET status = :status WHERE id = :id"),
                {"status": status.value, "id": team_id},
            )
        return result.rowcount == 1

    def delete_team(self, team_id: str) -> bool:
        with self._engine.begin() as conn:
            params = {"id": team_id}
            conn.execute(text("DELETE FROM attendance WHERE team_id = :id"), params)
            conn.execute(text("DELETE FROM join_requests WHERE team_id = :id"), params)
            conn.execute(text("DELETE FROM team_members WHERE team_id = :id"), params)
            result = conn.execute(text("DELETE FROM teams WHERE id = :id"), params)
        return result.rowcount == 1

    # ── Memberships ────────────────────────────────────────────────────

    def read_roster(self, team_id: str) -> Optional[RosterSnapshot]:
        # Version and members come from one transaction so they describe the same roster
        with self._engine.begin() as conn:
            version = conn.execute(
                text("SELECT roster_version FROM teams WHERE id = :id"), {"id": team_id},
            ).scalar()
            if version is None:
                return None
            rows = conn.execute(
                text("""
                    SELECT user_id, role FROM team_members
                    WHERE team_id = :id ORDER BY joined_at
                """),
                {"id": team_id},
            ).mappings().all()
        return RosterSnapshot(
            team_id=team_id, version=version,
            members=[RosterEntry(**r) for r in rows],
        )

    def list_members(self, team_id: str) -> List[TeamMember]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text("""
                    SELECT team_id, user_id, role, joined_at FROM team_members
                    WHERE team_id = :id ORDER BY joined_at
                """),
                {"id": team_id},
            ).mappings().all()
        return [TeamMember(**r) for r in rows]

    def team_of_user(self, user_id: str) -> Optional[str]:
        with self._engine.connect() as conn:
            return conn.execute(
                text("SELECT team_id FROM team_members WHERE user_id = :uid"),
                {"uid": user_id},
            ).scalar()

    def commit_membership(self, team_id: str, member: TeamMember, expected_version: int,
                          request_id: Optional[str] = None,
                          decided_by: Optional[str] = None) -> None:
        """Compare-and-swap on roster_version, then approve and insert in the same transaction."""
        try:
            with self._engine.begin() as conn:
                bumped = conn.execute(
                    text("""
                        UPDATE teams SET roster_version = roster_version + 1
                        WHERE id = :id AND roster_version = :expected
                    """),
                    {"id": team_id, "expected": expected_version},
                )
                if bumped.rowcount != 1:
                    raise StaleRosterError(
                        f"team {team_id} roster changed since version {expected_version}"
                    )
                if request_id is not None:
                    decided = conn.execute(
                        text("""
                            UPDATE join_requests
                            SET status = 'approved', decided_at = :now, decided_by = :by
                            WHERE id = :id AND status = 'pending'
                        """),
                        {"id": request_id, "by": decided_by,
                         "now": datetime.now(timezone.utc).isoformat()},
                    )
                    if decided.rowcount != 1:
                        raise RequestDecidedError(f"request {request_id} is no longer pending")
                self._insert_member(conn, member)
        except IntegrityError as exc:
            raise DuplicateRecordError(str(exc.orig)) from exc

    def delete_membership(self, team_id: str, user_id: str) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                text("DELETE FROM team_members WHERE team_id = :tid AND user_id = :uid"),
                {"tid": team_id, "uid": user_id},
            )
            if result.rowcount != 1:
                return False
            conn.execute(
                text("UPDATE teams SET roster_version = roster_version + 1 WHERE id = :id"),
                {"id": team_id},
            )
        return True

    # ── Join requests ──────────────────────────────────────────────────

    def insert_request(self, request: JoinRequest) -> None:
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    text(f"""
                        INSERT INTO join_requests ({REQUEST_COLS})
                        VALUES (:id, :team_id, :user_id, :role, :status, :message,
                                :created_at, :decided_at, :decided_by)
                    """),
                    {"id": request.id, "team_id": request.team_id,
                     "user_id": request.user_id, "role": request.role.value,
                     "status": request.status.value, "message": request.message,
                     "created_at": _iso(request.created_at),
                     "decided_at": _iso(request.decided_at),
                     "decided_by": request.decided_by},
                )
        except IntegrityError as exc:
            raise DuplicateRecordError(str(exc.orig)) from exc

    def read_request(self, request_id: str) -> Optional[JoinRequest]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {REQUEST_COLS} FROM join_requests WHERE id = :id"),
                {"id": request_id},
            ).mappings().first()
        return JoinRequest(**row) if row else None

    def list_requests(self, team_id: Optional[str] = None, user_id: Optional[str] = None,
                      status: Optional[RequestStatus] = None) -> List[JoinRequest]:
        conditions: list[str] = []
        params: Dict[str, Any] = {}
        if team_id is not None:
            conditions.append("team_id = :team_id")
            params["team_id"] = team_id
        if user_id is not None:
            conditions.append("user_id = :user_id")
            params["user_id"] = user_id
        if status is not None:
            conditions.append("status = :status")
            params["status"] = status.value
        where = ("WHERE " + " AND ".join(conditions)) if conditions else ""
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {REQUEST_COLS} FROM join_requests {where} ORDER BY created_at DESC"),
                params,
            ).mappings().all()
        return [JoinRequest(**r) for r in rows]

    def write_request_status(self, request_id: str, status: RequestStatus,
                             decided_by: Optional[str] = None) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                text("""
                    UPDATE join_requests
                    SET status = :status, decided_at = :now, decided_by = :by
                    WHERE id = :id AND status = 'pending'
                """),
                {"id": request_id, "status": status.value, "by": decided_by,
                 "now": datetime.now(timezone.utc).isoformat()},
            )
        return result.rowcount == 1

    # ── Attendance ─────────────────────────────────────────────────────

    def read_attendance(self, team_id: str) -> List[AttendanceRecord]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text("""
                    SELECT team_id, member_id, day, present FROM attendance
                    WHERE team_id = :id ORDER BY day, member_id
                """),
                {"id": team_id},
            ).mappings().all()
        return [AttendanceRecord(**r) for r in rows]

    def upsert_attendance(self, record: AttendanceRecord) -> None:
        params = {"tid": record.team_id, "mid": record.member_id,
                  "day": record.day, "present": record.present}
        update = text("""
            UPDATE attendance SET present = :present
            WHERE team_id = :tid AND member_id = :mid AND day = :day
        """)
        with self._engine.begin() as conn:
            if conn.execute(update, params).rowcount == 1:
                return
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    text("""
                        INSERT INTO attendance (team_id, member_id, day, present)
                        VALUES (:tid, :mid, :day, :present)
                    """),
                    params,
                )
        except IntegrityError:
            # A concurrent writer inserted the row first
            with self._engine.begin() as conn:
                conn.execute(update, params)

    # ── Internal ───────────────────────────────────────────────────────

    def count_teams(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(text("SELECT COUNT(*) FROM teams")).scalar() or 0

    def dispose(self):
        self._engine.dispose()

    @staticmethod
    def _insert_member(conn, member: TeamMember) -> None:
        conn.execute(
            text("""
                INSERT INTO team_members (team_id, user_id, role, joined_at)
                VALUES (:team_id, :user_id, :role, :joined_at)
            """),
            {"team_id": member.team_id, "user_id": member.user_id,
             "role": member.role.value, "joined_at": _iso(member.joined_at)},
        )
