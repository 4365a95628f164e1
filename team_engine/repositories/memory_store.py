# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: In-memory store for teams, memberships, join requests and attendance.
No business rules here: pure CRUD plus the uniqueness and version checks that
a database would enforce with constraints.
"""

import threading
from datetime import datetime, timezone
from typing import Optional

from team_engine.core.errors import (
    DuplicateRecordError,
    RequestDecidedError,
    StaleRosterError,
)
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


class InMemoryTeamStore:
    """Dict-backed store. A single lock makes every write one atomic step."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._teams: dict[str, Team] = {}
        self._members: dict[str, list[TeamMember]] = {}
        self._requests: dict[str, JoinRequest] = {}
        self._attendance: dict[tuple[str, str, int], AttendanceRecord] = {}

    # ── Teams ──

    def insert_team(self, team: Team, leader: TeamMember) -> None:
        with self._lock:
            if self._membership_of(leader.user_id) is not None:
                raise DuplicateRecordError(f"user {leader.user_id} already has a membership")
            self._teams[team.id] = team.model_copy()
            self._members[team.id] = [leader.model_copy()]

    def get_team(self, team_id: str) -> Optional[Team]:
        with self._lock:
            team = self._teams.get(team_id)
            return team.model_copy() if team else None

    def list_teams(self, status: Optional[TeamStatus] = None) -> list[Team]:
        with self._lock:
            teams = [t.model_copy() for t in self._teams.values()]
        if status is not None:
            teams = [t for t in teams if t.status == status]
        return sorted(teams, key=lambda t: t.created_at, reverse=True)

    def team_led_by(self, user_id: str) -> Optional[str]:
        with self._lock:
            for team in self._teams.values():
                if team.leader_id == user_id:
                    return team.id
        return None

    def update_team_status(self, team_id: str, status: TeamStatus) -> bool:
        with self._lock:
            team = self._teams.get(team_id)
            if team is None:
                return False
            self._teams[team_id] = team.model_copy(update={"status": status})
            return True

    def delete_team(self, team_id: str) -> bool:
        with self._lock:
            if self._teams.pop(team_id, None) is None:
                return False
            self._members.pop(team_id, None)
            for request_id in [r.id for r in self._requests.values() if r.team_id == team_id]:
                del self._requests[request_id]
            for key in [k for k in self._attendance if k[0] == team_id]:
                del self._attendance[key]
            return True

    # ── Memberships ──

    def read_roster(self, team_id: str) -> Optional[RosterSnapshot]:
        with self._lock:
            team = self._teams.get(team_id)
            if team is None:
                return None
            return RosterSnapshot(
                team_id=team_id,
                version=team.roster_version,
                members=[
                    RosterEntry(user_id=m.user_id, role=m.role)
                    for m in self._members.get(team_id, [])
                ],
            )

    def list_members(self, team_id: str) -> list[TeamMember]:
        with self._lock:
            return [m.model_copy() for m in self._members.get(team_id, [])]

    def team_of_user(self, user_id: str) -> Optional[str]:
        with self._lock:
            member = self._membership_of(user_id)
            return member.team_id if member else None

    def commit_membership(
        self,
        team_id: str,
        member: TeamMember,
        expected_version: int,
        request_id: Optional[str] = None,
        decided_by: Optional[str] = None,
    ) -> None:
        """Insert ``member`` only if the roster is still at ``expected_version``.
        With ``request_id`` the pending request is approved in the same step."""
        with self._lock:
            team = self._teams.get(team_id)
            if team is None or team.roster_version != expected_version:
                raise StaleRosterError(
                    f"team {team_id} roster changed since version {expected_version}"
                )
            if request_id is not None:
                request = self._requests.get(request_id)
                if request is None or request.status != RequestStatus.PENDING:
                    raise RequestDecidedError(f"request {request_id} is no longer pending")
            if self._membership_of(member.user_id) is not None:
                raise DuplicateRecordError(f"user {member.user_id} already has a membership")

            self._members.setdefault(team_id, []).append(member.model_copy())
            self._teams[team_id] = team.model_copy(
                update={"roster_version": team.roster_version + 1}
            )
            if request_id is not None:
                self._requests[request_id] = self._requests[request_id].model_copy(update={
                    "status": RequestStatus.APPROVED,
                    "decided_at": datetime.now(timezone.utc),
                    "decided_by": decided_by,
                })

    def delete_membership(self, team_id: str, user_id: str) -> bool:
        with self._lock:
            members = self._members.get(team_id, [])
            remaining = [m for m in members if m.user_id != user_id]
            if len(remaining) == len(members):
                return False
            self._members[team_id] = remaining
            team = self._teams[team_id]
            self._teams[team_id] = team.model_copy(
                update={"roster_version": team.roster_version + 1}
            )
            return True

    # ── Join requests ──

    def insert_request(self, request: JoinRequest) -> None:
        with self._lock:
            for existing in self._requests.values():
                if (existing.team_id == request.team_id
                        and existing.user_id == request.user_id
                        and existing.status == RequestStatus.PENDING):
                    raise DuplicateRecordError(
                        f"user {request.user_id} already has a pending request for {request.team_id}"
                    )
            self._requests[request.id] = request.model_copy()

    def read_request(self, request_id: str) -> Optional[JoinRequest]:
        with self._lock:
            request = self._requests.get(request_id)
            return request.model_copy() if request else None

    def list_requests(
        self,
        team_id: Optional[str] = None,
        user_id: Optional[str] = None,
        status: Optional[RequestStatus] = None,
    ) -> list[JoinRequest]:
        with self._lock:
            result = [r.model_copy() for r in self._requests.values()]
        if team_id is not None:
            result = [r for r in result if r.team_id == team_id]
        if user_id is not None:
            result = [r for r in result if r.user_id == user_id]
        if status is not None:
            result = [r for r in result if r.status == status]
        return sorted(result, key=lambda r: r.created_at, reverse=True)

    def write_request_status(
        self, request_id: str, status: RequestStatus, decided_by: Optional[str] = None
    ) -> bool:
        """Move a pending request to ``status``; False if it was not pending."""
        with self._lock:
            request = self._requests.get(request_id)
            if request is None or request.status != RequestStatus.PENDING:
                return False
            self._requests[request_id] = request.model_copy(update={
                "status": status,
                "decided_at": datetime.now(timezone.utc),
                "decided_by": decided_by,
            })
            return True

    # ── Attendance ──

    def read_attendance(self, team_id: str) -> list[AttendanceRecord]:
        with self._lock:
            records = [r.model_copy() for k, r in self._attendance.items() if k[0] == team_id]
        return sorted(records, key=lambda r: (r.day, r.member_id))

    def upsert_attendance(self, record: AttendanceRecord) -> None:
        with self._lock:
            key = (record.team_id, record.member_id, record.day)
            self._attendance[key] = record.model_copy()

    # ── Bulk / internal ──

    def count_teams(self) -> int:
        with self._lock:
            return len(self._teams)

    def clear(self) -> None:
        with self._lock:
            self._teams.clear()
            self._members.clear()
            self._requests.clear()
            self._attendance.clear()

    def _membership_of(self, user_id: str) -> Optional[TeamMember]:
        for members in self._members.values():
            for member in members:
                if member.user_id == user_id:
                    return member
        return None
