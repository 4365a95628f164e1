# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Team lifecycle (creation, membership growth, admin actions).

Every membership write goes through commit_member, which re-reads the
persisted roster, re-validates it and writes conditionally on the roster
version it read. A conflicting write means another membership landed first:
the loop starts again from a fresh read.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from team_engine.core.config import settings
from team_engine.core.errors import (
    DuplicateRecordError,
    ErrorKind,
    RequestDecidedError,
    StaleRosterError,
    TeamEngineError,
    returns_outcome,
)
from team_engine.core.logging import get_logger
from team_engine.metrics import (
    COMPOSITION_REJECTIONS,
    MEMBERS_ADDED,
    MEMBERS_REMOVED,
    ROSTER_CONFLICTS,
    TEAMS_CREATED,
)
from team_engine.models.domain import NotificationEvent, Team, TeamMember, TeamStatus
from team_engine.services.composition import can_add_role, summarize, validate_leader_role
from team_engine.services.notification_client import NotificationClient
from team_engine.services.role_catalog import parse_role

logger = get_logger(__name__)

# Width of the teams.name column
MAX_NAME_LENGTH = 255


class TeamService:
    """Business logic for teams and their rosters."""

    def __init__(
        self,
        store,
        notification_client: NotificationClient,
        max_retries: Optional[int] = None,
    ) -> None:
        self._store = store
        self._notifications = notification_client
        self._max_retries = max_retries or settings.MAX_COMMIT_RETRIES

    # ── Creation ──

    @returns_outcome
    def create_team(self, leader_id: str, name: str, leader_role: str) -> Team:
        """Create a team with its leader as the first member."""
        check = validate_leader_role(leader_role)
        if not check.admissible:
            raise TeamEngineError(ErrorKind.INVALID_ROLE, check.message, check.message_ar)
        if not name or not name.strip():
            raise TeamEngineError(ErrorKind.INVALID_NAME, "Team name must not be empty")
        if len(name.strip()) > MAX_NAME_LENGTH:
            raise TeamEngineError(
                ErrorKind.INVALID_NAME,
                f"Team name must be at most {MAX_NAME_LENGTH} characters",
            )
        if self._store.team_led_by(leader_id) is not None:
            raise TeamEngineError(
                ErrorKind.DUPLICATE_LEADERSHIP, f"User {leader_id} already leads a team"
            )
        if self._store.team_of_user(leader_id) is not None:
            raise TeamEngineError(
                ErrorKind.ALREADY_ON_A_TEAM, f"User {leader_id} is already a member of a team"
            )

        role = parse_role(leader_role)
        now = datetime.now(timezone.utc)
        team = Team(
            id=str(uuid.uuid4()),
            name=name.strip(),
            leader_id=leader_id,
            status=TeamStatus.PENDING,
            roster_version=1,
            created_at=now,
        )
        leader = TeamMember(team_id=team.id, user_id=leader_id, role=role, joined_at=now)
        try:
            self._store.insert_team(team, leader)
        except DuplicateRecordError as exc:
            raise TeamEngineError(ErrorKind.ALREADY_ON_A_TEAM, str(exc)) from exc

        TEAMS_CREATED.labels(leader_role=role.value).inc()
        logger.info("Team created: id=%s, name=%s, leader=%s, role=%s",
                    team.id, team.name, leader_id, role.value)
        return team

    # ── Membership ──

    @returns_outcome
    def add_member(self, team_id: str, user_id: str, role: str) -> TeamMember:
        """Add a member directly (leader or admin action)."""
        member = self.commit_member(team_id, user_id, role)
        self.notify(team_id, NotificationEvent.MEMBER_ADDED,
                    user_id=user_id, role=member.role.value)
        return member

    def commit_member(
        self,
        team_id: str,
        user_id: str,
        role: str,
        request_id: Optional[str] = None,
        acting_id: Optional[str] = None,
    ) -> TeamMember:
        """
        Validate against the persisted roster and write conditionally on it.
        With ``request_id`` the request is approved in the same store transaction.

        Internal to the service package: unlike the public operations it raises
        TeamEngineError instead of returning an Outcome, so callers must run it
        inside a ``returns_outcome`` method (add_member, accept_request).
        """
        for attempt in range(1, self._max_retries + 1):
            snapshot = self._store.read_roster(team_id)
            if snapshot is None:
                raise TeamEngineError(ErrorKind.NOT_FOUND, f"Team {team_id} not found")

            check = can_add_role(snapshot.members, role)
            if not check.admissible:
                COMPOSITION_REJECTIONS.labels(reason=check.reason.value).inc()
                raise TeamEngineError(check.reason, check.message, check.message_ar)

            if self._store.team_of_user(user_id) is not None:
                raise TeamEngineError(
                    ErrorKind.ALREADY_ON_A_TEAM, f"User {user_id} is already a member of a team",
                    "أنت عضو بالفعل في فريق",
                )

            member = TeamMember(
                team_id=team_id,
                user_id=user_id,
                role=parse_role(role),
                joined_at=datetime.now(timezone.utc),
            )
            try:
                self._store.commit_membership(
                    team_id, member, snapshot.version,
                    request_id=request_id, decided_by=acting_id,
                )
            except StaleRosterError:
                ROSTER_CONFLICTS.inc()
                logger.warning("Roster conflict: team=%s, version=%d, attempt=%d",
                               team_id, snapshot.version, attempt)
                continue
            except RequestDecidedError as exc:
                raise TeamEngineError(ErrorKind.NOT_PENDING, str(exc)) from exc
            except DuplicateRecordError as exc:
                raise TeamEngineError(ErrorKind.ALREADY_ON_A_TEAM, str(exc)) from exc

            MEMBERS_ADDED.labels(role=member.role.value).inc()
            logger.info("Member added: team=%s, user=%s, role=%s, version=%d",
                        team_id, user_id, member.role.value, snapshot.version + 1)
            return member

        raise TeamEngineError(
            ErrorKind.INFRASTRUCTURE_ERROR,
            f"Roster of team {team_id} kept changing; gave up after {self._max_retries} attempts",
        )

    @returns_outcome
    def remove_member(self, team_id: str, user_id: str, acting_id: str) -> None:
        """Explicit unassignment. The leader cannot be removed this way."""
        team = self._require_team(team_id)
        if team.leader_id == user_id:
            raise TeamEngineError(
                ErrorKind.LEADER_REMOVAL, "The team leader cannot be removed from the team"
            )
        if not self._store.delete_membership(team_id, user_id):
            raise TeamEngineError(
                ErrorKind.NOT_FOUND, f"User {user_id} is not a member of team {team_id}"
            )
        MEMBERS_REMOVED.inc()
        logger.info("Member removed: team=%s, user=%s, by=%s", team_id, user_id, acting_id)
        self.notify(team_id, NotificationEvent.MEMBER_REMOVED, user_id=user_id)

    # ── Reads ──

    @returns_outcome
    def get_team(self, team_id: str) -> dict[str, Any]:
        team = self._require_team(team_id)
        return self._team_view(team)

    @returns_outcome
    def list_teams(self, status: Optional[str] = None) -> list[dict[str, Any]]:
        wanted = self._parse_status(status) if status else None
        return [self._team_view(team) for team in self._store.list_teams(wanted)]

    # ── Admin ──

    @returns_outcome
    def set_team_status(self, team_id: str, status: str, acting_id: str) -> Team:
        new_status = self._parse_status(status)
        team = self._require_team(team_id)
        if team.status == new_status:
            return team
        if not self._store.update_team_status(team_id, new_status):
            raise TeamEngineError(ErrorKind.NOT_FOUND, f"Team {team_id} not found")
        logger.info("Team status changed: team=%s, %s -> %s, by=%s",
                    team_id, team.status.value, new_status.value, acting_id)
        self.notify(team_id, NotificationEvent.TEAM_STATUS_CHANGED,
                    previous=team.status.value, status=new_status.value)
        return team.model_copy(update={"status": new_status})

    @returns_outcome
    def delete_team(self, team_id: str, acting_id: str) -> None:
        """Administrative delete, cascading to memberships, requests and attendance."""
        if not self._store.delete_team(team_id):
            raise TeamEngineError(ErrorKind.NOT_FOUND, f"Team {team_id} not found")
        logger.info("Team deleted: team=%s, by=%s", team_id, acting_id)

    # ── Internal ──

    def notify(self, team_id: str, event: NotificationEvent, **payload: Any) -> None:
        """Best-effort dispatch after a committed change."""
        try:
            self._notifications.notify(team_id, event, payload)
        except Exception as exc:
            logger.warning("Notification dispatch failed: team=%s, event=%s: %s",
                           team_id, event.value, exc)

    def _require_team(self, team_id: str) -> Team:
        team = self._store.get_team(team_id)
        if team is None:
            raise TeamEngineError(ErrorKind.NOT_FOUND, f"Team {team_id} not found")
        return team

    @staticmethod
    def _parse_status(status: str) -> TeamStatus:
        try:
            return TeamStatus(str(status).strip().lower())
        except ValueError as exc:
            raise TeamEngineError(
                ErrorKind.INVALID_STATUS,
                f"status must be one of {[s.value for s in TeamStatus]}",
            ) from exc

    def _team_view(self, team: Team) -> dict[str, Any]:
        members = self._store.list_members(team.id)
        return {
            **team.model_dump(mode="json"),
            "members": [m.model_dump(mode="json") for m in members],
            "composition": summarize(members),
        }
