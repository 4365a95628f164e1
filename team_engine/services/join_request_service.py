# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Join request workflow.

    pending ─► approved   (terminal, creates the membership)
    pending ─► rejected   (terminal)

Role admissibility is not checked at submission: the roster may change before
a leader acts, so acceptance re-validates against the roster read at that
moment and approves the request in the same write as the membership.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from team_engine.core.errors import (
    DuplicateRecordError,
    ErrorKind,
    TeamEngineError,
    returns_outcome,
)
from team_engine.core.logging import get_logger
from team_engine.metrics import JOIN_REQUESTS
from team_engine.models.domain import (
    JoinRequest,
    NotificationEvent,
    RequestStatus,
    TeamMember,
)
from team_engine.services.role_catalog import parse_role
from team_engine.services.team_service import TeamService

logger = get_logger(__name__)

# No resubmission once a request for the same (team, user) has been decided
_EXISTING_REQUEST_ERRORS = {
    RequestStatus.PENDING: (ErrorKind.DUPLICATE_PENDING,
                            "You already have a pending request for this team",
                            "لديك طلب معلق بالفعل لهذا الفريق"),
    RequestStatus.APPROVED: (ErrorKind.ALREADY_APPROVED,
                             "Your request was already approved",
                             "تم قبول طلبك بالفعل"),
    RequestStatus.REJECTED: (ErrorKind.ALREADY_REJECTED,
                             "Your request was rejected by the team leader",
                             "تم رفض طلبك من قبل قائد الفريق"),
}


class JoinRequestService:
    def __init__(self, store, team_service: TeamService):
        self._store = store
        self._teams = team_service

    @returns_outcome
    def submit_request(self, team_id: str, user_id: str, role: str,
                       message: Optional[str] = None) -> JoinRequest:
        requested = parse_role(role)
        if requested is None:
            raise TeamEngineError(ErrorKind.INVALID_ROLE, f"Invalid role '{role}' selected")
        if self._store.get_team(team_id) is None:
            raise TeamEngineError(ErrorKind.NOT_FOUND, f"Team {team_id} not found")

        existing = {r.status for r in self._store.list_requests(team_id=team_id, user_id=user_id)}
        for status in (RequestStatus.PENDING, RequestStatus.APPROVED, RequestStatus.REJECTED):
            if status in existing:
                kind, detail, detail_ar = _EXISTING_REQUEST_ERRORS[status]
                raise TeamEngineError(kind, detail, detail_ar)

        if self._store.team_of_user(user_id) is not None:
            raise TeamEngineError(ErrorKind.ALREADY_ON_A_TEAM, "You are already a member of a team",
                                  "أنت عضو بالفعل في فريق")

        request = JoinRequest(
            id=str(uuid.uuid4()),
            team_id=team_id,
            user_id=user_id,
            role=requested,
            status=RequestStatus.PENDING,
            message=message,
            created_at=datetime.now(timezone.utc),
        )
        try:
            self._store.insert_request(request)
        except DuplicateRecordError as exc:
            raise TeamEngineError(ErrorKind.DUPLICATE_PENDING, str(exc)) from exc

        JOIN_REQUESTS.labels(transition="submitted").inc()
        logger.info("Join request submitted id=%s team=%s user=%s role=%s",
                    request.id, team_id, user_id, requested.value)
        return request

    @returns_outcome
    def accept_request(self, request_id: str, acting_leader_id: str) -> TeamMember:
        """
        Approve a pending request. A request whose role no longer fits stays
        pending and the composition error is returned.
        """
        request = self._require_pending(request_id)
        member = self._teams.commit_member(
            request.team_id, request.user_id, request.role,
            request_id=request.id, acting_id=acting_leader_id,
        )
        JOIN_REQUESTS.labels(transition="approved").inc()
        logger.info("Join request approved id=%s team=%s user=%s by=%s",
                    request_id, request.team_id, request.user_id, acting_leader_id)
        self._teams.notify(request.team_id, NotificationEvent.MEMBER_ADDED,
                           user_id=request.user_id, role=request.role.value,
                           request_id=request_id)
        return member

    @returns_outcome
    def reject_request(self, request_id: str, acting_leader_id: str) -> None:
        request = self._require_pending(request_id)
        if not self._store.write_request_status(request_id, RequestStatus.REJECTED,
                                                decided_by=acting_leader_id):
            raise TeamEngineError(ErrorKind.NOT_PENDING, f"Request {request_id} is no longer pending")
        JOIN_REQUESTS.labels(transition="rejected").inc()
        logger.info("Join request rejected id=%s team=%s user=%s by=%s",
                    request_id, request.team_id, request.user_id, acting_leader_id)
        self._teams.notify(request.team_id, NotificationEvent.REQUEST_REJECTED,
                           user_id=request.user_id, request_id=request_id)

    # ── Reads ──

    @returns_outcome
    def get_request(self, request_id: str) -> JoinRequest:
        request = self._store.read_request(request_id)
        if request is None:
            raise TeamEngineError(ErrorKind.NOT_FOUND, f"Request {request_id} not found")
        return request

    @returns_outcome
    def list_pending(self, team_id: str) -> list[JoinRequest]:
        """The leader's inbox, newest first."""
        if self._store.get_team(team_id) is None:
            raise TeamEngineError(ErrorKind.NOT_FOUND, f"Team {team_id} not found")
        return self._store.list_requests(team_id=team_id, status=RequestStatus.PENDING)

    @returns_outcome
    def list_for_user(self, user_id: str) -> list[JoinRequest]:
        return self._store.list_requests(user_id=user_id)

    def _require_pending(self, request_id: str) -> JoinRequest:
        request = self._store.read_request(request_id)
        if request is None:
            raise TeamEngineError(ErrorKind.NOT_FOUND, f"Request {request_id} not found",
                                  "الطلب غير موجود")
        if request.status != RequestStatus.PENDING:
            raise TeamEngineError(
                ErrorKind.NOT_PENDING,
                f"Request {request_id} was already {request.status.value}",
            )
        return request
