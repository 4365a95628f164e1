# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models. Plain pydantic data, no FastAPI dependency.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Role(str, Enum):
    DRIVER = "driver"
    ELECTRONICS = "electronics"
    PROGRAMMER = "programmer"
    MECHANICS_DESIGNER = "mechanics_designer"


class TeamStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    FINAL_APPROVED = "final_approved"
    REJECTED = "rejected"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationEvent(str, Enum):
    MEMBER_ADDED = "member_added"
    MEMBER_REMOVED = "member_removed"
    REQUEST_REJECTED = "request_rejected"
    TEAM_STATUS_CHANGED = "team_status_changed"


class RosterEntry(BaseModel):
    """One (user, role) pair of a team's current members."""
    user_id: str
    role: Role


class RosterSnapshot(BaseModel):
    """A team's members as read at a given roster version."""
    team_id: str
    version: int = Field(..., ge=0)
    members: list[RosterEntry] = []


class TeamMember(BaseModel):
    team_id: str
    user_id: str
    role: Role
    joined_at: datetime


class Team(BaseModel):
    id: str
    name: str = Field(..., min_length=1, max_length=255)
    leader_id: str
    status: TeamStatus = TeamStatus.PENDING
    roster_version: int = 0
    created_at: datetime


class JoinRequest(BaseModel):
    id: str
    team_id: str
    user_id: str
    role: Role
    status: RequestStatus = RequestStatus.PENDING
    message: Optional[str] = None
    created_at: datetime
    decided_at: Optional[datetime] = None
    decided_by: Optional[str] = None


class AttendanceRecord(BaseModel):
    team_id: str
    member_id: str
    day: int
    present: bool
