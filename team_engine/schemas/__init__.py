# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Pydantic request/response schemas."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from team_engine.models.domain import RequestStatus, Role, TeamStatus


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    role: str = Field(..., description="Leader's role tag")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class MemberCreate(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=255)
    role: str


class TeamStatusUpdate(BaseModel):
    status: str


class JoinRequestCreate(BaseModel):
    role: str
    message: Optional[str] = Field(None, max_length=2000)


class AttendanceUpdate(BaseModel):
    member_id: str = Field(..., min_length=1, max_length=255)
    day: int = Field(..., ge=1)
    present: bool


class TeamOut(BaseModel):
    id: str
    name: str
    leader_id: str
    status: TeamStatus
    roster_version: int
    created_at: datetime


class MemberOut(BaseModel):
    team_id: str
    user_id: str
    role: Role
    joined_at: datetime


class CompositionOut(BaseModel):
    size: int
    role_counts: Dict[str, int]
    available_roles: List[str]
    missing_roles: List[str]
    core_complete: bool
    can_accept_new_members: bool
    is_open: bool


class TeamDetail(TeamOut):
    members: List[MemberOut] = []
    composition: CompositionOut


class JoinRequestOut(BaseModel):
    id: str
    team_id: str
    user_id: str
    role: Role
    status: RequestStatus
    message: Optional[str]
    created_at: datetime
    decided_at: Optional[datetime] = None
    decided_by: Optional[str] = None


class AttendanceOut(BaseModel):
    team_id: str
    member_id: str
    day: int
    present: bool


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    detail_ar: Optional[str] = None
