# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Team creation, roster, admin status and deletion, role catalog.
Thin HTTP layer, all logic lives in TeamService.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from team_engine.controllers.common import ERROR_RESPONSES, get_caller_id, unwrap
from team_engine.core.dependencies import get_team_service
from team_engine.schemas import (
    MemberCreate, MemberOut, TeamCreate, TeamDetail, TeamOut, TeamStatusUpdate,
)
from team_engine.services.role_catalog import LANGUAGES, describe_roles
from team_engine.services.team_service import TeamService

router = APIRouter(prefix="/api/v1", tags=["Teams"], responses=ERROR_RESPONSES)


@router.get("/roles")
def list_roles(language: str = Query(default="en", pattern="^(" + "|".join(LANGUAGES) + ")$")):
    """Role catalog with localized names, for role pickers."""
    return describe_roles(language)


@router.post("/teams", status_code=201, response_model=TeamOut)
def create_team(body: TeamCreate,
                caller_id: str = Depends(get_caller_id),
                service: TeamService = Depends(get_team_service)):
    """Create a team led by the caller, who joins with the chosen role."""
    return unwrap(service.create_team(caller_id, body.name, body.role))


@router.get("/teams", response_model=List[TeamDetail])
def list_teams(status: Optional[str] = None,
               service: TeamService = Depends(get_team_service)):
    return unwrap(service.list_teams(status))


@router.get("/teams/{team_id}", response_model=TeamDetail)
def get_team(team_id: str, service: TeamService = Depends(get_team_service)):
    return unwrap(service.get_team(team_id))


@router.post("/teams/{team_id}/members", status_code=201, response_model=MemberOut)
def add_member(team_id: str, body: MemberCreate,
               caller_id: str = Depends(get_caller_id),
               service: TeamService = Depends(get_team_service)):
    return unwrap(service.add_member(team_id, body.user_id, body.role))


@router.delete("/teams/{team_id}/members/{user_id}")
def remove_member(team_id: str, user_id: str,
                  caller_id: str = Depends(get_caller_id),
                  service: TeamService = Depends(get_team_service)):
    unwrap(service.remove_member(team_id, user_id, caller_id))
    return {"status": "member_removed", "team_id": team_id, "user_id": user_id}


@router.patch("/teams/{team_id}/status", response_model=TeamOut)
def set_team_status(team_id: str, body: TeamStatusUpdate,
                    caller_id: str = Depends(get_caller_id),
                    service: TeamService = Depends(get_team_service)):
    return unwrap(service.set_team_status(team_id, body.status, caller_id))


@router.delete("/teams/{team_id}")
def delete_team(team_id: str,
                caller_id: str = Depends(get_caller_id),
                service: TeamService = Depends(get_team_service)):
    unwrap(service.delete_team(team_id, caller_id))
    return {"status": "team_deleted", "team_id": team_id}
