# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Join request submission, inbox, accept and reject."""
from typing import List

from fastapi import APIRouter, Depends

from team_engine.controllers.common import ERROR_RESPONSES, get_caller_id, unwrap
from team_engine.core.dependencies import get_join_request_service
from team_engine.schemas import JoinRequestCreate, JoinRequestOut, MemberOut
from team_engine.services.join_request_service import JoinRequestService

router = APIRouter(prefix="/api/v1", tags=["Join Requests"], responses=ERROR_RESPONSES)


@router.post("/teams/{team_id}/join-requests", status_code=201, response_model=JoinRequestOut)
def submit_request(team_id: str, body: JoinRequestCreate,
                   caller_id: str = Depends(get_caller_id),
                   service: JoinRequestService = Depends(get_join_request_service)):
    return unwrap(service.submit_request(team_id, caller_id, body.role, body.message))


@router.get("/teams/{team_id}/join-requests/pending", response_model=List[JoinRequestOut])
def list_pending(team_id: str,
                 service: JoinRequestService = Depends(get_join_request_service)):
    return unwrap(service.list_pending(team_id))


@router.get("/users/{user_id}/join-requests", response_model=List[JoinRequestOut])
def list_for_user(user_id: str,
                  service: JoinRequestService = Depends(get_join_request_service)):
    return unwrap(service.list_for_user(user_id))


@router.get("/join-requests/{request_id}", response_model=JoinRequestOut)
def get_request(request_id: str,
                service: JoinRequestService = Depends(get_join_request_service)):
    return unwrap(service.get_request(request_id))


@router.post("/join-requests/{request_id}/accept", response_model=MemberOut)
def accept_request(request_id: str,
                   caller_id: str = Depends(get_caller_id),
                   service: JoinRequestService = Depends(get_join_request_service)):
    return unwrap(service.accept_request(request_id, caller_id))


@router.post("/join-requests/{request_id}/reject")
def reject_request(request_id: str,
                   caller_id: str = Depends(get_caller_id),
                   service: JoinRequestService = Depends(get_join_request_service)):
    unwrap(service.reject_request(request_id, caller_id))
    return {"status": "rejected", "request_id": request_id}
