# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Attendance marking, absences and violations."""
from typing import List

from fastapi import APIRouter, Depends

from team_engine.controllers.common import ERROR_RESPONSES, get_caller_id, unwrap
from team_engine.core.dependencies import get_attendance_service
from team_engine.schemas import AttendanceOut, AttendanceUpdate
from team_engine.services.attendance_service import AttendanceService

router = APIRouter(prefix="/api/v1", tags=["Attendance"], responses=ERROR_RESPONSES)


@router.put("/teams/{team_id}/attendance", response_model=AttendanceOut)
def set_attendance(team_id: str, body: AttendanceUpdate,
                   caller_id: str = Depends(get_caller_id),
                   service: AttendanceService = Depends(get_attendance_service)):
    return unwrap(service.set_attendance(team_id, body.member_id, body.day, body.present))


@router.get("/teams/{team_id}/attendance", response_model=List[AttendanceOut])
def get_team_attendance(team_id: str,
                        service: AttendanceService = Depends(get_attendance_service)):
    return unwrap(service.get_team_attendance(team_id))


@router.get("/teams/{team_id}/attendance/summary")
def get_summary(team_id: str,
                service: AttendanceService = Depends(get_attendance_service)):
    return unwrap(service.get_summary(team_id))


@router.get("/teams/{team_id}/attendance/violations")
def get_violations(team_id: str,
                   service: AttendanceService = Depends(get_attendance_service)):
    return {"team_id": team_id, "violations": unwrap(service.get_violations(team_id))}


@router.get("/teams/{team_id}/attendance/{member_id}")
def get_member_attendance(team_id: str, member_id: str,
                          service: AttendanceService = Depends(get_attendance_service)):
    return {
        "team_id": team_id,
        "member_id": member_id,
        "absences": unwrap(service.get_absence_count(team_id, member_id)),
        "status": unwrap(service.get_member_status(team_id, member_id)),
    }
