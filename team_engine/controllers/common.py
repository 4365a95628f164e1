# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Shared controller helpers: caller identity and Outcome to HTTP mapping.
"""

from typing import Any, Optional

from fastapi import Header, Request
from fastapi.responses import JSONResponse

from team_engine.core.errors import COMPOSITION_ERRORS, ErrorKind, Outcome
from team_engine.schemas import ErrorResponse

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_ROLE: 422,
    ErrorKind.INVALID_STATUS: 422,
    ErrorKind.INVALID_NAME: 422,
    ErrorKind.INVALID_INPUT: 422,
    ErrorKind.ALREADY_ON_A_TEAM: 409,
    ErrorKind.DUPLICATE_LEADERSHIP: 409,
    ErrorKind.DUPLICATE_PENDING: 409,
    ErrorKind.ALREADY_REJECTED: 409,
    ErrorKind.ALREADY_APPROVED: 409,
    ErrorKind.NOT_PENDING: 409,
    ErrorKind.LEADER_REMOVAL: 409,
    ErrorKind.INFRASTRUCTURE_ERROR: 503,
    **{kind: 409 for kind in COMPOSITION_ERRORS},
}

# 422 stays with FastAPI's own validation error schema
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status: {"model": ErrorResponse} for status in (404, 409, 503)
}


class ServiceRejection(Exception):
    """Raised by controllers when a service returned an error Outcome."""

    def __init__(self, kind: ErrorKind, message: str,
                 message_ar: Optional[str] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.message_ar = message_ar
        self.status_code = STATUS_BY_KIND.get(kind, 400)


def unwrap(outcome: Outcome) -> Any:
    if outcome.ok:
        return outcome.value
    raise ServiceRejection(outcome.error, outcome.message, outcome.message_ar)


async def rejection_handler(request: Request, exc: ServiceRejection) -> JSONResponse:
    content = {"error": exc.kind.value, "detail": exc.message}
    if exc.message_ar:
        content["detail_ar"] = exc.message_ar
    return JSONResponse(status_code=exc.status_code, content=content)


def get_caller_id(x_user_id: str = Header(..., min_length=1)) -> str:
    """Identity of the caller, already verified by the gateway."""
    return x_user_id
