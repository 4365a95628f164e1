# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Error taxonomy and the discriminated result returned by every service call.

Inner layers raise TeamEngineError; the public service boundary turns it into
an Outcome so that nothing is thrown across it.
"""

import functools
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError

from team_engine.core.logging import get_logger

logger = get_logger(__name__)


class ErrorKind(str, Enum):
    CAPACITY_EXCEEDED = "capacity_exceeded"
    ROLE_ALREADY_TAKEN = "role_already_taken"
    REPEATABLE_ROLE_FULL = "repeatable_role_full"
    CORE_INCOMPLETE = "core_incomplete"
    INVALID_ROLE = "invalid_role"
    ALREADY_ON_A_TEAM = "already_on_a_team"
    DUPLICATE_LEADERSHIP = "duplicate_leadership"
    DUPLICATE_PENDING = "duplicate_pending"
    ALREADY_REJECTED = "already_rejected"
    ALREADY_APPROVED = "already_approved"
    NOT_FOUND = "not_found"
    NOT_PENDING = "not_pending"
    INVALID_STATUS = "invalid_status"
    INVALID_NAME = "invalid_name"
    INVALID_INPUT = "invalid_input"
    LEADER_REMOVAL = "leader_removal"
    INFRASTRUCTURE_ERROR = "infrastructure_error"


# Composition kinds come from the pure validator, the rest from the workflow
COMPOSITION_ERRORS = frozenset({
    ErrorKind.CAPACITY_EXCEEDED,
    ErrorKind.ROLE_ALREADY_TAKEN,
    ErrorKind.REPEATABLE_ROLE_FULL,
    ErrorKind.CORE_INCOMPLETE,
})


class TeamEngineError(Exception):
    """An expected business outcome, carried as an exception inside the core."""

    def __init__(self, kind: ErrorKind, message: str = "",
                 message_ar: Optional[str] = None) -> None:
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value
        self.message_ar = message_ar


class StaleRosterError(Exception):
    """A conditional membership write observed a newer roster version."""


class RequestDecidedError(Exception):
    """A join request was no longer pending when its approval was committed."""


class DuplicateRecordError(Exception):
    """A write would break a uniqueness rule of the store."""


class Outcome(BaseModel):
    """Success value or exactly one error kind."""

    value: Any = None
    error: Optional[ErrorKind] = None
    message: Optional[str] = None
    message_ar: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> "Outcome":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str = "",
                message_ar: Optional[str] = None) -> "Outcome":
        return cls(error=kind, message=message or kind.value, message_ar=message_ar)


def returns_outcome(func: Callable[..., Any]) -> Callable[..., Outcome]:
    """Wrap a service method so business errors and store failures become Outcomes."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Outcome:
        try:
            return Outcome.success(func(*args, **kwargs))
        except TeamEngineError as exc:
            logger.info("%s rejected: kind=%s detail=%s",
                        func.__name__, exc.kind.value, exc.message)
            return Outcome.failure(exc.kind, exc.message, exc.message_ar)
        except ValidationError as exc:
            logger.info("%s rejected: kind=%s detail=%s",
                        func.__name__, ErrorKind.INVALID_INPUT.value, exc)
            return Outcome.failure(ErrorKind.INVALID_INPUT, str(exc))
        except (SQLAlchemyError, OSError) as exc:
            logger.error("%s failed on the store: %s", func.__name__, exc,
                         exc_info=True)
            return Outcome.failure(ErrorKind.INFRASTRUCTURE_ERROR, str(exc))

    return wrapper
