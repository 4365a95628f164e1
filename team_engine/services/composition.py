# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Team composition rules. Pure computation, no side effects.

A roster is any sequence of current members, given either as objects with a
``role`` attribute (RosterEntry, TeamMember) or as ``(user_id, role)`` pairs.
Every function is deterministic for a given roster, so re-running it against
a freshly read roster is what authorizes a membership write.
"""

from collections import Counter
from typing import Any, Iterable, Optional

from pydantic import BaseModel

from team_engine.core.errors import ErrorKind
from team_engine.models.domain import Role
from team_engine.services.role_catalog import (
    ALL_ROLES,
    MAX_REPEATABLE,
    MAX_TEAM_SIZE,
    MIN_TEAM_SIZE,
    REPEATABLE_ROLE,
    UNIQUE_ROLES,
    display_name,
    parse_role,
)


class RoleCheck(BaseModel):
    """Admissibility verdict for one candidate role."""
    admissible: bool
    reason: Optional[ErrorKind] = None
    message: Optional[str] = None
    message_ar: Optional[str] = None


_ADMISSIBLE = RoleCheck(admissible=True)


def _reject(reason: ErrorKind, message: str, message_ar: Optional[str] = None) -> RoleCheck:
    return RoleCheck(admissible=False, reason=reason, message=message, message_ar=message_ar)


def _roles(roster: Iterable[Any]) -> list[Optional[Role]]:
    roles = []
    for entry in roster:
        raw = entry.role if hasattr(entry, "role") else entry[1]
        roles.append(parse_role(raw))
    return roles


def _has_core(roles: list[Optional[Role]]) -> bool:
    return all(r in roles for r in UNIQUE_ROLES) and REPEATABLE_ROLE in roles


def can_add_role(roster: Iterable[Any], candidate: Any) -> RoleCheck:
    """
    Decide whether one more member holding ``candidate`` may join.
    Checks run in a fixed order: capacity, uniqueness, repeatable cap,
    core completeness. The first failing check is reported.
    """
    role = parse_role(candidate)
    if role is None:
        return _reject(ErrorKind.INVALID_ROLE, f"Unknown role '{candidate}'",
                       "الدور المختار غير صالح")

    roles = _roles(roster)
    size = len(roles)

    if size >= MAX_TEAM_SIZE:
        return _reject(
            ErrorKind.CAPACITY_EXCEEDED,
            f"Team is already at maximum capacity ({MAX_TEAM_SIZE} members)",
            f"الفريق وصل للحد الأقصى ({MAX_TEAM_SIZE} أعضاء)",
        )

    if role in UNIQUE_ROLES and role in roles:
        return _reject(
            ErrorKind.ROLE_ALREADY_TAKEN,
            f"Role {role.value} is already taken in this team",
            f"الدور {display_name(role, 'ar')} محجوز بالفعل في الفريق",
        )

    if role == REPEATABLE_ROLE and roles.count(REPEATABLE_ROLE) >= MAX_REPEATABLE:
        return _reject(
            ErrorKind.REPEATABLE_ROLE_FULL,
            f"Maximum of {MAX_REPEATABLE} {REPEATABLE_ROLE.value} roles allowed",
            f"الحد الأقصى لدور {display_name(REPEATABLE_ROLE, 'ar')} هو {MAX_REPEATABLE}",
        )

    if size >= MIN_TEAM_SIZE:
        if not _has_core(roles):
            return _reject(
                ErrorKind.CORE_INCOMPLETE,
                f"Core team ({MIN_TEAM_SIZE} members) must be complete "
                f"before adding member {size + 1}",
                f"يجب اكتمال الفريق الأساسي ({MIN_TEAM_SIZE} أعضاء) قبل إضافة العضو الخامس",
            )
        if role != REPEATABLE_ROLE:
            return _reject(
                ErrorKind.CORE_INCOMPLETE,
                f"Member {size + 1} can only be in the {REPEATABLE_ROLE.value} role",
                f"العضو الخامس يمكن أن يكون فقط من فئة {display_name(REPEATABLE_ROLE, 'ar')}",
            )

    return _ADMISSIBLE


def get_available_roles(roster: Iterable[Any]) -> list[Role]:
    """Roles, in catalog order, that could join right now."""
    members = list(roster)
    return [role for role in ALL_ROLES if can_add_role(members, role).admissible]


def is_core_complete(roster: Iterable[Any]) -> bool:
    roles = _roles(roster)
    return len(roles) >= MIN_TEAM_SIZE and _has_core(roles)


def get_missing_roles(roster: Iterable[Any]) -> list[Role]:
    """Unique roles not yet held, then the repeatable role if nobody holds it."""
    roles = _roles(roster)
    missing = [role for role in UNIQUE_ROLES if role not in roles]
    if REPEATABLE_ROLE not in roles:
        missing.append(REPEATABLE_ROLE)
    return missing


def can_accept_new_members(roster: Iterable[Any]) -> bool:
    members = list(roster)
    if len(members) >= MAX_TEAM_SIZE:
        return False
    if not is_core_complete(members):
        return True
    return _roles(members).count(REPEATABLE_ROLE) < MAX_REPEATABLE


def validate_leader_role(role: Any) -> RoleCheck:
    """The founding member's role only has to be a catalog role."""
    if parse_role(role) is None:
        return _reject(ErrorKind.INVALID_ROLE, f"Invalid role '{role}' selected",
                       "الدور المختار غير صالح")
    return _ADMISSIBLE


def summarize(roster: Iterable[Any]) -> dict[str, Any]:
    """Derived composition view of a roster."""
    members = list(roster)
    counts = Counter(r.value for r in _roles(members) if r is not None)
    available = get_available_roles(members)
    return {
        "size": len(members),
        "role_counts": {role.value: counts.get(role.value, 0) for role in ALL_ROLES},
        "available_roles": [r.value for r in available],
        "missing_roles": [r.value for r in get_missing_roles(members)],
        "core_complete": is_core_complete(members),
        "can_accept_new_members": can_accept_new_members(members),
        "is_open": bool(available),
    }
