# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Role catalog: the static role definitions and their cardinality rules.

Display names and descriptions are presentation data and are kept apart from
the composition rules that read the constants below.
"""

from typing import Any, Optional

from team_engine.models.domain import Role

UNIQUE_ROLES: tuple[Role, ...] = (Role.DRIVER, Role.ELECTRONICS, Role.PROGRAMMER)
REPEATABLE_ROLE: Role = Role.MECHANICS_DESIGNER
ALL_ROLES: tuple[Role, ...] = UNIQUE_ROLES + (REPEATABLE_ROLE,)

MAX_REPEATABLE = 2
MIN_TEAM_SIZE = 4
MAX_TEAM_SIZE = 5

LANGUAGES = ("en", "ar")

_DISPLAY_NAMES: dict[Role, dict[str, str]] = {
    Role.DRIVER: {"en": "Driver", "ar": "التحكم والقيادة"},
    Role.ELECTRONICS: {"en": "Electronics", "ar": "الإلكترونيات"},
    Role.PROGRAMMER: {"en": "Programmer", "ar": "المبرمج"},
    Role.MECHANICS_DESIGNER: {
        "en": "Mechanics / Designer",
        "ar": "التجميع والتركيب / التصميم الهندسي",
    },
}

_DESCRIPTIONS: dict[Role, dict[str, str]] = {
    Role.DRIVER: {
        "en": "Control the robot during competitions",
        "ar": "التحكم بالروبوت أثناء المنافسات",
    },
    Role.ELECTRONICS: {
        "en": "Design and wire electronic circuits",
        "ar": "تصميم وتوصيل الدوائر الكهربائية",
    },
    Role.PROGRAMMER: {
        "en": "Program the control system and Arduino",
        "ar": "برمجة نظام التحكم والأردوينو",
    },
    Role.MECHANICS_DESIGNER: {
        "en": "Assemble and design the mechanical structure",
        "ar": "تجميع وتصميم الهيكل الميكانيكي",
    },
}


def parse_role(value: Any) -> Optional[Role]:
    """Return the catalog Role for a tag, or None if the tag is not in the catalog."""
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        return None


def _lookup(table: dict[Role, dict[str, str]], role: Any, language: str) -> str:
    parsed = parse_role(role)
    if parsed is None:
        return str(role)
    entry = table[parsed]
    return entry.get(language, entry["en"])


def display_name(role: Any, language: str = "en") -> str:
    return _lookup(_DISPLAY_NAMES, role, language)


def description(role: Any, language: str = "en") -> str:
    return _lookup(_DESCRIPTIONS, role, language)


def describe_roles(language: str = "en") -> list[dict[str, Any]]:
    """Catalog listing for role pickers, in catalog order."""
    return [
        {
            "role": role.value,
            "name": display_name(role, language),
            "description": description(role, language),
            "unique": role in UNIQUE_ROLES,
            "max_per_team": 1 if role in UNIQUE_ROLES else MAX_REPEATABLE,
        }
        for role in ALL_ROLES
    ]
