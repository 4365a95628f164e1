# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Tests for the composition rules and the role catalog.
Pure functions, no store and no service.
"""
from itertools import product

import pytest

from team_engine.core.errors import ErrorKind
from team_engine.models.domain import Role, RosterEntry
from team_engine.services import role_catalog
from team_engine.services.composition import (
    can_accept_new_members,
    can_add_role,
    get_available_roles,
    get_missing_roles,
    is_core_complete,
    summarize,
    validate_leader_role,
)

D, E, P, M = Role.DRIVER, Role.ELECTRONICS, Role.PROGRAMMER, Role.MECHANICS_DESIGNER


def roster(*roles):
    return [(f"user-{i}", role) for i, role in enumerate(roles)]


# ============================================
# Catalog
# ============================================
class TestRoleCatalog:
    def test_constants(self):
        assert role_catalog.UNIQUE_ROLES == (D, E, P)
        assert role_catalog.REPEATABLE_ROLE == M
        assert role_catalog.MAX_REPEATABLE == 2
        assert role_catalog.MIN_TEAM_SIZE == 4
        assert role_catalog.MAX_TEAM_SIZE == 5

    def test_parse_role_accepts_tags_and_enums(self):
        assert role_catalog.parse_role("driver") == D
        assert role_catalog.parse_role(" Electronics ") == E
        assert role_catalog.parse_role(M) == M

    def test_parse_role_rejects_unknown(self):
        assert role_catalog.parse_role("member") is None
        assert role_catalog.parse_role(None) is None

    def test_display_name_languages(self):
        assert role_catalog.display_name(D, "en") == "Driver"
        assert role_catalog.display_name("programmer", "ar") == "المبرمج"

    def test_display_name_falls_back(self):
        assert role_catalog.display_name("captain") == "captain"
        assert role_catalog.display_name(E, "fr") == "Electronics"

    def test_describe_roles_in_catalog_order(self):
        listing = role_catalog.describe_roles()
        assert [r["role"] for r in listing] == [
            "driver", "electronics", "programmer", "mechanics_designer",
        ]
        assert listing[3]["max_per_team"] == 2
        assert listing[0]["unique"] is True


# ============================================
# can_add_role
# ============================================
class TestCanAddRole:
    @pytest.mark.parametrize("role", list(Role))
    def test_empty_roster_admits_every_catalog_role(self, role):
        assert can_add_role([], role).admissible

    def test_unknown_role_is_invalid(self):
        check = can_add_role(roster(D), "pilot")
        assert not check.admissible
        assert check.reason == ErrorKind.INVALID_ROLE

    def test_scenario_a_fourth_member_completes_core(self):
        members = roster(D, E, P)
        assert can_add_role(members, M).admissible
        grown = members + [("user-new", M)]
        assert len(grown) == 4
        assert is_core_complete(grown)

    def test_scenario_b_unique_role_taken_on_complete_core(self):
        check = can_add_role(roster(D, E, P, M), D)
        assert check.reason == ErrorKind.ROLE_ALREADY_TAKEN

    def test_scenario_c_second_repeatable_slot(self):
        members = roster(D, E, P, M)
        assert can_add_role(members, M).admissible
        assert len(members + [("user-new", M)]) == 5

    def test_scenario_d_full_roster_reports_capacity_first(self):
        members = roster(D, E, P, M, M)
        for role in Role:
            check = can_add_role(members, role)
            assert check.reason == ErrorKind.CAPACITY_EXCEEDED

    def test_repeatable_full_below_capacity(self):
        check = can_add_role(roster(D, M, M), M)
        assert check.reason == ErrorKind.REPEATABLE_ROLE_FULL

    def test_scenario_e_incomplete_core_accepts_repeatable(self):
        assert can_add_role(roster(D, E), M).admissible

    def test_uniqueness_checked_before_repeatable_cap(self):
        check = can_add_role(roster(D, M, M), D)
        assert check.reason == ErrorKind.ROLE_ALREADY_TAKEN

    def test_size_four_with_incomplete_core_blocks_fifth(self):
        # driver, electronics and two repeatables: programmer is missing
        check = can_add_role(roster(D, E, M, M), P)
        assert check.reason == ErrorKind.CORE_INCOMPLETE

    def test_complete_core_only_admits_repeatable(self):
        members = roster(D, E, P, M)
        assert get_available_roles(members) == [M]

    def test_complete_core_with_two_repeatables_admits_nothing(self):
        members = roster(D, E, P, M, M)
        assert get_available_roles(members) == []

    def test_accepts_roster_entry_objects(self):
        members = [RosterEntry(user_id="a", role=D), RosterEntry(user_id="b", role="electronics")]
        assert can_add_role(members, E).reason == ErrorKind.ROLE_ALREADY_TAKEN
        assert can_add_role(members, P).admissible

    def test_rejection_carries_message(self):
        check = can_add_role(roster(D), D)
        assert "driver" in check.message

    def test_rejection_carries_arabic_message(self):
        check = can_add_role(roster(D), D)
        assert check.message_ar == "الدور التحكم والقيادة محجوز بالفعل في الفريق"
        assert can_add_role(roster(D, E, P, M, M), M).message_ar == "الفريق وصل للحد الأقصى (5 أعضاء)"
        assert validate_leader_role("member").message_ar == "الدور المختار غير صالح"

    def test_admissible_check_has_no_messages(self):
        check = can_add_role([], D)
        assert check.message is None
        assert check.message_ar is None


# ============================================
# Derived views
# ============================================
class TestDerivedViews:
    def test_missing_roles_order(self):
        assert get_missing_roles([]) == [D, E, P, M]
        assert get_missing_roles(roster(P, M)) == [D, E]
        assert get_missing_roles(roster(D, E, P)) == [M]
        assert get_missing_roles(roster(D, E, P, M)) == []

    def test_core_complete_requires_size_and_roles(self):
        assert not is_core_complete(roster(D, E, P))
        assert not is_core_complete(roster(D, E, M, M))
        assert is_core_complete(roster(D, E, P, M))
        assert is_core_complete(roster(M, P, E, D, M))

    def test_can_accept_new_members(self):
        assert can_accept_new_members([])
        assert can_accept_new_members(roster(D, E, P))
        assert can_accept_new_members(roster(D, E, P, M))
        assert not can_accept_new_members(roster(D, E, P, M, M))

    def test_can_accept_new_members_while_core_incomplete(self):
        assert can_accept_new_members(roster(D, E, M, M))

    def test_available_roles_follow_can_add_role(self):
        assert get_available_roles(roster(D, E)) == [P, M]
        assert get_available_roles(roster(D, M, M)) == [E, P]

    def test_validate_leader_role(self):
        for role in Role:
            assert validate_leader_role(role.value).admissible
        check = validate_leader_role("member")
        assert not check.admissible
        assert check.reason == ErrorKind.INVALID_ROLE

    def test_summarize(self):
        view = summarize(roster(D, E, P, M))
        assert view["size"] == 4
        assert view["role_counts"] == {
            "driver": 1, "electronics": 1, "programmer": 1, "mechanics_designer": 1,
        }
        assert view["available_roles"] == ["mechanics_designer"]
        assert view["missing_roles"] == []
        assert view["core_complete"] is True
        assert view["is_open"] is True

    def test_summarize_full_team_is_closed(self):
        view = summarize(roster(D, E, P, M, M))
        assert view["is_open"] is False
        assert view["can_accept_new_members"] is False


# ============================================
# Invariants over every growth sequence
# ============================================
def _grow(sequence):
    """Apply additions in order, keeping only the admissible ones."""
    members = []
    sizes = []
    for i, role in enumerate(sequence):
        if can_add_role(members, role).admissible:
            if len(members) == 4:
                sizes.append(is_core_complete(members))
            members.append((f"u{i}", role))
    return members, sizes


class TestInvariants:
    SEQUENCES = list(product(list(Role), repeat=6))

    def test_uniqueness_and_repeatable_cap(self):
        for sequence in self.SEQUENCES:
            members, _ = _grow(sequence)
            roles = [r for _, r in members]
            for unique in role_catalog.UNIQUE_ROLES:
                assert roles.count(unique) <= 1
            assert roles.count(M) <= 2

    def test_size_never_exceeds_five(self):
        for sequence in self.SEQUENCES:
            members, _ = _grow(sequence)
            assert 0 < len(members) <= 5

    def test_fifth_member_only_after_complete_core(self):
        for sequence in self.SEQUENCES:
            members, core_at_four = _grow(sequence)
            if len(members) == 5:
                assert core_at_four == [True]
                assert members[-1][1] == M
