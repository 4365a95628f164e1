# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Shared fixtures: an in-memory store with services wired around a mock notifier."""
from unittest.mock import MagicMock

import pytest

from team_engine.repositories.memory_store import InMemoryTeamStore
from team_engine.services.attendance_service import AttendanceService
from team_engine.services.join_request_service import JoinRequestService
from team_engine.services.team_service import TeamService


@pytest.fixture
def store():
    return InMemoryTeamStore()


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def team_service(store, notifier):
    return TeamService(store=store, notification_client=notifier)


@pytest.fixture
def join_service(store, team_service):
    return JoinRequestService(store=store, team_service=team_service)


@pytest.fixture
def attendance_service(store):
    return AttendanceService(store=store, violation_threshold=1)


@pytest.fixture
def make_team(team_service):
    """Create a team whose leader holds roles[0] and members u1.. hold the rest."""

    def _make(*roles, leader_id="leader", name="Robo Team"):
        team = team_service.create_team(leader_id, name, roles[0]).value
        for i, role in enumerate(roles[1:], start=1):
            outcome = team_service.add_member(team.id, f"{leader_id}-u{i}", role)
            assert outcome.ok, outcome.message
        return team.id

    return _make
