# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Tests for SqlTeamStore against an in-process SQLite database,
and the services running on top of it.
"""
import uuid
from datetime import datetime, timezone

import pytest

from team_engine.core.database import create_db_engine, create_schema
from team_engine.core.errors import (
    DuplicateRecordError,
    ErrorKind,
    RequestDecidedError,
    StaleRosterError,
)
from team_engine.models.domain import (
    AttendanceRecord,
    JoinRequest,
    RequestStatus,
    Role,
    Team,
    TeamMember,
    TeamStatus,
)
from team_engine.repositories.sql_store import SqlTeamStore
from team_engine.services.attendance_service import AttendanceService
from team_engine.services.join_request_service import JoinRequestService
from team_engine.services.team_service import TeamService


@pytest.fixture
def sql_store():
    engine = create_db_engine("sqlite://")
    create_schema(engine)
    store = SqlTeamStore(engine)
    yield store
    store.dispose()


def _now():
    return datetime.now(timezone.utc)


def _team(store, leader_id="leader", role=Role.DRIVER):
    team = Team(id=str(uuid.uuid4()), name="Robo", leader_id=leader_id,
                status=TeamStatus.PENDING, roster_version=1, created_at=_now())
    store.insert_team(team, TeamMember(team_id=team.id, user_id=leader_id,
                                       role=role, joined_at=_now()))
    return team


def _member(team_id, user_id, role):
    return TeamMember(team_id=team_id, user_id=user_id, role=role, joined_at=_now())


def _request(team_id, user_id, role=Role.ELECTRONICS):
    return JoinRequest(id=str(uuid.uuid4()), team_id=team_id, user_id=user_id,
                       role=role, created_at=_now())


# ============================================
# Teams & rosters
# ============================================
class TestSqlTeams:
    def test_insert_and_read_team(self, sql_store):
        team = _team(sql_store)
        stored = sql_store.get_team(team.id)
        assert stored.name == "Robo"
        assert stored.status == TeamStatus.PENDING
        assert stored.roster_version == 1
        assert sql_store.team_led_by("leader") == team.id
        assert sql_store.team_of_user("leader") == team.id
        assert sql_store.count_teams() == 1

    def test_missing_team(self, sql_store):
        assert sql_store.get_team("nope") is None
        assert sql_store.read_roster("nope") is None

    def test_second_team_for_member_rejected(self, sql_store):
        _team(sql_store, leader_id="alice")
        with pytest.raises(DuplicateRecordError):
            _team(sql_store, leader_id="alice")
        assert sql_store.count_teams() == 1

    def test_roster_snapshot(self, sql_store):
        team = _team(sql_store)
        snapshot = sql_store.read_roster(team.id)
        assert snapshot.version == 1
        assert [(m.user_id, m.role) for m in snapshot.members] == [("leader", Role.DRIVER)]

    def test_list_and_status(self, sql_store):
        first = _team(sql_store, leader_id="a")
        _team(sql_store, leader_id="b")
        assert sql_store.update_team_status(first.id, TeamStatus.APPROVED)
        assert [t.id for t in sql_store.list_teams(TeamStatus.APPROVED)] == [first.id]
        assert len(sql_store.list_teams()) == 2
        assert not sql_store.update_team_status("nope", TeamStatus.APPROVED)


# ============================================
# Conditional membership writes
# ============================================
class TestSqlCommitMembership:
    def test_commit_bumps_version(self, sql_store):
        team = _team(sql_store)
        sql_store.commit_membership(team.id, _member(team.id, "bob", Role.ELECTRONICS), 1)
        snapshot = sql_store.read_roster(team.id)
        assert snapshot.version == 2
        assert len(snapshot.members) == 2

    def test_stale_version_is_refused(self, sql_store):
        team = _team(sql_store)
        sql_store.commit_membership(team.id, _member(team.id, "bob", Role.ELECTRONICS), 1)
        with pytest.raises(StaleRosterError):
            sql_store.commit_membership(team.id, _member(team.id, "carol", Role.PROGRAMMER), 1)
        assert sql_store.team_of_user("carol") is None
        assert sql_store.read_roster(team.id).version == 2

    def test_member_of_other_team_rolls_back(self, sql_store):
        team = _team(sql_store, leader_id="a")
        _team(sql_store, leader_id="b")
        with pytest.raises(DuplicateRecordError):
            sql_store.commit_membership(team.id, _member(team.id, "b", Role.ELECTRONICS), 1)
        assert sql_store.read_roster(team.id).version == 1

    def test_commit_approves_request(self, sql_store):
        team = _team(sql_store)
        request = _request(team.id, "bob")
        sql_store.insert_request(request)
        sql_store.commit_membership(team.id, _member(team.id, "bob", Role.ELECTRONICS), 1,
                                    request_id=request.id, decided_by="leader")
        stored = sql_store.read_request(request.id)
        assert stored.status == RequestStatus.APPROVED
        assert stored.decided_by == "leader"
        assert stored.decided_at is not None

    def test_decided_request_rolls_back(self, sql_store):
        team = _team(sql_store)
        request = _request(team.id, "bob")
        sql_store.insert_request(request)
        assert sql_store.write_request_status(request.id, RequestStatus.REJECTED, "leader")
        with pytest.raises(RequestDecidedError):
            sql_store.commit_membership(team.id, _member(team.id, "bob", Role.ELECTRONICS), 1,
                                        request_id=request.id)
        assert sql_store.team_of_user("bob") is None
        assert sql_store.read_roster(team.id).version == 1

    def test_delete_membership(self, sql_store):
        team = _team(sql_store)
        sql_store.commit_membership(team.id, _member(team.id, "bob", Role.ELECTRONICS), 1)
        assert sql_store.delete_membership(team.id, "bob")
        assert not sql_store.delete_membership(team.id, "bob")
        assert sql_store.read_roster(team.id).version == 3


# ============================================
# Join requests & attendance
# ============================================
class TestSqlRequests:
    def test_one_pending_per_pair(self, sql_store):
        team = _team(sql_store)
        sql_store.insert_request(_request(team.id, "bob"))
        with pytest.raises(DuplicateRecordError):
            sql_store.insert_request(_request(team.id, "bob"))

    def test_decided_request_frees_pending_slot(self, sql_store):
        team = _team(sql_store)
        first = _request(team.id, "bob")
        sql_store.insert_request(first)
        sql_store.write_request_status(first.id, RequestStatus.REJECTED, "leader")
        sql_store.insert_request(_request(team.id, "bob"))
        assert len(sql_store.list_requests(team_id=team.id, user_id="bob")) == 2

    def test_write_status_only_from_pending(self, sql_store):
        team = _team(sql_store)
        request = _request(team.id, "bob")
        sql_store.insert_request(request)
        assert sql_store.write_request_status(request.id, RequestStatus.REJECTED, "leader")
        assert not sql_store.write_request_status(request.id, RequestStatus.REJECTED, "leader")

    def test_list_requests_filters(self, sql_store):
        team = _team(sql_store)
        sql_store.insert_request(_request(team.id, "bob"))
        sql_store.insert_request(_request(team.id, "carol"))
        assert len(sql_store.list_requests(team_id=team.id, status=RequestStatus.PENDING)) == 2
        assert [r.user_id for r in sql_store.list_requests(user_id="carol")] == ["carol"]


class TestSqlAttendance:
    def test_upsert_and_read(self, sql_store):
        sql_store.upsert_attendance(AttendanceRecord(team_id="t", member_id="bob", day=1, present=False))
        sql_store.upsert_attendance(AttendanceRecord(team_id="t", member_id="bob", day=1, present=True))
        sql_store.upsert_attendance(AttendanceRecord(team_id="t", member_id="amy", day=2, present=False))
        records = sql_store.read_attendance("t")
        assert [(r.member_id, r.day, r.present) for r in records] == [
            ("bob", 1, True), ("amy", 2, False),
        ]

    def test_delete_team_cascades(self, sql_store):
        team = _team(sql_store)
        sql_store.insert_request(_request(team.id, "bob"))
        sql_store.upsert_attendance(AttendanceRecord(team_id=team.id, member_id="leader", day=1, present=True))
        assert sql_store.delete_team(team.id)
        assert sql_store.get_team(team.id) is None
        assert sql_store.team_of_user("leader") is None
        assert sql_store.list_requests(team_id=team.id) == []
        assert sql_store.read_attendance(team.id) == []
        assert not sql_store.delete_team(team.id)


# ============================================
# Services on the SQL store
# ============================================
class TestServicesOnSql:
    def test_full_workflow(self, sql_store, notifier):
        teams = TeamService(store=sql_store, notification_client=notifier)
        joins = JoinRequestService(store=sql_store, team_service=teams)
        attendance = AttendanceService(store=sql_store, violation_threshold=1)

        team_id = teams.create_team("leader", "Robo", "driver").value.id
        assert teams.add_member(team_id, "u1", "electronics").ok
        request = joins.submit_request(team_id, "u2", "programmer").value
        assert joins.accept_request(request.id, "leader").ok
        assert teams.add_member(team_id, "u3", "mechanics_designer").ok

        view = teams.get_team(team_id).value
        assert view["composition"]["core_complete"] is True
        assert view["roster_version"] == 4

        late = joins.submit_request(team_id, "u4", "driver").value
        assert joins.accept_request(late.id, "leader").error == ErrorKind.ROLE_ALREADY_TAKEN
        assert sql_store.read_request(late.id).status == RequestStatus.PENDING

        attendance.set_attendance(team_id, "u1", 1, False)
        attendance.set_attendance(team_id, "u1", 2, False)
        assert attendance.get_violations(team_id).value == ["u1"]

    def test_duplicate_leadership(self, sql_store, notifier):
        teams = TeamService(store=sql_store, notification_client=notifier)
        teams.create_team("leader", "Robo", "driver")
        assert teams.create_team("leader", "Again", "driver").error == ErrorKind.DUPLICATE_LEADERSHIP
