import uuid
from datetime import UTC, date, datetime

import pytest
from conftest import MARCH_FILTER, MARCH_WINDOW, TODAY, weekdays

from app.models.attendance import Attendance, AttendanceStatus
from app.models.employee import AccessRole, Employee, Role
from app.models.leave import Leave, LeaveStatus, LeaveType, OfficialHoliday
from app.models.resignation import Resignation, ResignationStatus
from app.models.tickets import Ticket, TicketStatus
from app.schemas.performance import PerformanceTrend
from app.services.performance import PerformanceEngine, SqlRecordProvider


def _employee(db_session, first_name, *, role=None, manager=None, access_role=AccessRole.employee) -> Employee:
    employee = Employee(
        first_name=first_name,
        last_name="Example",
        email=f"{first_name.lower()}-{uuid.uuid4().hex[:8]}@example.com",
        access_role=access_role,
        role_id=role.id if role else None,
        manager_id=manager.id if manager else None,
    )
    db_session.add(employee)
    db_session.flush()
    return employee


@pytest.fixture()
def org(db_session):
    engineering = Role(name="Engineering")
    archived = Role(name="Archived", is_active=False)
    db_session.add_all([engineering, archived])
    db_session.flush()

    manager = _employee(db_session, "Maya", role=engineering, access_role=AccessRole.manager)
    ada = _employee(db_session, "Ada", role=engineering, manager=manager)
    ben = _employee(db_session, "Ben", manager=manager)

    march = weekdays(MARCH_WINDOW)
    for day in march[:18]:
        db_session.add(Attendance(employee_id=ada.id, date=day, status=AttendanceStatus.present))
    for day in march[18:]:
        db_session.add(Attendance(employee_id=ada.id, date=day, status=AttendanceStatus.half_day))
    db_session.add(Attendance(employee_id=ada.id, date=date(2025, 4, 1), status=AttendanceStatus.present))

    db_session.add_all(
        [
            Leave(
                employee_id=ada.id,
                leave_type=LeaveType.casual,
                start_date=date(2025, 2, 27),
                end_date=date(2025, 3, 4),
                status=LeaveStatus.approved,
            ),
            Leave(
                employee_id=ada.id,
                leave_type=LeaveType.sick,
                start_date=date(2025, 3, 10),
                end_date=date(2025, 3, 11),
                status=LeaveStatus.pending_hr,
            ),
            OfficialHoliday(name="Spring Day", date=date(2025, 3, 8)),
            OfficialHoliday(name="New Year", date=date(2025, 1, 1)),
            Ticket(
                title="In window",
                assigned_to_employee_id=ada.id,
                status=TicketStatus.resolved,
                created_at=datetime(2025, 3, 28, 23, 30, tzinfo=UTC),
            ),
            Ticket(
                title="After window",
                assigned_to_employee_id=ada.id,
                status=TicketStatus.resolved,
                created_at=datetime(2025, 3, 29, 0, 0, tzinfo=UTC),
            ),
            Resignation(
                employee_id=ben.id,
                status=ResignationStatus.approved,
                last_working_day=date(2025, 3, 21),
            ),
        ]
    )
    db_session.flush()
    return {"engineering": engineering, "manager": manager, "ada": ada, "ben": ben}


def test_get_employee_maps_record(db_session, org):
    provider = SqlRecordProvider(db_session)

    record = provider.get_employee(str(org["ada"].id))

    assert record.id == str(org["ada"].id)
    assert record.name == "Ada Example"
    assert record.department == "Engineering"
    assert record.role == "employee"
    assert record.manager_id == str(org["manager"].id)


def test_get_employee_unknown_or_malformed(db_session, org):
    provider = SqlRecordProvider(db_session)

    assert provider.get_employee(str(uuid.uuid4())) is None
    assert provider.get_employee("not-a-uuid") is None
    assert provider.get_attendance("not-a-uuid", MARCH_WINDOW) == []


def test_employee_without_role_is_unassigned(db_session, org):
    record = SqlRecordProvider(db_session).get_employee(str(org["ben"].id))

    assert record.department == "Unassigned"
    assert record.role_group_id is None


def test_attendance_limited_to_window(db_session, org):
    rows = SqlRecordProvider(db_session).get_attendance(str(org["ada"].id), MARCH_WINDOW)

    assert len(rows) == 20
    assert rows[0].date == MARCH_WINDOW.start
    assert rows[-1].status == AttendanceStatus.half_day


def test_approved_leave_overlapping_window(db_session, org):
    leaves = SqlRecordProvider(db_session).get_approved_leave(str(org["ada"].id), MARCH_WINDOW)

    assert [(leave.start_date, leave.end_date) for leave in leaves] == [(date(2025, 2, 27), date(2025, 3, 4))]


def test_holidays_in_window(db_session, org):
    assert SqlRecordProvider(db_session).get_holidays(MARCH_WINDOW) == [date(2025, 3, 8)]


def test_tasks_include_whole_last_day(db_session, org):
    tasks = SqlRecordProvider(db_session).get_tasks(str(org["ada"].id), MARCH_WINDOW)

    assert len(tasks) == 1
    assert tasks[0].status == TicketStatus.resolved


def test_team_and_group_queries(db_session, org):
    provider = SqlRecordProvider(db_session)
    manager_id = str(org["manager"].id)

    assert [item.first_name for item in provider.get_direct_reports(manager_id)] == ["Ada", "Ben"]
    assert [item.name for item in provider.list_role_groups()] == ["Engineering"]
    assert [item.first_name for item in provider.get_employees_by_role_group(str(org["engineering"].id))] == [
        "Ada",
        "Maya",
    ]
    assert [item.first_name for item in provider.get_all_employees()] == ["Ada", "Ben", "Maya"]
    assert [item.id for item in provider.list_managers()] == [manager_id]


def test_team_resignations(db_session, org):
    resignations = SqlRecordProvider(db_session).get_team_resignations(str(org["manager"].id), MARCH_WINDOW)

    assert [(item.employee_id, item.status) for item in resignations] == [
        (str(org["ben"].id), ResignationStatus.approved)
    ]


def test_engine_over_sql_provider(db_session, org):
    engine = PerformanceEngine(SqlRecordProvider(db_session), today=TODAY, max_workers=2)

    ada = engine.compute_employee_performance(str(org["ada"].id), MARCH_FILTER)
    dashboard = engine.compute_team_dashboard(str(org["manager"].id), MARCH_FILTER)

    assert ada.overall_score == 98
    assert ada.task_completion_score == 100
    assert ada.approved_leave_days == 2
    assert ada.trend == PerformanceTrend.up
    assert dashboard.team_size == 2
    assert dashboard.attrition.left == 1
    assert dashboard.attrition.rate == 33.3


def test_record_name_joins_and_trims(db_session):
    solo = Employee(first_name="Cher", last_name="", email=f"cher-{uuid.uuid4().hex[:8]}@example.com")
    db_session.add(solo)
    db_session.flush()

    record = SqlRecordProvider(db_session).get_employee(str(solo.id))

    assert record.name == "Cher"
    assert not hasattr(solo, "full_name")
