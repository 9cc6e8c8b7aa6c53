import os
import uuid
from datetime import UTC, date, datetime, time

import pytest
from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.db import Base
from app.models.attendance import AttendanceStatus
from app.models.leave import LeaveType
from app.models.resignation import ResignationStatus
from app.models.tickets import TicketStatus
from app.schemas.performance import PerformanceFilter
from app.services.performance import PerformanceEngine
from app.services.performance.periods import DateRange
from app.services.performance.provider import (
    AttendanceRecord,
    EmployeeRecord,
    LeaveRecord,
    ResignationRecord,
    RoleGroup,
    TaskRecord,
)

load_dotenv(os.path.join(os.getcwd(), ".env"))

TODAY = date(2025, 3, 19)
# Mon 3 Mar .. Fri 28 Mar 2025: 20 weekdays; one month back is 3 Feb .. 28 Feb, also 20.
MARCH_WINDOW = DateRange(start=date(2025, 3, 3), end=date(2025, 3, 28))
MARCH_FILTER = PerformanceFilter(start_date=MARCH_WINDOW.start, end_date=MARCH_WINDOW.end)


def weekdays(window: DateRange) -> list[date]:
    return [day for day in window.days() if day.weekday() < 5]


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    return engine


@pytest.fixture()
def db_session(engine):
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(bind=connection, autoflush=False, autocommit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


class InMemoryRecords:
    """RecordProvider backed by plain lists, for engine tests."""

    def __init__(self):
        self.employees: list[EmployeeRecord] = []
        self.missing: set[str] = set()
        self.attendance: list[AttendanceRecord] = []
        self.leaves: list[LeaveRecord] = []
        self.holidays: list[date] = []
        self.tasks: dict[str, list[TaskRecord]] = {}
        self.role_groups: list[RoleGroup] = []
        self.resignations: list[ResignationRecord] = []

    # builders

    def add_role_group(self, name: str) -> RoleGroup:
        group = RoleGroup(id=str(uuid.uuid4()), name=name)
        self.role_groups.append(group)
        return group

    def add_employee(
        self,
        first_name: str,
        last_name: str = "Tester",
        *,
        group: RoleGroup | None = None,
        manager: EmployeeRecord | None = None,
        role: str = "employee",
    ) -> EmployeeRecord:
        employee = EmployeeRecord(
            id=str(uuid.uuid4()),
            first_name=first_name,
            last_name=last_name,
            department=group.name if group else "Unassigned",
            role=role,
            role_group_id=group.id if group else None,
            manager_id=manager.id if manager else None,
        )
        self.employees.append(employee)
        return employee

    def mark(self, employee: EmployeeRecord, days, status: AttendanceStatus = AttendanceStatus.present) -> None:
        for day in days:
            self.attendance.append(AttendanceRecord(employee_id=employee.id, date=day, status=status))

    def add_leave(self, employee: EmployeeRecord, start: date, end: date) -> None:
        self.leaves.append(
            LeaveRecord(employee_id=employee.id, start_date=start, end_date=end, leave_type=LeaveType.casual)
        )

    def add_tasks(self, employee: EmployeeRecord, *statuses: TicketStatus, day: date = MARCH_WINDOW.start) -> None:
        bucket = self.tasks.setdefault(employee.id, [])
        for status in statuses:
            bucket.append(
                TaskRecord(id=str(uuid.uuid4()), status=status, created_at=datetime.combine(day, time(9), tzinfo=UTC))
            )

    def add_resignation(self, employee: EmployeeRecord, status: ResignationStatus, last_working_day: date) -> None:
        self.resignations.append(
            ResignationRecord(employee_id=employee.id, status=status, last_working_day=last_working_day)
        )

    # RecordProvider

    def get_employee(self, employee_id):
        if employee_id in self.missing:
            return None
        return next((item for item in self.employees if item.id == employee_id), None)

    def get_attendance(self, employee_id, window):
        return [item for item in self.attendance if item.employee_id == employee_id and item.date in window]

    def get_approved_leave(self, employee_id, window):
        return [
            item
            for item in self.leaves
            if item.employee_id == employee_id and item.start_date <= window.end and item.end_date >= window.start
        ]

    def get_holidays(self, window):
        return [day for day in self.holidays if day in window]

    def get_tasks(self, employee_id, window):
        return [
            task
            for task in self.tasks.get(employee_id, [])
            if window.start <= task.created_at.date() <= window.end
        ]

    def get_direct_reports(self, manager_id):
        return [item for item in self.employees if item.manager_id == manager_id]

    def list_role_groups(self):
        return list(self.role_groups)

    def get_employees_by_role_group(self, role_group_id):
        return [item for item in self.employees if item.role_group_id == role_group_id]

    def get_all_employees(self):
        return list(self.employees)

    def list_managers(self):
        manager_ids = {item.manager_id for item in self.employees if item.manager_id}
        return [item for item in self.employees if item.id in manager_ids]

    def get_team_resignations(self, manager_id, window):
        report_ids = {item.id for item in self.employees if item.manager_id == manager_id}
        return [item for item in self.resignations if item.employee_id in report_ids]


@pytest.fixture()
def records():
    return InMemoryRecords()


@pytest.fixture()
def performance_engine(records):
    return PerformanceEngine(records, today=TODAY, max_workers=1, history_months=6)


@pytest.fixture()
def sample_team(records):
    """Manager with three reports scoring 94 (up), 84 (down) and 49 (stable) over MARCH_WINDOW."""
    engineering = records.add_role_group("Engineering")
    support = records.add_role_group("Support")
    manager = records.add_employee("Maya", "Lead", group=engineering, role="manager")

    ada = records.add_employee("Ada", "Lovelace", group=engineering, manager=manager)
    march = weekdays(MARCH_WINDOW)
    records.mark(ada, march[:18])
    records.mark(ada, march[18:], AttendanceStatus.half_day)

    ben = records.add_employee("Ben", "Okafor", group=support, manager=manager)
    february = weekdays(MARCH_WINDOW.shift_months(-1))
    records.mark(ben, february)
    records.mark(ben, march[:14])
    records.mark(ben, march[14:], AttendanceStatus.absent)

    cy = records.add_employee("Cy", "Park", group=support, manager=manager)
    records.mark(cy, march[:10])
    records.mark(cy, march[10:14], AttendanceStatus.paid_leave)
    records.mark(cy, march[14:17], AttendanceStatus.absent)
    records.mark(cy, march[17:], AttendanceStatus.absent_double_deduction)
    records.add_tasks(cy, TicketStatus.resolved, TicketStatus.closed, TicketStatus.open, TicketStatus.in_progress)

    return {"manager": manager, "ada": ada, "ben": ben, "cy": cy, "engineering": engineering, "support": support}
