"""Read-only record access for performance scoring.

The engine talks to a :class:`RecordProvider`; :class:`SqlRecordProvider`
backs it with the ORM and hands out frozen records so nothing downstream
holds on to session-bound objects.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from threading import Lock
from typing import Protocol

from sqlalchemy.orm import Session, joinedload

from app.models.attendance import Attendance, AttendanceStatus
from app.models.employee import Employee, Role
from app.models.leave import Leave, LeaveStatus, LeaveType, OfficialHoliday
from app.models.resignation import Resignation, ResignationStatus
from app.models.tickets import Ticket, TicketStatus
from app.services.common import coerce_uuid
from app.services.performance.periods import DateRange

UNASSIGNED_DEPARTMENT = "Unassigned"


@dataclass(frozen=True)
class EmployeeRecord:
    id: str
    first_name: str
    last_name: str
    department: str = UNASSIGNED_DEPARTMENT
    role: str = "employee"
    role_group_id: str | None = None
    manager_id: str | None = None

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class AttendanceRecord:
    employee_id: str
    date: date
    status: AttendanceStatus


@dataclass(frozen=True)
class LeaveRecord:
    employee_id: str
    start_date: date
    end_date: date
    leave_type: LeaveType


@dataclass(frozen=True)
class TaskRecord:
    id: str
    status: TicketStatus
    created_at: datetime


@dataclass(frozen=True)
class ResignationRecord:
    employee_id: str
    status: ResignationStatus
    last_working_day: date


@dataclass(frozen=True)
class RoleGroup:
    id: str
    name: str


class RecordProvider(Protocol):
    """Source of the employee, attendance, leave, holiday, task and resignation records."""

    def get_employee(self, employee_id: str) -> EmployeeRecord | None: ...

    def get_attendance(self, employee_id: str, window: DateRange) -> list[AttendanceRecord]: ...

    def get_approved_leave(self, employee_id: str, window: DateRange) -> list[LeaveRecord]: ...

    def get_holidays(self, window: DateRange) -> list[date]: ...

    def get_tasks(self, employee_id: str, window: DateRange) -> list[TaskRecord]: ...

    def get_direct_reports(self, manager_id: str) -> list[EmployeeRecord]: ...

    def list_role_groups(self) -> list[RoleGroup]: ...

    def get_employees_by_role_group(self, role_group_id: str) -> list[EmployeeRecord]: ...

    def get_all_employees(self) -> list[EmployeeRecord]: ...

    def list_managers(self) -> list[EmployeeRecord]: ...

    def get_team_resignations(self, manager_id: str, window: DateRange) -> list[ResignationRecord]: ...


def _employee_record(employee: Employee) -> EmployeeRecord:
    return EmployeeRecord(
        id=str(employee.id),
        first_name=employee.first_name,
        last_name=employee.last_name,
        department=employee.role.name if employee.role else UNASSIGNED_DEPARTMENT,
        role=employee.access_role.value if employee.access_role else "employee",
        role_group_id=str(employee.role_id) if employee.role_id else None,
        manager_id=str(employee.manager_id) if employee.manager_id else None,
    )


def _parse_id(value: str) -> uuid.UUID | None:
    try:
        return coerce_uuid(value)
    except ValueError:
        return None


def _window_bounds(window: DateRange) -> tuple[datetime, datetime]:
    start_at = datetime.combine(window.start, time.min, tzinfo=UTC)
    end_at = datetime.combine(window.end + timedelta(days=1), time.min, tzinfo=UTC)
    return start_at, end_at


class SqlRecordProvider:
    """RecordProvider over a SQLAlchemy session.

    A session is not thread-safe, so every query runs under an instance lock;
    engine fan-out can share one provider.
    """

    def __init__(self, db: Session):
        self.db = db
        self._lock = Lock()

    def _employees_query(self):
        return self.db.query(Employee).options(joinedload(Employee.role))

    def get_employee(self, employee_id: str) -> EmployeeRecord | None:
        pk = _parse_id(employee_id)
        if pk is None:
            return None
        with self._lock:
            employee = self._employees_query().filter(Employee.id == pk).first()
            return _employee_record(employee) if employee else None

    def get_attendance(self, employee_id: str, window: DateRange) -> list[AttendanceRecord]:
        pk = _parse_id(employee_id)
        if pk is None:
            return []
        with self._lock:
            rows = (
                self.db.query(Attendance)
                .filter(Attendance.employee_id == pk)
                .filter(Attendance.date >= window.start, Attendance.date <= window.end)
                .order_by(Attendance.date.asc())
                .all()
            )
            return [AttendanceRecord(employee_id=str(row.employee_id), date=row.date, status=row.status) for row in rows]

    def get_approved_leave(self, employee_id: str, window: DateRange) -> list[LeaveRecord]:
        pk = _parse_id(employee_id)
        if pk is None:
            return []
        with self._lock:
            rows = (
                self.db.query(Leave)
                .filter(Leave.employee_id == pk)
                .filter(Leave.status == LeaveStatus.approved)
                .filter(Leave.start_date <= window.end, Leave.end_date >= window.start)
                .order_by(Leave.start_date.asc())
                .all()
            )
            return [
                LeaveRecord(
                    employee_id=str(row.employee_id),
                    start_date=row.start_date,
                    end_date=row.end_date,
                    leave_type=row.leave_type,
                )
                for row in rows
            ]

    def get_holidays(self, window: DateRange) -> list[date]:
        with self._lock:
            rows = (
                self.db.query(OfficialHoliday.date)
                .filter(OfficialHoliday.date >= window.start, OfficialHoliday.date <= window.end)
                .order_by(OfficialHoliday.date.asc())
                .all()
            )
            return [row[0] for row in rows]

    def get_tasks(self, employee_id: str, window: DateRange) -> list[TaskRecord]:
        pk = _parse_id(employee_id)
        if pk is None:
            return []
        start_at, end_at = _window_bounds(window)
        with self._lock:
            rows = (
                self.db.query(Ticket)
                .filter(Ticket.assigned_to_employee_id == pk)
                .filter(Ticket.created_at >= start_at, Ticket.created_at < end_at)
                .order_by(Ticket.created_at.asc())
                .all()
            )
            return [TaskRecord(id=str(row.id), status=row.status, created_at=row.created_at) for row in rows]

    def get_direct_reports(self, manager_id: str) -> list[EmployeeRecord]:
        pk = _parse_id(manager_id)
        if pk is None:
            return []
        with self._lock:
            rows = (
                self._employees_query()
                .filter(Employee.manager_id == pk)
                .order_by(Employee.first_name.asc(), Employee.last_name.asc(), Employee.id.asc())
                .all()
            )
            return [_employee_record(row) for row in rows]

    def list_role_groups(self) -> list[RoleGroup]:
        with self._lock:
            rows = self.db.query(Role).filter(Role.is_active.is_(True)).order_by(Role.name.asc()).all()
            return [RoleGroup(id=str(row.id), name=row.name) for row in rows]

    def get_employees_by_role_group(self, role_group_id: str) -> list[EmployeeRecord]:
        pk = _parse_id(role_group_id)
        if pk is None:
            return []
        with self._lock:
            rows = (
                self._employees_query()
                .filter(Employee.role_id == pk)
                .order_by(Employee.first_name.asc(), Employee.last_name.asc(), Employee.id.asc())
                .all()
            )
            return [_employee_record(row) for row in rows]

    def get_all_employees(self) -> list[EmployeeRecord]:
        with self._lock:
            rows = (
                self._employees_query()
                .order_by(Employee.first_name.asc(), Employee.last_name.asc(), Employee.id.asc())
                .all()
            )
            return [_employee_record(row) for row in rows]

    def list_managers(self) -> list[EmployeeRecord]:
        with self._lock:
            manager_ids = [
                row[0]
                for row in self.db.query(Employee.manager_id).filter(Employee.manager_id.is_not(None)).distinct().all()
            ]
            if not manager_ids:
                return []
            rows = (
                self._employees_query()
                .filter(Employee.id.in_(manager_ids))
                .order_by(Employee.first_name.asc(), Employee.last_name.asc(), Employee.id.asc())
                .all()
            )
            return [_employee_record(row) for row in rows]

    def get_team_resignations(self, manager_id: str, window: DateRange) -> list[ResignationRecord]:
        pk = _parse_id(manager_id)
        if pk is None:
            return []
        with self._lock:
            rows = (
                self.db.query(Resignation)
                .join(Employee, Employee.id == Resignation.employee_id)
                .filter(Employee.manager_id == pk)
                .filter(Resignation.last_working_day >= window.start)
                .filter(Resignation.last_working_day <= window.end)
                .order_by(Resignation.last_working_day.asc())
                .all()
            )
            return [
                ResignationRecord(
                    employee_id=str(row.employee_id),
                    status=row.status,
                    last_working_day=row.last_working_day,
                )
                for row in rows
            ]
