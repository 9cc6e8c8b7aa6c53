import enum
import uuid
from datetime import UTC, datetime
from datetime import date as date_type

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db import Base


class AttendanceStatus(enum.Enum):
    present = "present"
    half_day = "half_day"
    absent = "absent"
    absent_double_deduction = "absent_double_deduction"
    paid_leave = "paid_leave"
    unpaid_leave = "unpaid_leave"
    official_holiday = "official_holiday"


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
        Index("ix_attendance_date", "date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("employees.id"), nullable=False)
    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    status: Mapped[AttendanceStatus] = mapped_column(Enum(AttendanceStatus), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC))

    employee = relationship("Employee")
