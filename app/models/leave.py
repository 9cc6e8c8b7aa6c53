import enum
import uuid
from datetime import UTC, datetime
from datetime import date as date_type

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db import Base


class LeaveType(enum.Enum):
    sick = "sick"
    casual = "casual"
    earned = "earned"
    unpaid = "unpaid"


class LeaveStatus(enum.Enum):
    pending_manager = "pending_manager"
    pending_hr = "pending_hr"
    approved = "approved"
    rejected = "rejected"


class Leave(Base):
    __tablename__ = "leaves"
    __table_args__ = (Index("ix_leaves_employee_dates", "employee_id", "start_date", "end_date"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("employees.id"), nullable=False)
    leave_type: Mapped[LeaveType] = mapped_column(Enum(LeaveType), nullable=False)
    start_date: Mapped[date_type] = mapped_column(Date, nullable=False)
    end_date: Mapped[date_type] = mapped_column(Date, nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(Enum(LeaveStatus), default=LeaveStatus.pending_manager)
    reason: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC))

    employee = relationship("Employee")


class OfficialHoliday(Base):
    __tablename__ = "official_holidays"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    date: Mapped[date_type] = mapped_column(Date, nullable=False, unique=True)
