"""Score arithmetic for employee performance.

Every rounding step goes through :func:`round_half_up` on ``Decimal`` values,
so ties such as 93.5 always round away from zero and float representation
never shifts a band boundary.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from app.models.attendance import AttendanceStatus
from app.models.tickets import TicketStatus
from app.schemas.performance import PerformanceTrend
from app.services.performance.periods import DateRange

ATTENDANCE_WEIGHT = Decimal("0.4")
LEAVE_WEIGHT = Decimal("0.3")
TASK_WEIGHT = Decimal("0.3")

DEFAULT_TASK_SCORE = 85
# Fixed inputs used when scoring prior periods from attendance alone
PLACEHOLDER_LEAVE_SCORE = 80
PLACEHOLDER_TASK_SCORE = 85

TREND_DEAD_BAND = Decimal("2")

LEAVE_BANDS = (
    (Decimal("0.05"), 100),
    (Decimal("0.10"), 90),
    (Decimal("0.15"), 80),
    (Decimal("0.20"), 70),
)
LEAVE_SCORE_FLOOR = 50

Number = int | float | Decimal


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_half_up(value: Number, places: int = 0) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    return _to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def round_score(value: Number) -> int:
    return int(round_half_up(value))


@dataclass(frozen=True)
class AttendanceTally:
    present: int = 0
    half_days: int = 0
    absent: int = 0
    paid_leave: int = 0


def tally_attendance(statuses: Iterable[AttendanceStatus]) -> AttendanceTally:
    present = half_days = absent = paid_leave = 0
    for status in statuses:
        if status == AttendanceStatus.present:
            present += 1
        elif status == AttendanceStatus.half_day:
            half_days += 1
        elif status in (AttendanceStatus.absent, AttendanceStatus.absent_double_deduction):
            absent += 1
        elif status == AttendanceStatus.paid_leave:
            paid_leave += 1
    return AttendanceTally(present=present, half_days=half_days, absent=absent, paid_leave=paid_leave)


def working_days(window: DateRange, holidays: Iterable[date] = ()) -> int:
    """Weekdays in the window, less distinct holidays that land on a weekday inside it."""
    weekdays = sum(1 for day in window.days() if day.weekday() < 5)
    holiday_weekdays = {day for day in holidays if day in window and day.weekday() < 5}
    return weekdays - len(holiday_weekdays)


def attendance_score(present: int, half_days: int, working_day_count: int) -> int:
    if working_day_count <= 0:
        return 100
    effective = Decimal(present) + Decimal(half_days) * Decimal("0.5")
    return min(100, round_score(effective / Decimal(working_day_count) * 100))


def leave_score(leave_days: int, working_day_count: int) -> int:
    if working_day_count <= 0:
        return 100
    rate = Decimal(leave_days) / Decimal(working_day_count)
    for ceiling, score in LEAVE_BANDS:
        if rate <= ceiling:
            return score
    return max(LEAVE_SCORE_FLOOR, 100 - round_score(rate * 200))


def task_completion_score(resolved: int, total: int) -> int:
    if total <= 0:
        return DEFAULT_TASK_SCORE
    return round_score(Decimal(resolved) / Decimal(total) * 100)


def count_resolved(statuses: Iterable[TicketStatus]) -> int:
    return sum(1 for status in statuses if status == TicketStatus.resolved)


def overall_score(attendance: int, leave: int, task_completion: int = DEFAULT_TASK_SCORE) -> int:
    weighted = (
        Decimal(attendance) * ATTENDANCE_WEIGHT + Decimal(leave) * LEAVE_WEIGHT + Decimal(task_completion) * TASK_WEIGHT
    )
    return round_score(weighted)


def placeholder_overall_score(attendance: int) -> int:
    return overall_score(attendance, PLACEHOLDER_LEAVE_SCORE, PLACEHOLDER_TASK_SCORE)


def determine_trend(current: Number, previous: Number) -> PerformanceTrend:
    diff = _to_decimal(current) - _to_decimal(previous)
    if diff > TREND_DEAD_BAND:
        return PerformanceTrend.up
    if diff < -TREND_DEAD_BAND:
        return PerformanceTrend.down
    return PerformanceTrend.stable
