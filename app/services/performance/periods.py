"""Date windows used by performance scoring."""

from __future__ import annotations

import calendar
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, timedelta

from app.errors import InvalidDateRangeError
from app.schemas.performance import PerformanceFilter, PerformancePeriod


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-day window."""

    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def shift_months(self, months: int) -> DateRange:
        return DateRange(start=shift_months(self.start, months), end=shift_months(self.end, months))


def shift_months(day: date, months: int) -> date:
    """Move ``day`` by whole months, clamping to the last day of the target month."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def month_range(day: date) -> DateRange:
    last_day = calendar.monthrange(day.year, day.month)[1]
    return DateRange(start=day.replace(day=1), end=day.replace(day=last_day))


def period_range(period: PerformancePeriod, today: date) -> DateRange:
    if period == PerformancePeriod.weekly:
        monday = today - timedelta(days=today.weekday())
        return DateRange(start=monday, end=monday + timedelta(days=6))
    if period == PerformancePeriod.quarterly:
        first_month = ((today.month - 1) // 3) * 3 + 1
        start = date(today.year, first_month, 1)
        return DateRange(start=start, end=month_range(shift_months(start, 2)).end)
    if period == PerformancePeriod.yearly:
        return DateRange(start=date(today.year, 1, 1), end=date(today.year, 12, 31))
    return month_range(today)


def resolve_date_range(filters: PerformanceFilter | None, today: date) -> DateRange:
    """Explicit start/end dates win over the period enum; monthly is the default."""
    filters = filters or PerformanceFilter()
    if filters.start_date and filters.end_date:
        if filters.start_date > filters.end_date:
            raise InvalidDateRangeError(
                f"start_date {filters.start_date.isoformat()} is after end_date {filters.end_date.isoformat()}"
            )
        return DateRange(start=filters.start_date, end=filters.end_date)
    return period_range(filters.period or PerformancePeriod.monthly, today)


def trailing_months(today: date, months: int) -> list[DateRange]:
    """Calendar months ending with the one containing ``today``, oldest first."""
    return [month_range(shift_months(today, -offset)) for offset in range(max(months, 0) - 1, -1, -1)]
