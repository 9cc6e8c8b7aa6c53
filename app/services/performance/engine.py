from __future__ import annotations

import concurrent.futures
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

from app.config import settings
from app.errors import EmployeeNotFoundError, PerformanceError
from app.models.resignation import ResignationStatus
from app.schemas.performance import (
    AttritionRate,
    ChartData,
    ChartDataset,
    CompanyPerformance,
    DepartmentPerformance,
    EmployeePerformance,
    PerformanceFilter,
    PerformancePeriod,
    TeamDashboard,
    TeamOverview,
    TeamPerformance,
    TopPerformer,
    TrendPoint,
)
from app.services.performance import scoring
from app.services.performance.aggregation import rank, rounded_mean, summarize
from app.services.performance.observability import AGGREGATE_LATENCY, EMPLOYEE_COMPUTATIONS
from app.services.performance.periods import DateRange, resolve_date_range, trailing_months
from app.services.performance.provider import EmployeeRecord, LeaveRecord, RecordProvider
from app.telemetry import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

COMPANY_TOP_PERFORMERS = 5
TREND_LABEL_FORMAT = "%b %Y"
ATTRITION_STATUSES = frozenset({ResignationStatus.approved, ResignationStatus.exit_complete})

SCORE_COLOR = "#7c3aed"
ATTENDANCE_COLOR = "#22c55e"
SCORE_FILL = "rgba(124, 58, 237, 0.2)"
ATTENDANCE_FILL = "rgba(34, 197, 94, 0.2)"
DISTRIBUTION_LABELS = ["Excellent (90+)", "Good (75-89)", "Average (60-74)", "Needs Improvement (<60)"]
DISTRIBUTION_COLORS = ["#22c55e", "#3b82f6", "#f59e0b", "#ef4444"]


@dataclass(frozen=True)
class ScoreOutcome:
    """Result of scoring one employee inside an aggregate."""

    employee_id: str
    performance: EmployeePerformance | None = None
    error: PerformanceError | None = None

    @property
    def ok(self) -> bool:
        return self.performance is not None


def _approved_leave_days(leaves: Sequence[LeaveRecord], window: DateRange, holidays: Sequence[date]) -> int:
    holiday_set = set(holidays)
    covered: set[date] = set()
    for leave in leaves:
        current = max(leave.start_date, window.start)
        last = min(leave.end_date, window.end)
        while current <= last:
            if current.weekday() < 5 and current not in holiday_set:
                covered.add(current)
            current += timedelta(days=1)
    return len(covered)


def _successes(outcomes: Sequence[ScoreOutcome]) -> list[EmployeePerformance]:
    return [outcome.performance for outcome in outcomes if outcome.performance is not None]


class PerformanceEngine:
    """Computes employee scores and rolls them up to teams, departments and the company.

    The engine is stateless between calls; all records come from ``provider``.
    ``today`` pins the clock used for period resolution and monthly series.
    """

    def __init__(
        self,
        provider: RecordProvider,
        *,
        today: date | None = None,
        max_workers: int | None = None,
        history_months: int | None = None,
    ):
        self.provider = provider
        self._today = today
        self.max_workers = max(1, max_workers if max_workers is not None else settings.performance_max_workers)
        self.history_months = history_months if history_months is not None else settings.performance_history_months

    def today(self) -> date:
        return self._today or datetime.now(UTC).date()

    def resolve_window(self, filters: PerformanceFilter | None = None) -> DateRange:
        return resolve_date_range(filters, self.today())

    def _require_employee(self, employee_id: str) -> EmployeeRecord:
        employee = self.provider.get_employee(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        return employee

    # ------------------------------------------------------------------
    # Employee
    # ------------------------------------------------------------------

    def compute_employee_performance(
        self, employee_id: str, filters: PerformanceFilter | None = None
    ) -> EmployeePerformance:
        return self._employee_performance(employee_id, self.resolve_window(filters))

    def _employee_performance(self, employee_id: str, window: DateRange) -> EmployeePerformance:
        employee = self._require_employee(employee_id)
        attendance = self.provider.get_attendance(employee.id, window)
        leaves = self.provider.get_approved_leave(employee.id, window)
        holidays = self.provider.get_holidays(window)
        tasks = self.provider.get_tasks(employee.id, window)

        total_working_days = scoring.working_days(window, holidays)
        tally = scoring.tally_attendance(record.status for record in attendance)
        attendance_score = scoring.attendance_score(tally.present, tally.half_days, total_working_days)
        leave_score = scoring.leave_score(tally.paid_leave, total_working_days)
        task_score = scoring.task_completion_score(
            scoring.count_resolved(task.status for task in tasks),
            len(tasks),
        )
        overall = scoring.overall_score(attendance_score, leave_score, task_score)
        previous = self._previous_score(employee.id, window)

        return EmployeePerformance(
            employee_id=employee.id,
            employee_name=employee.name,
            department=employee.department,
            role=employee.role,
            overall_score=overall,
            attendance_score=attendance_score,
            punctuality_score=attendance_score,
            leave_score=leave_score,
            task_completion_score=task_score,
            total_working_days=total_working_days,
            days_present=tally.present,
            days_absent=tally.absent,
            half_days=tally.half_days,
            leave_days=tally.paid_leave,
            approved_leave_days=_approved_leave_days(leaves, window, holidays),
            trend=scoring.determine_trend(overall, previous),
            previous_score=previous,
            period_start=window.start,
            period_end=window.end,
        )

    def _previous_score(self, employee_id: str, window: DateRange) -> int:
        # Prior window is scored from attendance only, without holidays.
        previous_window = window.shift_months(-1)
        records = self.provider.get_attendance(employee_id, previous_window)
        tally = scoring.tally_attendance(record.status for record in records)
        attendance_score = scoring.attendance_score(
            tally.present, tally.half_days, scoring.working_days(previous_window)
        )
        return scoring.placeholder_overall_score(attendance_score)

    def score_employees(
        self, employees: Sequence[EmployeeRecord], filters: PerformanceFilter | None = None
    ) -> list[ScoreOutcome]:
        return self._score_employees(employees, self.resolve_window(filters))

    def _score_employees(self, employees: Sequence[EmployeeRecord], window: DateRange) -> list[ScoreOutcome]:
        def _score(employee_id: str) -> ScoreOutcome:
            try:
                performance = self._employee_performance(employee_id, window)
            except PerformanceError as exc:
                EMPLOYEE_COMPUTATIONS.labels(status="skipped").inc()
                logger.warning("performance_employee_skipped employee_id=%s code=%s", employee_id, exc.code)
                return ScoreOutcome(employee_id=employee_id, error=exc)
            EMPLOYEE_COMPUTATIONS.labels(status="success").inc()
            return ScoreOutcome(employee_id=employee_id, performance=performance)

        employee_ids = [employee.id for employee in employees]
        if self.max_workers > 1 and len(employee_ids) > 1:
            workers = min(self.max_workers, len(employee_ids))
            with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
                return list(executor.map(_score, employee_ids))
        return [_score(employee_id) for employee_id in employee_ids]

    def compute_all_employees(self, filters: PerformanceFilter | None = None) -> list[EmployeePerformance]:
        window = self.resolve_window(filters)
        with AGGREGATE_LATENCY.labels(scope="all_employees").time():
            employees = self.provider.get_all_employees()
            return rank(_successes(self._score_employees(employees, window)))

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    def compute_team_performance(self, manager_id: str, filters: PerformanceFilter | None = None) -> TeamPerformance:
        window = self.resolve_window(filters)
        with (
            AGGREGATE_LATENCY.labels(scope="team").time(),
            tracer.start_as_current_span("performance.team", attributes={"performance.manager_id": manager_id}) as span,
        ):
            manager = self._require_employee(manager_id)
            reports = self.provider.get_direct_reports(manager.id)
            summary = summarize(_successes(self._score_employees(reports, window)))
            span.set_attribute("performance.team_size", len(reports))
            logger.debug(
                "performance_team manager_id=%s team_size=%s average=%s",
                manager.id,
                len(reports),
                summary.average_score,
            )
            return TeamPerformance(
                team_id=manager.id,
                manager_id=manager.id,
                manager_name=manager.name,
                team_size=len(reports),
                average_score=summary.average_score,
                attendance_rate=summary.attendance_rate,
                top_performers=summary.top_performers,
                needs_improvement=summary.needs_improvement,
                performance_distribution=summary.distribution,
                trend=summary.trend,
            )

    def compute_team_attrition(self, manager_id: str, window: DateRange) -> AttritionRate:
        """Share of the team that left during ``window``.

        The team size at the start of the window is approximated as the
        current head count plus everyone who left.
        """
        current = len(self.provider.get_direct_reports(manager_id))
        left = sum(
            1
            for resignation in self.provider.get_team_resignations(manager_id, window)
            if resignation.status in ATTRITION_STATUSES and resignation.last_working_day in window
        )
        start_count = current + left
        if start_count <= 0:
            return AttritionRate(rate=0.0, left=left, start_count=start_count)
        rate = scoring.round_half_up(Decimal(left) / Decimal(start_count) * 100, 1)
        return AttritionRate(rate=float(rate), left=left, start_count=start_count)

    def compute_team_dashboard(self, manager_id: str, filters: PerformanceFilter | None = None) -> TeamDashboard:
        filters = filters or PerformanceFilter()
        window = self.resolve_window(filters)
        with (
            AGGREGATE_LATENCY.labels(scope="team_dashboard").time(),
            tracer.start_as_current_span(
                "performance.team_dashboard", attributes={"performance.manager_id": manager_id}
            ),
        ):
            return self._team_dashboard(manager_id, window, filters.period or PerformancePeriod.monthly)

    def _team_dashboard(self, manager_id: str, window: DateRange, period: PerformancePeriod) -> TeamDashboard:
        manager = self._require_employee(manager_id)
        reports = self.provider.get_direct_reports(manager.id)
        summary = summarize(_successes(self._score_employees(reports, window)))
        return TeamDashboard(
            manager_id=manager.id,
            manager_name=manager.name,
            manager_role=manager.department if manager.role_group_id else "",
            period=period,
            period_start=window.start,
            period_end=window.end,
            team_size=len(reports),
            average_score=summary.average_score,
            previous_average_score=summary.previous_average_score,
            trend=scoring.determine_trend(summary.average_score, summary.previous_average_score),
            average_attendance=summary.attendance_rate,
            average_leave_score=summary.average_leave_score,
            average_task_completion=summary.average_task_completion,
            attrition=self.compute_team_attrition(manager.id, window),
            performance_distribution=summary.distribution,
            top_performers=summary.top_performers,
            needs_improvement=summary.needs_improvement,
            members=summary.ranked,
        )

    def compute_all_teams(self, filters: PerformanceFilter | None = None) -> list[TeamOverview]:
        filters = filters or PerformanceFilter()
        window = self.resolve_window(filters)
        period = filters.period or PerformancePeriod.monthly
        with (
            AGGREGATE_LATENCY.labels(scope="all_teams").time(),
            tracer.start_as_current_span("performance.all_teams") as span,
        ):
            overviews: list[TeamOverview] = []
            for manager in self.provider.list_managers():
                try:
                    dashboard = self._team_dashboard(manager.id, window, period)
                except PerformanceError as exc:
                    logger.warning("performance_team_skipped manager_id=%s code=%s", manager.id, exc.code)
                    continue
                overviews.append(
                    TeamOverview(
                        manager_id=dashboard.manager_id,
                        manager_name=dashboard.manager_name,
                        manager_role=dashboard.manager_role,
                        team_size=dashboard.team_size,
                        average_score=dashboard.average_score,
                        previous_average_score=dashboard.previous_average_score,
                        trend=dashboard.trend,
                        average_attendance=dashboard.average_attendance,
                        attrition=dashboard.attrition,
                        performance_distribution=dashboard.performance_distribution,
                    )
                )
            span.set_attribute("performance.team_count", len(overviews))
            return sorted(overviews, key=lambda item: item.average_score, reverse=True)

    # ------------------------------------------------------------------
    # Departments and company
    # ------------------------------------------------------------------

    def compute_department_performance(
        self, filters: PerformanceFilter | None = None
    ) -> list[DepartmentPerformance]:
        window = self.resolve_window(filters)
        with (
            AGGREGATE_LATENCY.labels(scope="department").time(),
            tracer.start_as_current_span("performance.departments"),
        ):
            return self._department_performance(window)

    def _department_performance(self, window: DateRange) -> list[DepartmentPerformance]:
        results: list[DepartmentPerformance] = []
        for group in self.provider.list_role_groups():
            employees = self.provider.get_employees_by_role_group(group.id)
            if not employees:
                continue
            performances = _successes(self._score_employees(employees, window))
            if not performances:
                logger.info("performance_department_empty department=%s", group.name)
                continue
            summary = summarize(performances)
            leader = summary.ranked[0]
            results.append(
                DepartmentPerformance(
                    department_id=group.id,
                    department=group.name,
                    employee_count=len(employees),
                    average_score=summary.average_score,
                    attendance_rate=summary.attendance_rate,
                    top_performer=TopPerformer(
                        employee_id=leader.employee_id, name=leader.employee_name, score=leader.overall_score
                    ),
                    top_performers=summary.top_performers,
                    needs_improvement=summary.needs_improvement,
                    performance_distribution=summary.distribution,
                    trend=summary.trend,
                )
            )
        return sorted(results, key=lambda item: item.average_score, reverse=True)

    def compute_company_performance(self, filters: PerformanceFilter | None = None) -> CompanyPerformance:
        window = self.resolve_window(filters)
        with (
            AGGREGATE_LATENCY.labels(scope="company").time(),
            tracer.start_as_current_span("performance.company") as span,
        ):
            employees = self.provider.get_all_employees()
            performances = _successes(self._score_employees(employees, window))
            summary = summarize(performances, top_n=COMPANY_TOP_PERFORMERS)
            departments = self._department_performance(window)
            trends = self._trend_series(self.history_months)
            span.set_attribute("performance.employee_count", len(employees))
            logger.info(
                "performance_company employees=%s scored=%s average=%s",
                len(employees),
                len(performances),
                summary.average_score,
            )
            return CompanyPerformance(
                total_employees=len(employees),
                average_performance_score=summary.average_score,
                overall_attendance_rate=summary.attendance_rate,
                department_performance=departments,
                trends=trends,
                top_performers=summary.top_performers,
                needs_improvement=summary.needs_improvement,
                performance_distribution=summary.distribution,
            )

    # ------------------------------------------------------------------
    # Monthly series
    # ------------------------------------------------------------------

    def compute_trend_series(self, months: int | None = None) -> list[TrendPoint]:
        with (
            AGGREGATE_LATENCY.labels(scope="trend").time(),
            tracer.start_as_current_span("performance.trend"),
        ):
            return self._trend_series(months if months is not None else self.history_months)

    def _trend_series(self, months: int) -> list[TrendPoint]:
        employees = self.provider.get_all_employees()
        points: list[TrendPoint] = []
        for month in trailing_months(self.today(), months):
            month_working_days = scoring.working_days(month)
            attendance_scores: list[int] = []
            overall_scores: list[int] = []
            for employee in employees:
                records = self.provider.get_attendance(employee.id, month)
                if not records:
                    continue
                tally = scoring.tally_attendance(record.status for record in records)
                attendance_score = scoring.attendance_score(tally.present, tally.half_days, month_working_days)
                attendance_scores.append(attendance_score)
                overall_scores.append(scoring.placeholder_overall_score(attendance_score))
            points.append(
                TrendPoint(
                    date=month.start.strftime(TREND_LABEL_FORMAT),
                    period_start=month.start,
                    score=rounded_mean(overall_scores),
                    attendance_rate=rounded_mean(attendance_scores),
                    employee_count=len(employees),
                )
            )
        return points

    def compute_employee_history(self, employee_id: str, months: int | None = None) -> list[TrendPoint]:
        employee = self._require_employee(employee_id)
        points: list[TrendPoint] = []
        for month in trailing_months(self.today(), months if months is not None else self.history_months):
            month_working_days = scoring.working_days(month)
            tally = scoring.tally_attendance(
                record.status for record in self.provider.get_attendance(employee.id, month)
            )
            attendance_score = scoring.attendance_score(tally.present, tally.half_days, month_working_days)
            leave_score = scoring.leave_score(tally.paid_leave, month_working_days)
            points.append(
                TrendPoint(
                    date=month.start.strftime(TREND_LABEL_FORMAT),
                    period_start=month.start,
                    score=scoring.overall_score(attendance_score, leave_score, scoring.PLACEHOLDER_TASK_SCORE),
                    attendance_rate=attendance_score,
                    employee_count=1,
                )
            )
        return points

    # ------------------------------------------------------------------
    # Charts
    # ------------------------------------------------------------------

    def compute_chart_data(self, chart_type: str, filters: PerformanceFilter | None = None) -> ChartData:
        if chart_type == "department":
            departments = self.compute_department_performance(filters)
            return ChartData(
                labels=[item.department for item in departments],
                datasets=[
                    ChartDataset(
                        label="Performance Score",
                        data=[item.average_score for item in departments],
                        background_color=SCORE_COLOR,
                        border_color=SCORE_COLOR,
                    ),
                    ChartDataset(
                        label="Attendance Rate",
                        data=[item.attendance_rate for item in departments],
                        background_color=ATTENDANCE_COLOR,
                        border_color=ATTENDANCE_COLOR,
                    ),
                ],
            )
        if chart_type == "trend":
            points = self.compute_trend_series()
            return ChartData(
                labels=[point.date for point in points],
                datasets=[
                    ChartDataset(
                        label="Performance Score",
                        data=[point.score for point in points],
                        background_color=SCORE_FILL,
                        border_color=SCORE_COLOR,
                    ),
                    ChartDataset(
                        label="Attendance Rate",
                        data=[point.attendance_rate for point in points],
                        background_color=ATTENDANCE_FILL,
                        border_color=ATTENDANCE_COLOR,
                    ),
                ],
            )
        if chart_type == "distribution":
            window = self.resolve_window(filters)
            employees = self.provider.get_all_employees()
            buckets = summarize(_successes(self._score_employees(employees, window))).distribution
            return ChartData(
                labels=list(DISTRIBUTION_LABELS),
                datasets=[
                    ChartDataset(
                        label="Employees",
                        data=[buckets.excellent, buckets.good, buckets.average, buckets.needs_improvement],
                        background_color=list(DISTRIBUTION_COLORS),
                    )
                ],
            )
        logger.info("performance_chart_unknown chart_type=%s", chart_type)
        return ChartData()
