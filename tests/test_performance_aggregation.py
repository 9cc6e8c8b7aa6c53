from datetime import date

from app.schemas.performance import EmployeePerformance, PerformanceTrend
from app.services.performance.aggregation import distribution, rank, summarize


def _performance(name: str, overall: int, previous: int = 0, attendance: int = 100) -> EmployeePerformance:
    return EmployeePerformance(
        employee_id=name,
        employee_name=name,
        department="Engineering",
        role="employee",
        overall_score=overall,
        attendance_score=attendance,
        punctuality_score=attendance,
        leave_score=100,
        task_completion_score=85,
        total_working_days=20,
        days_present=20,
        days_absent=0,
        half_days=0,
        leave_days=0,
        trend=PerformanceTrend.stable,
        previous_score=previous,
        period_start=date(2025, 3, 1),
        period_end=date(2025, 3, 31),
    )


def test_empty_summary_defaults():
    summary = summarize([])

    assert summary.average_score == 0
    assert summary.attendance_rate == 0
    assert summary.top_performers == []
    assert summary.needs_improvement == []
    assert summary.distribution.model_dump() == {"excellent": 0, "good": 0, "average": 0, "needs_improvement": 0}
    assert summary.trend == PerformanceTrend.stable


def test_top_and_needs_improvement_for_small_team():
    members = [_performance("a", 60), _performance("b", 95), _performance("c", 40)]

    summary = summarize(members)

    assert [item.overall_score for item in summary.top_performers] == [95, 60, 40]
    assert [item.overall_score for item in summary.needs_improvement] == [60, 40]


def test_needs_improvement_capped_at_three():
    members = [_performance(str(index), 50 + index) for index in range(6)]

    summary = summarize(members)

    assert [item.overall_score for item in summary.needs_improvement] == [55, 54, 53]


def test_rank_is_stable_for_ties():
    members = [_performance("first", 80), _performance("second", 90), _performance("third", 80)]

    assert [item.employee_id for item in rank(members)] == ["second", "first", "third"]


def test_distribution_buckets():
    members = [_performance(str(score), score) for score in (90, 89, 75, 74, 60, 59, 100)]

    buckets = distribution(members)

    assert (buckets.excellent, buckets.good, buckets.average, buckets.needs_improvement) == (2, 2, 2, 1)


def test_summary_trend_uses_unrounded_means():
    # Means 80.0 vs 77.67: rounded 80 vs 78 would be stable, the real gap is 2.33.
    members = [_performance("a", 80, 77), _performance("b", 80, 78), _performance("c", 80, 78)]

    summary = summarize(members)

    assert summary.previous_average_score == 78
    assert summary.trend == PerformanceTrend.up


def test_summary_top_n():
    members = [_performance(str(score), score) for score in (70, 71, 72, 73, 74, 75)]

    assert len(summarize(members, top_n=5).top_performers) == 5
    assert summarize(members).average_score == 73
