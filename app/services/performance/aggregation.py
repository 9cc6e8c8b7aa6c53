from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from app.schemas.performance import EmployeePerformance, PerformanceDistribution, PerformanceTrend
from app.services.performance.scoring import determine_trend, round_score

EXCELLENT_THRESHOLD = 90
GOOD_THRESHOLD = 75
AVERAGE_THRESHOLD = 60
NEEDS_IMPROVEMENT_THRESHOLD = 70
NEEDS_IMPROVEMENT_LIMIT = 3


def mean(values: Iterable[int | float | Decimal]) -> Decimal:
    items = [Decimal(str(value)) if isinstance(value, float) else Decimal(value) for value in values]
    if not items:
        return Decimal(0)
    return sum(items, Decimal(0)) / Decimal(len(items))


def rounded_mean(values: Iterable[int | float | Decimal]) -> int:
    return round_score(mean(values))


def rank(performances: Iterable[EmployeePerformance]) -> list[EmployeePerformance]:
    """Descending by overall score; ties keep their input order."""
    return sorted(performances, key=lambda item: item.overall_score, reverse=True)


def distribution(performances: Iterable[EmployeePerformance]) -> PerformanceDistribution:
    buckets = PerformanceDistribution()
    for item in performances:
        score = item.overall_score
        if score >= EXCELLENT_THRESHOLD:
            buckets.excellent += 1
        elif score >= GOOD_THRESHOLD:
            buckets.good += 1
        elif score >= AVERAGE_THRESHOLD:
            buckets.average += 1
        else:
            buckets.needs_improvement += 1
    return buckets


def needs_improvement(ranked: Sequence[EmployeePerformance]) -> list[EmployeePerformance]:
    return [item for item in ranked if item.overall_score < NEEDS_IMPROVEMENT_THRESHOLD][:NEEDS_IMPROVEMENT_LIMIT]


@dataclass
class PerformanceSummary:
    ranked: list[EmployeePerformance] = field(default_factory=list)
    average_score: int = 0
    previous_average_score: int = 0
    attendance_rate: int = 0
    average_leave_score: int = 0
    average_task_completion: int = 0
    top_performers: list[EmployeePerformance] = field(default_factory=list)
    needs_improvement: list[EmployeePerformance] = field(default_factory=list)
    distribution: PerformanceDistribution = field(default_factory=PerformanceDistribution)
    trend: PerformanceTrend = PerformanceTrend.stable


def summarize(performances: Sequence[EmployeePerformance], top_n: int = 3) -> PerformanceSummary:
    """Roll member scores up into averages, rankings and a distribution.

    The trend compares unrounded means of the current and previous overall
    scores, so a group of members on the dead-band edge does not flip on a
    rounding artefact.
    """
    if not performances:
        return PerformanceSummary()
    ranked = rank(performances)
    current_mean = mean(item.overall_score for item in performances)
    previous_mean = mean(item.previous_score for item in performances)
    return PerformanceSummary(
        ranked=ranked,
        average_score=round_score(current_mean),
        previous_average_score=round_score(previous_mean),
        attendance_rate=rounded_mean(item.attendance_score for item in performances),
        average_leave_score=rounded_mean(item.leave_score for item in performances),
        average_task_completion=rounded_mean(item.task_completion_score for item in performances),
        top_performers=ranked[:top_n],
        needs_improvement=needs_improvement(ranked),
        distribution=distribution(performances),
        trend=determine_trend(current_mean, previous_mean),
    )
