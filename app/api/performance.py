from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_performance_engine
from app.schemas.performance import (
    ChartData,
    CompanyPerformance,
    DepartmentPerformance,
    EmployeePerformance,
    PerformanceFilter,
    PerformancePeriod,
    TeamDashboard,
    TeamOverview,
    TeamPerformance,
    TrendPoint,
)
from app.services.performance import PerformanceEngine

router = APIRouter(prefix="/performance", tags=["performance"])


def performance_filters(
    period: PerformancePeriod | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
) -> PerformanceFilter:
    return PerformanceFilter(period=period, start_date=start_date, end_date=end_date)


@router.get("/employees", response_model=list[EmployeePerformance])
def list_employee_performance(
    filters: PerformanceFilter = Depends(performance_filters),
    engine: PerformanceEngine = Depends(get_performance_engine),
):
    return engine.compute_all_employees(filters)


@router.get("/employees/{employee_id}", response_model=EmployeePerformance)
def get_employee_performance(
    employee_id: str,
    filters: PerformanceFilter = Depends(performance_filters),
    engine: PerformanceEngine = Depends(get_performance_engine),
):
    return engine.compute_employee_performance(employee_id, filters)


@router.get("/employees/{employee_id}/history", response_model=list[TrendPoint])
def employee_history(
    employee_id: str,
    months: int = Query(6, ge=1, le=24),
    engine: PerformanceEngine = Depends(get_performance_engine),
):
    return engine.compute_employee_history(employee_id, months)


@router.get("/teams", response_model=list[TeamOverview])
def list_teams(
    filters: PerformanceFilter = Depends(performance_filters),
    engine: PerformanceEngine = Depends(get_performance_engine),
):
    return engine.compute_all_teams(filters)


@router.get("/teams/{manager_id}", response_model=TeamPerformance)
def get_team_performance(
    manager_id: str,
    filters: PerformanceFilter = Depends(performance_filters),
    engine: PerformanceEngine = Depends(get_performance_engine),
):
    return engine.compute_team_performance(manager_id, filters)


@router.get("/teams/{manager_id}/dashboard", response_model=TeamDashboard)
def get_team_dashboard(
    manager_id: str,
    filters: PerformanceFilter = Depends(performance_filters),
    engine: PerformanceEngine = Depends(get_performance_engine),
):
    return engine.compute_team_dashboard(manager_id, filters)


@router.get("/departments", response_model=list[DepartmentPerformance])
def list_department_performance(
    filters: PerformanceFilter = Depends(performance_filters),
    engine: PerformanceEngine = Depends(get_performance_engine),
):
    return engine.compute_department_performance(filters)


@router.get("/company", response_model=CompanyPerformance)
def get_company_performance(
    filters: PerformanceFilter = Depends(performance_filters),
    engine: PerformanceEngine = Depends(get_performance_engine),
):
    return engine.compute_company_performance(filters)


@router.get("/trends", response_model=list[TrendPoint])
def performance_trends(
    months: int = Query(6, ge=1, le=24),
    engine: PerformanceEngine = Depends(get_performance_engine),
):
    return engine.compute_trend_series(months)


@router.get("/chart/{chart_type}", response_model=ChartData)
def performance_chart(
    chart_type: str,
    filters: PerformanceFilter = Depends(performance_filters),
    engine: PerformanceEngine = Depends(get_performance_engine),
):
    return engine.compute_chart_data(chart_type, filters)
