import enum
from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class PerformancePeriod(enum.Enum):
    weekly = "weekly"
    monthly = "monthly"
    quarterly = "quarterly"
    yearly = "yearly"


class PerformanceTrend(enum.Enum):
    up = "up"
    down = "down"
    stable = "stable"


class PerformanceFilter(BaseModel):
    period: PerformancePeriod | None = None
    start_date: date | None = None
    end_date: date | None = None


class EmployeePerformance(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: str
    employee_name: str
    department: str
    role: str
    overall_score: int
    attendance_score: int
    punctuality_score: int
    leave_score: int
    task_completion_score: int
    total_working_days: int
    days_present: int
    days_absent: int
    half_days: int
    leave_days: int
    approved_leave_days: int = 0
    trend: PerformanceTrend
    previous_score: int
    period_start: date
    period_end: date


class PerformanceDistribution(BaseModel):
    excellent: int = 0
    good: int = 0
    average: int = 0
    needs_improvement: int = 0


class TopPerformer(BaseModel):
    employee_id: str
    name: str
    score: int


class AttritionRate(BaseModel):
    rate: float
    left: int
    start_count: int


class TeamPerformance(BaseModel):
    team_id: str
    manager_id: str
    manager_name: str
    team_size: int
    average_score: int
    attendance_rate: int
    top_performers: list[EmployeePerformance]
    needs_improvement: list[EmployeePerformance]
    performance_distribution: PerformanceDistribution
    trend: PerformanceTrend


class TeamDashboard(BaseModel):
    manager_id: str
    manager_name: str
    manager_role: str
    period: PerformancePeriod
    period_start: date
    period_end: date
    team_size: int
    average_score: int
    previous_average_score: int
    trend: PerformanceTrend
    average_attendance: int
    average_leave_score: int
    average_task_completion: int
    attrition: AttritionRate
    performance_distribution: PerformanceDistribution
    top_performers: list[EmployeePerformance]
    needs_improvement: list[EmployeePerformance]
    members: list[EmployeePerformance]


class TeamOverview(BaseModel):
    manager_id: str
    manager_name: str
    manager_role: str
    team_size: int
    average_score: int
    previous_average_score: int
    trend: PerformanceTrend
    average_attendance: int
    attrition: AttritionRate
    performance_distribution: PerformanceDistribution


class DepartmentPerformance(BaseModel):
    department_id: str
    department: str
    employee_count: int
    average_score: int
    attendance_rate: int
    top_performer: TopPerformer | None = None
    top_performers: list[EmployeePerformance] = Field(default_factory=list)
    needs_improvement: list[EmployeePerformance] = Field(default_factory=list)
    performance_distribution: PerformanceDistribution = Field(default_factory=PerformanceDistribution)
    trend: PerformanceTrend


class TrendPoint(BaseModel):
    date: str
    period_start: date
    score: int
    attendance_rate: int
    employee_count: int


class CompanyPerformance(BaseModel):
    total_employees: int
    average_performance_score: int
    overall_attendance_rate: int
    department_performance: list[DepartmentPerformance]
    trends: list[TrendPoint]
    top_performers: list[EmployeePerformance]
    needs_improvement: list[EmployeePerformance]
    performance_distribution: PerformanceDistribution


class ChartDataset(BaseModel):
    label: str
    data: list[int]
    background_color: str | list[str] | None = None
    border_color: str | None = None


class ChartData(BaseModel):
    labels: list[str] = Field(default_factory=list)
    datasets: list[ChartDataset] = Field(default_factory=list)
