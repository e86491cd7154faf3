# app/schemas/analytics.py
from pydantic import BaseModel


class OverviewOut(BaseModel):
    total_vehicles: int
    by_status: dict[str, int]
    vehicles_in_progress: int
    completed_last_30_days: int
    avg_recon_days: float
    total_recon_cost: float


class DepartmentMetricOut(BaseModel):
    department: str
    event_count: int
    vehicles_count: int
    completed_count: int


class TrendPointOut(BaseModel):
    date: str
    completed: int


class MonthlyPerformanceOut(BaseModel):
    month: str                # "Mar 2026"
    completed: int
    avg_recon_days: float


class TeamPerformanceOut(BaseModel):
    team_id: int
    team_name: str
    member_count: int
    total_vehicles: int
    completed: int
    avg_recon_days: float
    completion_rate: float    # percent
    by_status: dict[str, int]
    monthly: list[MonthlyPerformanceOut]
