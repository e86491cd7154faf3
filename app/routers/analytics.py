# app/routers/analytics.py
"""Analytics dashboards: pipeline overview, department activity, completion trend, team performance."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.deps import get_current_user
from app.models.user import User
from app.schemas.analytics import DepartmentMetricOut, OverviewOut, TeamPerformanceOut, TrendPointOut
from app.services import analytics_service
from app.services.policy import Action, policy

router = APIRouter()


@router.get("/analytics/overview", response_model=OverviewOut, summary="Pipeline totals")
def get_overview(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    policy.require(user, Action.ANALYTICS_READ)
    return analytics_service.overall(db)


@router.get("/analytics/departments", response_model=list[DepartmentMetricOut],
            summary="Activity per department")
def get_department_metrics(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    policy.require(user, Action.ANALYTICS_READ)
    return analytics_service.department_metrics(db)


@router.get("/analytics/trend", response_model=list[TrendPointOut], summary="Completions per day")
def get_completion_trend(
    days: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    policy.require(user, Action.ANALYTICS_READ)
    return analytics_service.completion_trend(db, days=days)


@router.get("/analytics/teams/{team_id}", response_model=TeamPerformanceOut, summary="One team's performance")
def get_team_performance(team_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    policy.require(user, Action.ANALYTICS_READ)
    return analytics_service.team_performance(db, team_id)
