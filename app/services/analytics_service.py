# app/services/analytics_service.py
"""
Dashboard aggregates: overall pipeline numbers, per-department activity,
the daily completion trend and team performance. Day arithmetic is done in
Python so the same queries work on PostgreSQL and SQLite.
"""

from datetime import date, datetime, time, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.enums import VehicleStatus
from app.models.user import User
from app.models.timeline_event import TimelineEvent
from app.models.vehicle import Vehicle
from app.services.team_service import get_team
from app.utils.time import utc_now

RECENT_COMPLETION_DAYS = 30
TEAM_PERFORMANCE_MONTHS = 6


def overall(db: Session) -> dict:
    total = db.query(func.count(Vehicle.id)).scalar() or 0
    by_status = {status: 0 for status in VehicleStatus.values()}
    for status, count in db.query(Vehicle.status, func.count(Vehicle.id)).group_by(Vehicle.status).all():
        by_status[status] = count

    since = utc_now() - timedelta(days=RECENT_COMPLETION_DAYS)
    completed_recent = db.query(func.count(Vehicle.id)).filter(
        Vehicle.completed_at != None,  # noqa: E711
        Vehicle.completed_at >= since,
    ).scalar() or 0

    completed = db.query(Vehicle.created_at, Vehicle.completed_at).filter(
        Vehicle.completed_at != None,  # noqa: E711
    ).all()
    durations = [(done - created).total_seconds() / 86400 for created, done in completed]
    avg_days = sum(durations) / len(durations) if durations else 0

    total_cost = db.query(func.coalesce(func.sum(Vehicle.reconditioning_cost), 0)).filter(
        Vehicle.status == VehicleStatus.COMPLETED.value,
    ).scalar() or 0

    return {
        "total_vehicles": total,
        "by_status": by_status,
        "vehicles_in_progress": by_status[VehicleStatus.IN_PROGRESS.value],
        "completed_last_30_days": completed_recent,
        "avg_recon_days": round(avg_days, 1),
        "total_recon_cost": round(float(total_cost), 2),
    }


def department_metrics(db: Session) -> list:
    """One row per department seen on the timeline, busiest first."""
    rows = (
        db.query(TimelineEvent.department, func.count(TimelineEvent.id))
        .filter(TimelineEvent.department != None)  # noqa: E711
        .group_by(TimelineEvent.department)
        .order_by(func.count(TimelineEvent.id).desc())
        .all()
    )
    metrics = []
    for department, event_count in rows:
        vehicles_count = db.query(func.count(Vehicle.id)).filter(
            Vehicle.current_location == department,
        ).scalar() or 0
        completed_count = db.query(func.count(Vehicle.id)).filter(
            Vehicle.current_location == department,
            Vehicle.status == VehicleStatus.COMPLETED.value,
        ).scalar() or 0
        metrics.append({
            "department": department,
            "event_count": event_count,
            "vehicles_count": vehicles_count,
            "completed_count": completed_count,
        })
    return metrics


def completion_trend(db: Session, days: int = 30) -> list:
    """Completions per calendar day for the last `days` days, oldest first, zero-filled."""
    today = utc_now().date()
    start = today - timedelta(days=days - 1)
    stamps = db.query(Vehicle.completed_at).filter(
        Vehicle.completed_at != None,  # noqa: E711
        Vehicle.completed_at >= datetime.combine(start, time.min),
    ).all()

    counts = {}
    for (completed_at,) in stamps:
        day = completed_at.date()
        counts[day] = counts.get(day, 0) + 1

    trend = []
    for offset in range(days):
        day: date = start + timedelta(days=offset)
        trend.append({"date": day.isoformat(), "completed": counts.get(day, 0)})
    return trend


def _average_days(vehicles) -> float:
    if not vehicles:
        return 0
    return round(sum(v.days_in_recon for v in vehicles) / len(vehicles), 1)


def _month_starts(today: date, months: int) -> list:
    """First day of each of the last `months` months, oldest first."""
    starts = []
    year, month = today.year, today.month
    for _ in range(months):
        starts.append(date(year, month, 1))
        year, month = (year, month - 1) if month > 1 else (year - 1, 12)
    return list(reversed(starts))


def team_performance(db: Session, team_id: int) -> dict:
    """
    Workload of a team's members: vehicles assigned to them, how many are done,
    average recon days of the completed ones, and a monthly view of the last six
    months keyed on completed_at.
    """
    team = get_team(db, team_id)
    member_ids = [user_id for (user_id,) in db.query(User.id).filter(User.team_id == team.id).all()]

    vehicles = db.query(Vehicle).filter(Vehicle.assigned_to_id.in_(member_ids)).all() if member_ids else []
    completed = [v for v in vehicles if v.status == VehicleStatus.COMPLETED.value]

    by_status = {status: 0 for status in VehicleStatus.values()}
    for vehicle in vehicles:
        by_status[vehicle.status] = by_status.get(vehicle.status, 0) + 1

    monthly = []
    starts = _month_starts(utc_now().date(), TEAM_PERFORMANCE_MONTHS)
    for i, start in enumerate(starts):
        end = starts[i + 1] if i + 1 < len(starts) else None
        in_month = [
            v for v in completed
            if v.completed_at and v.completed_at.date() >= start and (end is None or v.completed_at.date() < end)
        ]
        monthly.append({
            "month": start.strftime("%b %Y"),
            "completed": len(in_month),
            "avg_recon_days": _average_days(in_month),
        })

    return {
        "team_id": team.id,
        "team_name": team.name,
        "member_count": len(member_ids),
        "total_vehicles": len(vehicles),
        "completed": len(completed),
        "avg_recon_days": _average_days(completed),
        "completion_rate": round(len(completed) / len(vehicles) * 100, 1) if vehicles else 0,
        "by_status": by_status,
        "monthly": monthly,
    }
