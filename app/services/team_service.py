# app/services/team_service.py
"""
Teams and vehicle assignments.
A vehicle can be handed to several teams but to each team only once. Naming a
member on the assignment also makes that member the vehicle's assignee.
"""

from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.enums import Priority, TimelineEventType
from app.models.team import Team
from app.models.user import User
from app.models.vehicle_assignment import VehicleAssignment
from app.services import vehicle_service
from app.services.status_service import StatusTransitionCoordinator
from app.utils.logger import get_logger
from app.utils.time import utc_now

logger = get_logger(__name__)


def list_teams(db: Session) -> list:
    return db.query(Team).order_by(Team.name).all()


def get_team(db: Session, team_id: int) -> Team:
    team = db.query(Team).filter(Team.id == team_id).first()
    if not team:
        raise NotFoundError("Team", team_id)
    return team


def create_team(db: Session, name: str, description: str = None, department: str = None) -> Team:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Team name is required.")
    if db.query(Team).filter(Team.name == name).first():
        raise ConflictError(f"A team named {name} already exists")

    team = Team(name=name, description=description, department=department, created_at=utc_now())
    db.add(team)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"A team named {name} already exists")
    db.refresh(team)
    logger.info(f"[TEAM] Created team {team.id} ({name})")
    return team


def update_user_team(db: Session, user_id: int, team_id: int = None) -> User:
    """Moves a user to a team, or out of every team when team_id is None."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User", user_id)
    if team_id is not None:
        get_team(db, team_id)

    user.team_id = team_id
    user.updated_at = utc_now()
    db.commit()
    db.refresh(user)
    logger.info(f"[TEAM] User {user_id} moved to team {team_id}")
    return user


def list_assignments(db: Session) -> list:
    return (
        db.query(VehicleAssignment)
        .order_by(VehicleAssignment.created_at.desc(), VehicleAssignment.id.desc())
        .all()
    )


async def assign_vehicle_to_team(db: Session, vin: str, team_id: int, actor: User,
                                 coordinator: StatusTransitionCoordinator, user_id: int = None,
                                 priority: str = Priority.MEDIUM.value, due_date: date = None,
                                 notes: str = None) -> VehicleAssignment:
    vehicle = vehicle_service.get_vehicle_by_vin(db, vin)
    team = get_team(db, team_id)
    if priority not in [p.value for p in Priority]:
        raise ValidationError(f"Invalid priority: {priority}")
    if user_id is not None and not db.query(User).filter(User.id == user_id).first():
        raise ValidationError(f"Unknown assignee: user {user_id}")

    existing = db.query(VehicleAssignment).filter(
        VehicleAssignment.vehicle_id == vehicle.id,
        VehicleAssignment.team_id == team.id,
    ).first()
    if existing:
        raise ConflictError("Vehicle is already assigned to this team")

    assignment = VehicleAssignment(
        vehicle_id=vehicle.id,
        team_id=team.id,
        user_id=user_id,
        priority=priority,
        due_date=due_date,
        notes=notes,
        created_at=utc_now(),
    )
    db.add(assignment)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Vehicle is already assigned to this team")
    db.refresh(assignment)
    logger.info(f"[TEAM] {vehicle.vin} assigned to team {team.id} ({team.name})")

    coordinator.recorder.record(
        vehicle.id,
        TimelineEventType.ASSIGNMENT_UPDATE.value,
        f"Assigned to team {team.name}.",
        department=team.department or vehicle.current_location,
        user_id=actor.id if actor else None,
    )

    if user_id is not None and user_id != vehicle.assigned_to_id:
        await vehicle_service.update_vehicle(db, vehicle.vin, {"assigned_to_id": user_id}, actor, coordinator)

    db.refresh(assignment)
    return assignment
