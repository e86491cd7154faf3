# app/services/vehicle_service.py
"""
Vehicle directory: lookup, intake, edits and removal of vehicles.
VINs are upper-cased before every lookup so they match case-insensitively.
Status changes made through an edit are handed to the status coordinator.
"""

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.enums import NotificationType, TimelineEventType, VehicleStatus
from app.models.user import User
from app.models.vehicle import Vehicle
from app.schemas.vehicle import VehicleCreate
from app.services.notification_service import NotificationDispatcher
from app.services.status_service import StatusTransitionCoordinator, describe_vehicle
from app.services.timeline_service import TimelineRecorder
from app.utils.logger import get_logger
from app.utils.time import utc_now

logger = get_logger(__name__)

# Columns that are NOT NULL on the vehicles table
REQUIRED_FIELDS = ("year", "make", "model", "priority")


def normalize_vin(vin: str) -> str:
    return (vin or "").strip().upper()


def list_vehicles(db: Session, status: str = None, make: str = None, search: str = None,
                  priority: str = None, assigned_to_id: int = None, page: int = 1, limit: int = 50):
    """Returns (vehicles, total) for one page, newest intake first."""
    q = db.query(Vehicle)
    if status and status.upper() != "ALL":
        q = q.filter(Vehicle.status == status.upper())
    if make:
        q = q.filter(Vehicle.make.ilike(make))
    if priority:
        q = q.filter(Vehicle.priority == priority.upper())
    if assigned_to_id is not None:
        q = q.filter(Vehicle.assigned_to_id == assigned_to_id)
    if search:
        pattern = f"%{search.strip()}%"
        q = q.filter(or_(
            Vehicle.vin.ilike(pattern),
            Vehicle.make.ilike(pattern),
            Vehicle.model.ilike(pattern),
            Vehicle.stock_number.ilike(pattern),
        ))

    total = q.count()
    vehicles = (
        q.order_by(Vehicle.created_at.desc(), Vehicle.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return vehicles, total


def lookup_vehicle_by_vin(db: Session, vin: str):
    """Find a vehicle by VIN (any case). Returns None if not found."""
    return db.query(Vehicle).filter(Vehicle.vin == normalize_vin(vin)).first()


def get_vehicle_by_vin(db: Session, vin: str) -> Vehicle:
    vehicle = lookup_vehicle_by_vin(db, vin)
    if not vehicle:
        raise NotFoundError("Vehicle", normalize_vin(vin))
    return vehicle


def _check_assignee(db: Session, user_id):
    if user_id is None:
        return
    if not db.query(User).filter(User.id == user_id).first():
        raise ValidationError(f"Unknown assignee: user {user_id}")


def _actor_id(actor, vehicle):
    return actor.id if actor else vehicle.assigned_to_id


async def _notify_quietly(dispatcher: NotificationDispatcher, user_id: int, notification_type, text: str):
    """Notification failures are logged, never raised to the caller."""
    try:
        outcome = await dispatcher.notify_user(user_id, notification_type, text)
        return outcome.success
    except Exception as e:
        logger.error(f"[VEHICLE] Notification to user {user_id} failed: {e}", exc_info=True)
        return False


async def create_vehicle(db: Session, data: VehicleCreate, actor: User,
                         recorder: TimelineRecorder, dispatcher: NotificationDispatcher) -> Vehicle:
    vin = normalize_vin(data.vin)
    if lookup_vehicle_by_vin(db, vin):
        raise ConflictError(f"A vehicle with VIN {vin} already exists")
    _check_assignee(db, data.assigned_to_id)

    now = utc_now()
    fields = data.model_dump(mode="json")
    fields["vin"] = vin
    vehicle = Vehicle(**fields, created_at=now, updated_at=now)
    if vehicle.status == VehicleStatus.COMPLETED.value:
        vehicle.completed_at = now

    db.add(vehicle)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"A vehicle with VIN {vin} already exists")
    db.refresh(vehicle)
    logger.info(f"[VEHICLE] Checked in {vin} ({vehicle.year} {vehicle.make} {vehicle.model})")

    recorder.record(
        vehicle.id,
        TimelineEventType.CHECK_IN.value,
        f"Vehicle checked in. Initial status: {vehicle.status}.",
        department=vehicle.current_location,
        user_id=_actor_id(actor, vehicle),
    )
    if vehicle.assigned_to_id:
        await _notify_quietly(
            dispatcher, vehicle.assigned_to_id, NotificationType.NEW_VEHICLE_CHECK_IN,
            f"A new vehicle ({describe_vehicle(vehicle)}) has been assigned to you.",
        )
    return vehicle


async def update_vehicle(db: Session, vin: str, changes: dict, actor: User,
                         coordinator: StatusTransitionCoordinator) -> Vehicle:
    """
    Partial update of mutable fields. `changes` holds only the fields the caller sent.
    Location and assignee changes are recorded on the timeline; a status change goes
    through the coordinator so it gets its own event and notifications.
    """
    vehicle = get_vehicle_by_vin(db, vin)
    changes = dict(changes)
    changes.pop("vin", None)
    cleared = [name for name in REQUIRED_FIELDS if name in changes and changes[name] is None]
    if cleared:
        raise ValidationError(f"Field(s) cannot be null: {', '.join(cleared)}")
    new_status = changes.pop("status", None)
    if "assigned_to_id" in changes:
        _check_assignee(db, changes["assigned_to_id"])

    previous_location = vehicle.current_location
    previous_assignee = vehicle.assigned_to_id

    for key, value in changes.items():
        setattr(vehicle, key, value)
    if changes:
        vehicle.updated_at = utc_now()
        db.commit()

    recorder = coordinator.recorder
    if "current_location" in changes and vehicle.current_location != previous_location:
        recorder.record(
            vehicle.id,
            TimelineEventType.LOCATION_CHANGE.value,
            f"Location changed from {previous_location or 'N/A'} to {vehicle.current_location or 'N/A'}.",
            department=vehicle.current_location,
            user_id=_actor_id(actor, vehicle),
        )

    if "assigned_to_id" in changes and vehicle.assigned_to_id != previous_assignee:
        before = f"user ID {previous_assignee}" if previous_assignee else "unassigned"
        after = f"user ID {vehicle.assigned_to_id}" if vehicle.assigned_to_id else "unassigned"
        recorder.record(
            vehicle.id,
            TimelineEventType.ASSIGNMENT_UPDATE.value,
            f"Assigned from {before} to {after}.",
            department=vehicle.current_location,
            user_id=_actor_id(actor, vehicle),
        )
        if vehicle.assigned_to_id:
            await _notify_quietly(
                coordinator.dispatcher, vehicle.assigned_to_id, NotificationType.ASSIGNMENT_UPDATE,
                f"You have been assigned vehicle ({describe_vehicle(vehicle)}).",
            )

    if new_status is not None and new_status != vehicle.status:
        await coordinator.transition(vehicle.id, new_status, actor, {"source": "update"})

    db.refresh(vehicle)
    return vehicle


def delete_vehicle(db: Session, vin: str) -> str:
    """Hard delete. The vehicle's timeline goes with it."""
    vehicle = get_vehicle_by_vin(db, vin)
    deleted_vin = vehicle.vin
    db.delete(vehicle)
    db.commit()
    logger.warning(f"[VEHICLE] Deleted {deleted_vin}")
    return deleted_vin
