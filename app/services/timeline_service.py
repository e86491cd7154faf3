# app/services/timeline_service.py
"""
Timeline recorder: appends immutable audit events to a vehicle's history.
Events are only ever inserted; nothing in the application updates or deletes them
(they disappear only with their vehicle). Ordering for display is newest first.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.errors import InternalError, NotFoundError, ValidationError
from app.models.timeline_event import TimelineEvent
from app.models.vehicle import Vehicle
from app.utils.logger import get_logger
from app.utils.time import utc_now

logger = get_logger(__name__)


class TimelineRecorder:
    def __init__(self, db: Session):
        self.db = db

    def record(self, vehicle_id: int, event_type: str, description: str = None,
               department: str = None, user_id: int = None) -> TimelineEvent:
        """Append one event. Fails with NotFoundError if the vehicle does not exist."""
        if not event_type:
            raise ValidationError("Event type is required")

        vehicle = self.db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
        if not vehicle:
            raise NotFoundError("Vehicle", vehicle_id)

        event = TimelineEvent(
            vehicle_id=vehicle_id,
            event_type=event_type,
            description=description,
            department=department,
            user_id=user_id,
            timestamp=utc_now(),
        )
        self.db.add(event)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[TIMELINE] Could not record {event_type} for vehicle {vehicle_id}: {e}")
            raise InternalError("Could not record timeline event")
        self.db.refresh(event)
        logger.info(f"[TIMELINE] vehicle={vehicle.vin} type={event_type} | {description or ''}")
        return event

    def list_events(self, vehicle_id: int = None, user_id: int = None, event_type: str = None,
                    page: int = 1, limit: int = 50):
        """Returns (events, total) matching the filters, newest first."""
        q = self.db.query(TimelineEvent)
        if vehicle_id is not None:
            q = q.filter(TimelineEvent.vehicle_id == vehicle_id)
        if user_id is not None:
            q = q.filter(TimelineEvent.user_id == user_id)
        if event_type and event_type != "ALL":
            q = q.filter(TimelineEvent.event_type == event_type)

        total = q.count()
        events = (
            q.order_by(TimelineEvent.timestamp.desc(), TimelineEvent.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return events, total
