# app/services/status_service.py
"""
Status transition coordinator.

One call = one sequential unit of work:
  1. validate the requested status and load the vehicle
  2. write the new status (stamping completed_at on the first COMPLETED)
  3. append a STATUS_CHANGE timeline event
  4. notify stakeholders (assignee, managers of the assignee's team, outbound webhook)

Steps 2 to 4 are not one transaction. A notification failure never undoes the status
write or the timeline event; it is logged and returned in notification_errors.
Any status may follow any other, and repeating the current status still records
an event and sends notifications. Concurrent calls on the same vehicle are not
serialised: last write wins.
"""

from dataclasses import dataclass, field
from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError
from app.models.enums import (
    NotificationChannel, NotificationType, TimelineEventType, UserRole, VehicleStatus,
)
from app.models.timeline_event import TimelineEvent
from app.models.user import User
from app.models.vehicle import Vehicle
from app.services.notification_service import NotificationDispatcher, NotificationMessage
from app.services.timeline_service import TimelineRecorder
from app.utils.logger import get_logger
from app.utils.time import utc_now

logger = get_logger(__name__)


@dataclass
class TransitionResult:
    vehicle: Vehicle
    event: TimelineEvent
    previous_status: str
    status_changed: bool
    notifications_sent: int = 0
    notification_errors: list = field(default_factory=list)

    @property
    def partial_success(self) -> bool:
        return bool(self.notification_errors)


def parse_status(value) -> VehicleStatus:
    try:
        return VehicleStatus(getattr(value, "value", value))
    except ValueError:
        raise ValidationError(
            f"Invalid status '{value}'. Expected one of: {', '.join(VehicleStatus.values())}"
        )


def notification_type_for(previous: str, new: VehicleStatus) -> NotificationType:
    if new == VehicleStatus.COMPLETED:
        return NotificationType.VEHICLE_COMPLETED
    if new == VehicleStatus.ON_HOLD:
        return NotificationType.VEHICLE_ON_HOLD
    if previous == VehicleStatus.ON_HOLD.value and new == VehicleStatus.IN_PROGRESS:
        return NotificationType.VEHICLE_BACK_IN_PROGRESS
    return NotificationType.STATUS_UPDATE


def describe_vehicle(vehicle: Vehicle) -> str:
    return f"{vehicle.year} {vehicle.make} {vehicle.model}, VIN: {vehicle.vin}"


class StatusTransitionCoordinator:
    def __init__(self, db: Session, recorder: TimelineRecorder, dispatcher: NotificationDispatcher):
        self.db = db
        self.recorder = recorder
        self.dispatcher = dispatcher

    async def transition(self, vehicle_id: int, new_status, actor: User = None,
                         context: dict = None) -> TransitionResult:
        context = context or {}
        status = parse_status(new_status)

        vehicle = self.db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
        if not vehicle:
            raise NotFoundError("Vehicle", vehicle_id)

        previous = vehicle.status
        changed = previous != status.value
        if changed:
            now = utc_now()
            vehicle.status = status.value
            vehicle.updated_at = now
            if status == VehicleStatus.COMPLETED and vehicle.completed_at is None:
                vehicle.completed_at = now
            self.db.commit()

        logger.info(
            f"[STATUS] {vehicle.vin}: {previous} → {status.value} "
            f"(changed={changed}, actor={actor.id if actor else None}, source={context.get('source', 'api')})"
        )

        description = f"Status changed from {previous} to {status.value}."
        if context.get("description"):
            description = f"{description} {context['description']}"
        event = self.recorder.record(
            vehicle.id,
            TimelineEventType.STATUS_CHANGE.value,
            description,
            department=vehicle.current_location,
            user_id=actor.id if actor else vehicle.assigned_to_id,
        )

        result = TransitionResult(
            vehicle=vehicle, event=event, previous_status=previous, status_changed=changed,
        )
        await self._notify(vehicle, previous, status, result)
        return result

    def stakeholders(self, vehicle: Vehicle) -> list:
        """User ids to notify: the assignee, then active managers of the assignee's team."""
        ids = []
        if vehicle.assigned_to_id:
            ids.append(vehicle.assigned_to_id)
        assignee = vehicle.assigned_to
        if assignee is not None and assignee.team_id:
            managers = self.db.query(User).filter(
                User.team_id == assignee.team_id,
                User.role == UserRole.MANAGER.value,
                User.is_active.is_(True),
            ).all()
            for manager in managers:
                if manager.id not in ids:
                    ids.append(manager.id)
        return ids

    async def _notify(self, vehicle: Vehicle, previous: str, status: VehicleStatus,
                      result: TransitionResult):
        notification_type = notification_type_for(previous, status)
        text = f"Vehicle ({describe_vehicle(vehicle)}) status changed from {previous} to {status.value}."

        for user_id in self.stakeholders(vehicle):
            try:
                outcome = await self.dispatcher.notify_user(user_id, notification_type, text)
            except Exception as e:
                logger.error(f"[STATUS] Notification to user {user_id} failed for {vehicle.vin}: {e}",
                             exc_info=True)
                result.notification_errors.append(f"user {user_id}: {e}")
                continue
            if outcome.success:
                result.notifications_sent += 1
            else:
                result.notification_errors.append(f"{outcome.recipient}: {outcome.message}")

        if self.dispatcher.webhook_url:
            outcome = await self.dispatcher.send(NotificationMessage(
                channel=NotificationChannel.WEBHOOK.value,
                to=self.dispatcher.webhook_url,
                subject=notification_type.value,
                payload={
                    "event": "vehicle.status_changed",
                    "data": {
                        "vin": vehicle.vin,
                        "previous_status": previous,
                        "status": status.value,
                        "timeline_event_id": result.event.id,
                    },
                },
            ))
            if outcome.success:
                result.notifications_sent += 1
            else:
                result.notification_errors.append(f"{outcome.recipient}: {outcome.message}")
