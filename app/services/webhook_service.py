# app/services/webhook_service.py
"""
Inbound recon webhook handling.

The external recon system pushes {vin, status?, currentLocation?, eventType?,
description?, assignedToEmail?}. Everything is validated before the first write,
so a rejected payload (missing VIN, unknown VIN, unknown assignee, invalid status)
leaves no timeline events behind. Then, in order: assignee, location, status
(through the coordinator), custom event.

Signature check: when WEBHOOK_SECRET is set and the sender includes
X-Recon-Signature, the header must equal "sha256=" + HMAC-SHA256 of
"{X-Recon-Timestamp}.{raw body}". Unsigned requests are accepted.
"""

import hashlib
import hmac

from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError
from app.schemas.webhook import ReconWebhookPayload
from app.services import vehicle_service
from app.services.auth_service import get_user_by_email
from app.services.status_service import StatusTransitionCoordinator, parse_status
from app.utils.logger import get_logger

logger = get_logger(__name__)

SIGNATURE_PREFIX = "sha256="


def compute_signature(raw_body: bytes, timestamp: str, secret: str) -> str:
    signed = (timestamp or "").encode() + b"." + raw_body
    return SIGNATURE_PREFIX + hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()


def verify_signature(raw_body: bytes, signature: str, timestamp: str, secret: str) -> bool:
    expected = compute_signature(raw_body, timestamp, secret)
    return hmac.compare_digest(expected, signature or "")


async def process_recon_webhook(db: Session, payload: ReconWebhookPayload,
                                coordinator: StatusTransitionCoordinator) -> dict:
    if not payload.vin or not payload.vin.strip():
        raise ValidationError("vin is required")

    vehicle = vehicle_service.get_vehicle_by_vin(db, payload.vin)
    if payload.status:
        parse_status(payload.status.upper())

    assignee = None
    if payload.assigned_to_email:
        assignee = get_user_by_email(db, payload.assigned_to_email)
        if not assignee:
            raise NotFoundError("User", payload.assigned_to_email)

    logger.info(
        f"[WEBHOOK] recon update for {vehicle.vin}: status={payload.status} "
        f"location={payload.current_location} event={payload.event_type} "
        f"assignee={payload.assigned_to_email}"
    )

    recorder = coordinator.recorder
    events_before = recorder.list_events(vehicle_id=vehicle.id, limit=1)[1]
    notification_errors = []

    changes = {}
    if assignee is not None:
        changes["assigned_to_id"] = assignee.id
    if payload.current_location:
        changes["current_location"] = payload.current_location
    if changes:
        vehicle = await vehicle_service.update_vehicle(db, vehicle.vin, changes, None, coordinator)

    if payload.status:
        result = await coordinator.transition(
            vehicle.id, payload.status.upper(), None,
            {"source": "webhook", "description": "Reported by recon webhook."},
        )
        notification_errors.extend(result.notification_errors)

    if payload.event_type:
        recorder.record(
            vehicle.id,
            payload.event_type,
            payload.description,
            department=vehicle.current_location,
            user_id=None,
        )

    events_after = recorder.list_events(vehicle_id=vehicle.id, limit=1)[1]
    db.refresh(vehicle)
    return {
        "received": True,
        "vin": vehicle.vin,
        "status": vehicle.status,
        "events_created": events_after - events_before,
        "notification_errors": notification_errors,
    }
