# app/routers/notifications.py
"""
Notification endpoints: direct email / SMS sends, bulk email, password-reset and
vehicle-status emails, plus the signed-in user's notification inbox.
Send endpoints answer 200 with a success flag; a failed delivery is not an HTTP error.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.deps import get_current_user, get_dispatcher
from app.errors import ValidationError
from app.models.enums import NotificationChannel
from app.models.user import User
from app.schemas.notification import (
    BulkEmailRequest, BulkResultOut, DeliveryStatusUpdate, DispatchResultOut, EmailRequest,
    NotificationOut, ResetEmailRequest, SmsRequest, SmsResultOut, StatusEmailRequest,
)
from app.schemas.user import MessageOut
from app.services import notification_service
from app.services.notification_service import NotificationDispatcher, NotificationMessage, is_valid_phone
from app.services.policy import Action, policy

router = APIRouter()


def _email(to: str, subject: str, body: str) -> NotificationMessage:
    return NotificationMessage(channel=NotificationChannel.EMAIL.value, to=to, subject=subject, body=body)


@router.post("/notifications/email", response_model=DispatchResultOut, summary="Send one email")
async def send_email(
    body: EmailRequest,
    user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    policy.require(user, Action.NOTIFICATION_SEND)
    return (await dispatcher.send(_email(body.to, body.subject, body.message))).to_dict()


@router.post("/notifications/email/bulk", response_model=BulkResultOut, summary="Send many emails")
async def send_bulk_email(
    body: BulkEmailRequest,
    user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """One result per recipient. A failed recipient never stops the rest."""
    policy.require(user, Action.NOTIFICATION_SEND)
    results = await dispatcher.send_bulk([_email(n.to, n.subject, n.message) for n in body.notifications])
    successful = sum(1 for r in results if r.success)
    failed = len(results) - successful
    return {
        "success": failed == 0,
        "message": f"Attempted to send {len(results)} emails. {successful} succeeded, {failed} failed.",
        "total": len(results),
        "successful": successful,
        "failed": failed,
        "results": [r.to_dict() for r in results],
    }


@router.post("/notifications/email/reset", response_model=DispatchResultOut,
             summary="Send a password-reset link")
async def send_reset_email(body: ResetEmailRequest, dispatcher: NotificationDispatcher = Depends(get_dispatcher)):
    """Public: used by the forgot-password flow before the user has a session."""
    link = f"{settings.BASE_URL.rstrip('/')}/auth/reset-password?token={body.reset_token}"
    message = f"Click the link to reset your password: {link}"
    return (await dispatcher.send(_email(body.email, "Password Reset Request", message))).to_dict()


@router.post("/notifications/email/status", response_model=DispatchResultOut,
             summary="Email a vehicle status update")
async def send_status_email(
    body: StatusEmailRequest,
    user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    policy.require(user, Action.NOTIFICATION_SEND)
    info = body.vehicle_info
    vin = info.vin if info and info.vin else "Unknown"
    vehicle = " ".join(str(p) for p in (info.year, info.make, info.model) if p) if info else ""
    subject = f"Vehicle Status Update - {vin}"
    message = f"Vehicle status has been updated to: {body.status}. Vehicle: {vehicle} (VIN: {vin})"
    return (await dispatcher.send(_email(body.email, subject, message))).to_dict()


@router.post("/notifications/sms", response_model=SmsResultOut, summary="Send an SMS to one or more numbers")
async def send_sms(
    body: SmsRequest,
    user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    policy.require(user, Action.NOTIFICATION_SEND)
    invalid = [number for number in body.to if not is_valid_phone(number)]
    if invalid:
        raise ValidationError(f"Invalid phone numbers: {', '.join(invalid)}")

    results = await dispatcher.send_bulk([
        NotificationMessage(channel=NotificationChannel.SMS.value, to=number, body=body.message)
        for number in body.to
    ])
    return {
        "success": all(r.success for r in results),
        "recipients": len(results),
        "message_ids": [r.message_id for r in results],
        "results": [r.to_dict() for r in results],
    }


@router.get("/notifications", response_model=list[NotificationOut], summary="My notifications")
def list_my_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    policy.require(user, Action.NOTIFICATION_READ)
    return notification_service.list_notifications(db, user.id, page=page, limit=limit)


@router.post("/notifications/read-all", response_model=MessageOut, summary="Mark all my notifications as read")
def mark_all_read(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    policy.require(user, Action.NOTIFICATION_READ)
    count = notification_service.mark_all_notifications_read(db, user.id)
    return {"message": f"Marked {count} notifications as read."}


@router.post("/notifications/{notification_id}/read", response_model=NotificationOut,
             summary="Mark one of my notifications as read")
def mark_read(notification_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    policy.require(user, Action.NOTIFICATION_READ)
    return notification_service.mark_notification_read(db, notification_id, user.id)


@router.put("/notifications/{notification_id}/delivery", response_model=NotificationOut,
            summary="Record the delivery status of a notification")
def update_delivery_status(
    notification_id: int,
    body: DeliveryStatusUpdate,
    user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    policy.require(user, Action.NOTIFICATION_MANAGE)
    return dispatcher.mark_delivery_status(notification_id, body.status)


@router.delete("/notifications/{notification_id}", response_model=MessageOut,
               summary="Delete one of my notifications")
def delete_notification(notification_id: int, db: Session = Depends(get_db),
                        user: User = Depends(get_current_user)):
    policy.require(user, Action.NOTIFICATION_READ)
    notification_service.delete_notification(db, notification_id, user.id)
    return {"message": "Notification deleted."}
