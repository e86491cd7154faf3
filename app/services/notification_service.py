# app/services/notification_service.py
"""
Notification dispatcher: sends single messages over email, SMS or webhook.

Channels:
  - email   → EmailSender (SMTP, or logged in mock mode)
  - sms     → logged only; always reported as sent once the number validates
  - webhook → JSON POST with httpx; a 2xx response counts as delivered

There is no queue, retry or backoff. send() never raises: provider failures come
back as DispatchResult(success=False). Bulk sends go one recipient at a time and
report one result per recipient.

notify_user() is the persisted variant: it writes a PENDING notification row,
sends, then records SENT / FAILED through mark_delivery_status().
"""

import asyncio
import re
import time
from dataclasses import dataclass, asdict
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.models.enums import DeliveryStatus, NotificationChannel
from app.models.notification import Notification
from app.models.user import User
from app.services.email_service import EmailSender
from app.utils.logger import get_logger
from app.utils.time import utc_now

logger = get_logger(__name__)

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")


def is_valid_phone(number: str) -> bool:
    return bool(number) and PHONE_PATTERN.match(number) is not None


@dataclass
class NotificationMessage:
    channel: str
    to: str
    subject: Optional[str] = None
    body: str = ""
    payload: Optional[dict] = None     # webhook channel only


@dataclass
class DispatchResult:
    success: bool
    message: str
    recipient: str
    message_id: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


class NotificationDispatcher:
    def __init__(self, db: Session = None, email_sender: EmailSender = None,
                 webhook_url: str = None, webhook_timeout: float = 5.0):
        self.db = db
        self.email_sender = email_sender or EmailSender()
        self.webhook_url = webhook_url
        self.webhook_timeout = webhook_timeout

    # ── Single send ───────────────────────────────────────────────────────
    async def send(self, message: NotificationMessage) -> DispatchResult:
        channel = getattr(message.channel, "value", message.channel)
        try:
            if channel == NotificationChannel.EMAIL.value:
                return await self._send_email(message)
            if channel == NotificationChannel.SMS.value:
                return self._send_sms(message)
            if channel == NotificationChannel.WEBHOOK.value:
                return await self._send_webhook(message)
            return DispatchResult(False, f"Unsupported channel: {channel}", message.to)
        except Exception as e:
            logger.error(f"[NOTIFY][{channel}] to={message.to} failed: {e}", exc_info=True)
            return DispatchResult(False, f"Failed to send {channel}: {e}", message.to)

    async def _send_email(self, message: NotificationMessage) -> DispatchResult:
        subject = message.subject or "Recon Tracker notification"
        # smtplib blocks; keep the event loop free while the mail server answers
        message_id = await asyncio.to_thread(self.email_sender.send, message.to, subject, message.body)
        text = "Email sent (mock)" if self.email_sender.is_mock else "Email sent successfully"
        return DispatchResult(True, text, message.to, message_id)

    def _send_sms(self, message: NotificationMessage) -> DispatchResult:
        if not is_valid_phone(message.to):
            return DispatchResult(False, f"Invalid phone number: {message.to}", message.to)
        message_id = f"sms-mock-{int(time.time() * 1000)}"
        preview = message.body if len(message.body) <= 50 else message.body[:50] + "..."
        logger.info(f"[NOTIFY][SMS] to={message.to} id={message_id} | {preview}")
        return DispatchResult(True, "SMS sent (mock)", message.to, message_id)

    async def _send_webhook(self, message: NotificationMessage) -> DispatchResult:
        payload = message.payload or {"subject": message.subject, "message": message.body}
        async with httpx.AsyncClient(timeout=self.webhook_timeout) as client:
            resp = await client.post(message.to, json=payload)
        if resp.is_success:
            logger.info(f"[NOTIFY][WEBHOOK] {message.to} acknowledged ({resp.status_code})")
            return DispatchResult(True, f"Webhook acknowledged ({resp.status_code})", message.to)
        logger.error(f"[NOTIFY][WEBHOOK] {message.to} rejected with HTTP {resp.status_code}")
        return DispatchResult(False, f"Webhook returned HTTP {resp.status_code}", message.to)

    # ── Bulk send ─────────────────────────────────────────────────────────
    async def send_bulk(self, messages: list) -> list:
        """Sequential fan-out. One result per message, in input order."""
        results = []
        for message in messages:
            results.append(await self.send(message))
        failed = sum(1 for r in results if not r.success)
        if failed:
            logger.warning(f"[NOTIFY] Bulk send: {len(results) - failed} succeeded, {failed} failed")
        return results

    # ── Persisted, per-user notifications ─────────────────────────────────
    async def notify_user(self, user_id: int, notification_type: str, message: str,
                          subject: str = None,
                          channel: str = NotificationChannel.EMAIL.value) -> DispatchResult:
        notification_type = getattr(notification_type, "value", notification_type)
        channel = getattr(channel, "value", channel)

        notification = Notification(
            user_id=user_id,
            type=notification_type,
            channel=channel,
            message=message,
            status=DeliveryStatus.PENDING.value,
            created_at=utc_now(),
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)

        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            logger.warning(f"[NOTIFY] User {user_id} not found for notification {notification.id}")
            self.mark_delivery_status(notification.id, DeliveryStatus.FAILED)
            return DispatchResult(False, "User not found for notification.", str(user_id))

        recipient = user.phone if channel == NotificationChannel.SMS.value else user.email
        if not recipient:
            notification.message = f"{message} (No {channel} address configured)"
            self.mark_delivery_status(notification.id, DeliveryStatus.SENT)
            return DispatchResult(True, f"No {channel} address configured", str(user_id))

        notification.recipient = recipient
        notification.subject = subject or f"Recon Tracker: {notification_type.replace('_', ' ')}"
        self.db.commit()

        result = await self.send(NotificationMessage(
            channel=channel, to=recipient, subject=notification.subject, body=message,
        ))
        self.mark_delivery_status(
            notification.id, DeliveryStatus.SENT if result.success else DeliveryStatus.FAILED
        )
        if not result.success:
            logger.error(f"[NOTIFY] Notification {notification.id} failed: {result.message}")
        return result

    def mark_delivery_status(self, notification_id: int, status) -> Notification:
        """Post-hoc delivery status update, decoupled from the send itself."""
        notification = self.db.query(Notification).filter(Notification.id == notification_id).first()
        if not notification:
            raise NotFoundError("Notification", notification_id)
        notification.status = getattr(status, "value", status)
        notification.updated_at = utc_now()
        self.db.commit()
        return notification


def list_notifications(db: Session, user_id: int, page: int = 1, limit: int = 20):
    """A user's notifications, newest first."""
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )


def mark_notification_read(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = db.query(Notification).filter(
        Notification.id == notification_id, Notification.user_id == user_id
    ).first()
    if not notification:
        raise NotFoundError("Notification", notification_id)
    notification.is_read = True
    notification.updated_at = utc_now()
    db.commit()
    return notification


def mark_all_notifications_read(db: Session, user_id: int) -> int:
    """Returns how many notifications were unread."""
    updated = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read == False,  # noqa: E712
    ).update({Notification.is_read: True, Notification.updated_at: utc_now()}, synchronize_session=False)
    db.commit()
    return updated


def delete_notification(db: Session, notification_id: int, user_id: int) -> int:
    notification = db.query(Notification).filter(
        Notification.id == notification_id, Notification.user_id == user_id
    ).first()
    if not notification:
        raise NotFoundError("Notification", notification_id)
    db.delete(notification)
    db.commit()
    return notification_id
