# app/deps.py
"""
FastAPI dependencies: the acting user and the per-request service objects.
Every component receives the request's DB session at construction time.
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.errors import UnauthorizedError
from app.models.user import User
from app.services.auth_service import decode_access_token
from app.services.email_service import EmailSender
from app.services.notification_service import NotificationDispatcher
from app.services.status_service import StatusTransitionCoordinator
from app.services.timeline_service import TimelineRecorder

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolves the bearer token to an active user. 401 when absent or invalid."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Not authenticated")
    claims = decode_access_token(credentials.credentials)
    try:
        user_id = int(claims.get("sub"))
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid session")
    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        raise UnauthorizedError("Invalid session")
    return user


def get_recorder(db: Session = Depends(get_db)) -> TimelineRecorder:
    return TimelineRecorder(db)


def get_dispatcher(db: Session = Depends(get_db)) -> NotificationDispatcher:
    return NotificationDispatcher(
        db=db,
        email_sender=EmailSender.from_settings(),
        webhook_url=settings.NOTIFICATION_WEBHOOK_URL,
        webhook_timeout=settings.NOTIFICATION_WEBHOOK_TIMEOUT,
    )


def get_coordinator(
    db: Session = Depends(get_db),
    recorder: TimelineRecorder = Depends(get_recorder),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> StatusTransitionCoordinator:
    return StatusTransitionCoordinator(db, recorder, dispatcher)
