# app/services/user_service.py
"""
User administration and self-service profile edits.
Emails stay unique and lower-cased. Deleting a user unassigns their vehicles and
assignments and drops their inbox; timeline events keep their text but lose the author.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.enums import UserRole
from app.models.notification import Notification
from app.models.timeline_event import TimelineEvent
from app.models.user import User
from app.models.vehicle import Vehicle
from app.models.vehicle_assignment import VehicleAssignment
from app.services import auth_service
from app.services.team_service import get_team
from app.utils.logger import get_logger
from app.utils.time import utc_now

logger = get_logger(__name__)

EMAIL_TAKEN = "Email already exists"


def _check_role(role: str) -> str:
    role = (role or "").upper()
    if role not in [r.value for r in UserRole]:
        raise ValidationError(f"Invalid role: {role or 'empty'}")
    return role


def _check_team(db: Session, team_id):
    if team_id is not None:
        get_team(db, team_id)


def _email_taken(db: Session, email: str, except_id: int = None) -> bool:
    q = db.query(User).filter(User.email == email)
    if except_id is not None:
        q = q.filter(User.id != except_id)
    return q.first() is not None


def _commit_user(db: Session, user: User):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(EMAIL_TAKEN)
    db.refresh(user)


def list_users(db: Session) -> list:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User", user_id)
    return user


def create_user(db: Session, name: str, email: str, password: str, role: str,
                team_id: int = None, department: str = None, phone: str = None) -> User:
    if not name or not email or not password or not role:
        raise ValidationError("All fields are required")
    email = auth_service.check_email(email)
    auth_service.check_password(password)
    role = _check_role(role)
    _check_team(db, team_id)
    if _email_taken(db, email):
        raise ConflictError(EMAIL_TAKEN)

    now = utc_now()
    user = User(
        name=name,
        email=email,
        password_hash=auth_service.hash_password(password),
        role=role,
        team_id=team_id,
        department=department,
        phone=phone,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    _commit_user(db, user)
    logger.info(f"[USERS] Created {role} account {email} (id={user.id})")
    return user


def update_user(db: Session, user_id: int, changes: dict) -> User:
    """Partial update by an admin. `changes` holds only the fields the caller sent."""
    user = get_user(db, user_id)
    changes = dict(changes)
    cleared = [name for name in ("email", "role", "is_active") if name in changes and changes[name] is None]
    if cleared:
        raise ValidationError(f"Field(s) cannot be null: {', '.join(cleared)}")

    if "email" in changes:
        changes["email"] = auth_service.check_email(changes["email"])
        if _email_taken(db, changes["email"], except_id=user.id):
            raise ConflictError(EMAIL_TAKEN)
    if "role" in changes:
        changes["role"] = _check_role(changes["role"])
    if "team_id" in changes:
        _check_team(db, changes["team_id"])

    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = utc_now()
    _commit_user(db, user)
    logger.info(f"[USERS] Updated user {user.id}: {', '.join(sorted(changes)) or 'no changes'}")
    return user


def delete_user(db: Session, user_id: int, actor: User) -> int:
    user = get_user(db, user_id)
    if actor is not None and actor.id == user.id:
        raise ValidationError("You cannot delete your own account.")

    # SQLite does not enforce ON DELETE, so references are cleared here
    db.query(Vehicle).filter(Vehicle.assigned_to_id == user.id).update(
        {Vehicle.assigned_to_id: None}, synchronize_session=False)
    db.query(VehicleAssignment).filter(VehicleAssignment.user_id == user.id).update(
        {VehicleAssignment.user_id: None}, synchronize_session=False)
    db.query(TimelineEvent).filter(TimelineEvent.user_id == user.id).update(
        {TimelineEvent.user_id: None}, synchronize_session=False)
    db.query(Notification).filter(Notification.user_id == user.id).delete(synchronize_session=False)

    db.delete(user)
    db.commit()
    logger.warning(f"[USERS] Deleted user {user_id}")
    return user_id


def set_user_password(db: Session, user_id: int, password: str) -> User:
    return auth_service.set_password(db, get_user(db, user_id), password)


def update_profile(db: Session, user: User, changes: dict) -> User:
    """The signed-in user's own name, email, department and phone."""
    changes = {k: v for k, v in changes.items() if k in ("name", "email", "department", "phone")}
    if "email" in changes:
        changes["email"] = auth_service.check_email(changes["email"])
        if _email_taken(db, changes["email"], except_id=user.id):
            raise ConflictError(EMAIL_TAKEN)

    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = utc_now()
    _commit_user(db, user)
    logger.info(f"[USERS] Profile updated for user {user.id}")
    return user
