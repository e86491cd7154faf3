# app/services/auth_service.py
"""
Credentials and sessions.
Passwords are stored as bcrypt hashes. A successful login yields a signed JWT
(HS256, SESSION_SECRET) that expires after SESSION_EXPIRE_HOURS (24h by default).

Password reset: forgot_password() stores the SHA-256 of a random token with an
expiry (RESET_TOKEN_EXPIRE_MINUTES); reset_password() accepts the raw token once
and clears it.
"""

import hashlib
import secrets
from datetime import timedelta

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import ConflictError, UnauthorizedError, ValidationError
from app.models.enums import UserRole
from app.models.user import User
from app.utils.logger import get_logger
from app.utils.time import utc_now

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72   # bcrypt only looks at the first 72 bytes


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def check_email(email: str) -> str:
    """Normalised email, or ValidationError."""
    email = normalize_email(email)
    if not email:
        raise ValidationError("Email is required.")
    if "@" not in email:
        raise ValidationError("Email address is not valid.")
    return email


def check_password(password: str):
    if not password:
        raise ValidationError("Password is required.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        return False


def create_access_token(user: User, expires_hours: int = None):
    """Returns (token, expires_in_seconds)."""
    lifetime = timedelta(hours=expires_hours or settings.SESSION_EXPIRE_HOURS)
    now = utc_now()
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "team_id": user.team_id,
        "iat": now,
        "exp": now + lifetime,
    }
    token = jwt.encode(claims, settings.SESSION_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, int(lifetime.total_seconds())


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SESSION_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise UnauthorizedError(f"Invalid session: {e}")


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == normalize_email(email)).first()


def signup(db: Session, name: str, email: str, password: str) -> User:
    """Create a USER-role account. Duplicate email raises ConflictError."""
    if not normalize_email(email) or not password:
        raise ValidationError("Email and password are required.")
    email = check_email(email)
    check_password(password)
    if get_user_by_email(db, email):
        raise ConflictError("User with this email already exists.")

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=UserRole.USER.value,
        is_active=True,
        created_at=utc_now(),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User with this email already exists.")
    db.refresh(user)
    logger.info(f"[AUTH] New account {email} (id={user.id})")
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        logger.warning(f"[AUTH] Failed sign-in for {normalize_email(email)}")
        raise UnauthorizedError("Invalid email or password")
    return user


def set_password(db: Session, user: User, password: str) -> User:
    check_password(password)
    user.password_hash = hash_password(password)
    user.updated_at = utc_now()
    db.commit()
    logger.info(f"[AUTH] Password updated for user {user.id}")
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> User:
    """Self-service change. The current password must match."""
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect.")
    return set_password(db, user, new_password)


# ── Password reset ────────────────────────────────────────────────────────────
def _token_digest(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def forgot_password(db: Session, email: str):
    """
    Issues a reset token for an active account. Returns the raw token, or None
    when no such account exists (callers must not reveal which).
    """
    user = get_user_by_email(db, email)
    if not user or not user.is_active:
        logger.info(f"[AUTH] Reset requested for unknown account {normalize_email(email)}")
        return None

    token = secrets.token_hex(32)
    user.reset_token_hash = _token_digest(token)
    user.reset_token_expires_at = utc_now() + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    db.commit()
    logger.info(f"[AUTH] Reset token issued for user {user.id}")
    return token


def reset_password(db: Session, token: str, password: str) -> User:
    if not token:
        raise ValidationError("Reset token is required.")
    user = db.query(User).filter(User.reset_token_hash == _token_digest(token)).first()
    if not user or not user.reset_token_expires_at or user.reset_token_expires_at <= utc_now():
        raise ValidationError("Invalid or expired reset token.")

    check_password(password)
    user.reset_token_hash = None
    user.reset_token_expires_at = None
    return set_password(db, user, password)
