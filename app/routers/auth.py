# app/routers/auth.py
"""
Account signup, credential sign-in (JWT bearer session), the current user's
profile and password, and the public forgot/reset password flow.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.deps import get_current_user, get_dispatcher
from app.models.enums import NotificationChannel
from app.models.user import User
from app.schemas.user import (
    ChangePasswordRequest, ForgotPasswordRequest, LoginRequest, MessageOut, ProfileUpdate,
    ResetPasswordRequest, SignupOut, SignupRequest, TokenOut, UserOut,
)
from app.services import auth_service, user_service
from app.services.notification_service import NotificationDispatcher, NotificationMessage
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)

RESET_REQUESTED = "If an account exists for that email, a reset link has been sent."


@router.post("/auth/signup", response_model=SignupOut, status_code=status.HTTP_201_CREATED,
             summary="Create a USER account")
def signup(body: SignupRequest, db: Session = Depends(get_db)):
    user = auth_service.signup(db, body.name, body.email, body.password)
    return {"message": "User created successfully.", "user": user}


@router.post("/auth/login", response_model=TokenOut, summary="Exchange credentials for a session token")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, body.email, body.password)
    token, expires_in = auth_service.create_access_token(user)
    return {"access_token": token, "token_type": "bearer", "expires_in": expires_in, "user": user}


@router.get("/auth/me", response_model=UserOut, summary="The signed-in user")
def me(user: User = Depends(get_current_user)):
    return user


@router.put("/auth/me", response_model=UserOut, summary="Update my profile")
def update_me(body: ProfileUpdate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return user_service.update_profile(db, user, body.model_dump(exclude_unset=True))


@router.post("/auth/change-password", response_model=MessageOut, summary="Change my password")
def change_password(body: ChangePasswordRequest, db: Session = Depends(get_db),
                    user: User = Depends(get_current_user)):
    auth_service.change_password(db, user, body.current_password, body.new_password)
    return {"message": "Password changed successfully."}


@router.post("/auth/forgot-password", response_model=MessageOut, summary="Email a password-reset link")
async def forgot_password(
    body: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Public. The answer is the same whether or not the account exists."""
    token = auth_service.forgot_password(db, body.email)
    if token:
        link = f"{settings.BASE_URL.rstrip('/')}/auth/reset-password?token={token}"
        result = await dispatcher.send(NotificationMessage(
            channel=NotificationChannel.EMAIL.value,
            to=auth_service.normalize_email(body.email),
            subject="Password Reset Request",
            body=f"Click the link to reset your password: {link}",
        ))
        if not result.success:
            logger.error(f"[AUTH] Reset email could not be sent: {result.message}")
    return {"message": RESET_REQUESTED}


@router.post("/auth/reset-password", response_model=MessageOut, summary="Set a new password with a reset token")
def reset_password(body: ResetPasswordRequest, db: Session = Depends(get_db)):
    auth_service.reset_password(db, body.token, body.password)
    return {"message": "Password has been reset. You can now sign in."}
