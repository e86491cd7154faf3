# app/routers/users.py
"""User administration. Admin only, except that anyone may set their own password."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.deps import get_current_user
from app.models.user import User
from app.schemas.user import MessageOut, PasswordSet, UserCreate, UserOut, UserUpdate
from app.services import user_service
from app.services.policy import Action, policy

router = APIRouter()


@router.get("/users", response_model=list[UserOut], summary="All users, newest first")
def list_users(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    policy.require(user, Action.USER_MANAGE)
    return user_service.list_users(db)


@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED, summary="Create a user")
def create_user(body: UserCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    policy.require(user, Action.USER_MANAGE)
    return user_service.create_user(
        db, body.name, body.email, body.password, body.role,
        team_id=body.team_id, department=body.department, phone=body.phone,
    )


@router.put("/users/{user_id}", response_model=UserOut, summary="Update a user")
def update_user(user_id: int, body: UserUpdate, db: Session = Depends(get_db),
                user: User = Depends(get_current_user)):
    policy.require(user, Action.USER_MANAGE)
    return user_service.update_user(db, user_id, body.model_dump(exclude_unset=True))


@router.delete("/users/{user_id}", response_model=MessageOut, summary="Delete a user")
def delete_user(user_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    policy.require(user, Action.USER_MANAGE)
    user_service.delete_user(db, user_id, user)
    return {"message": "User deleted successfully"}


@router.put("/users/{user_id}/password", response_model=MessageOut, summary="Set a user's password")
def set_password(user_id: int, body: PasswordSet, db: Session = Depends(get_db),
                 user: User = Depends(get_current_user)):
    policy.require(user, Action.USER_SET_PASSWORD, user if user_id == user.id else None)
    user_service.set_user_password(db, user_id, body.password)
    return {"message": "Password updated successfully"}
