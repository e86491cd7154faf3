# app/schemas/user.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class SignupRequest(BaseModel):
    name: Optional[str] = None
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class UserSummary(BaseModel):
    id: int
    name: Optional[str]
    email: str

    class Config:
        from_attributes = True


class UserOut(UserSummary):
    role: str
    team_id: Optional[int]
    department: Optional[str]
    phone: Optional[str]
    is_active: bool
    created_at: datetime


class SignupOut(BaseModel):
    message: str
    user: UserOut


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int           # seconds
    user: UserOut


class UserCreate(BaseModel):
    name: str
    email: str
    password: str
    role: str = "USER"
    team_id: Optional[int] = None
    department: Optional[str] = None
    phone: Optional[str] = None


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    team_id: Optional[int] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None


class PasswordSet(BaseModel):
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str
    password: str


class MessageOut(BaseModel):
    message: str
