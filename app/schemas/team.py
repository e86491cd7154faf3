# app/schemas/team.py
from pydantic import BaseModel, field_validator
from datetime import date, datetime
from typing import Optional

from app.models.enums import Priority
from app.schemas.user import UserSummary


class TeamCreate(BaseModel):
    name: str
    description: Optional[str] = None
    department: Optional[str] = None


class TeamMemberOut(UserSummary):
    role: str


class TeamOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    department: Optional[str]
    created_at: datetime
    members: list[TeamMemberOut] = []
    vehicle_count: int = 0

    class Config:
        from_attributes = True


class UserTeamUpdate(BaseModel):
    team_id: Optional[int] = None     # null removes the user from their team


class AssignmentCreate(BaseModel):
    vin: str
    user_id: Optional[int] = None
    priority: Priority = Priority.MEDIUM
    due_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("vin")
    @classmethod
    def normalize_vin(cls, value: str) -> str:
        return value.strip().upper()


class TeamRefOut(BaseModel):
    id: int
    name: str
    department: Optional[str]

    class Config:
        from_attributes = True


class AssignmentOut(BaseModel):
    id: int
    vin: str
    team: TeamRefOut
    user: Optional[UserSummary]
    priority: str
    due_date: Optional[date]
    notes: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
