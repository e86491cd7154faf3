# app/schemas/vehicle.py
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional

from app.models.enums import Priority, VehicleStatus
from app.schemas.timeline import TimelineEventOut
from app.schemas.user import UserSummary
from app.utils.time import utc_now

VIN_LENGTH = 17
MIN_YEAR = 1900


def _check_year(value):
    if value is None:
        return value
    latest = utc_now().year + 1
    if value < MIN_YEAR or value > latest:
        raise ValueError(f"Year must be between {MIN_YEAR} and {latest}")
    return value


class VehicleCreate(BaseModel):
    vin: str
    stock_number: Optional[str] = None
    year: int
    make: str = Field(min_length=1)
    model: str = Field(min_length=1)
    trim: Optional[str] = None
    color: Optional[str] = None
    mileage: Optional[int] = Field(default=None, ge=0)
    status: VehicleStatus = VehicleStatus.PENDING
    priority: Priority = Priority.MEDIUM
    current_location: Optional[str] = None
    assigned_to_id: Optional[int] = None
    reconditioning_cost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None

    @field_validator("vin")
    @classmethod
    def normalize_vin(cls, value: str) -> str:
        value = value.strip().upper()
        if len(value) != VIN_LENGTH:
            raise ValueError(f"VIN must be {VIN_LENGTH} characters long")
        return value

    @field_validator("year")
    @classmethod
    def check_year(cls, value):
        return _check_year(value)


class VehicleUpdate(BaseModel):
    """Partial update. VIN is immutable and therefore absent."""

    stock_number: Optional[str] = None
    year: Optional[int] = None
    make: Optional[str] = Field(default=None, min_length=1)
    model: Optional[str] = Field(default=None, min_length=1)
    trim: Optional[str] = None
    color: Optional[str] = None
    mileage: Optional[int] = Field(default=None, ge=0)
    status: Optional[VehicleStatus] = None
    priority: Optional[Priority] = None
    current_location: Optional[str] = None
    assigned_to_id: Optional[int] = None
    reconditioning_cost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None

    @field_validator("year")
    @classmethod
    def check_year(cls, value):
        return _check_year(value)


class VehicleOut(BaseModel):
    id: int
    vin: str
    stock_number: Optional[str]
    year: int
    make: str
    model: str
    trim: Optional[str]
    color: Optional[str]
    mileage: Optional[int]
    status: str
    priority: str
    current_location: Optional[str]
    assigned_to_id: Optional[int]
    assigned_to: Optional[UserSummary] = None
    reconditioning_cost: Optional[float]
    notes: Optional[str]
    days_in_recon: int
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime]

    class Config:
        from_attributes = True


class VehicleDetailOut(VehicleOut):
    timeline_events: list[TimelineEventOut] = []


class VehicleListOut(BaseModel):
    data: list[VehicleOut]
    total: int
    page: int
    limit: int


class StatusTransitionRequest(BaseModel):
    # Plain string so an unknown status reaches the coordinator and is rejected there
    status: str
    description: Optional[str] = None


class TransitionResultOut(BaseModel):
    vehicle: VehicleOut
    event: TimelineEventOut
    previous_status: str
    status_changed: bool
    notifications_sent: int
    notification_errors: list[str]
    partial_success: bool
