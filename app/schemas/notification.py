# app/schemas/notification.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from app.models.enums import DeliveryStatus


class EmailRequest(BaseModel):
    to: str = Field(min_length=3)
    subject: str
    message: str
    type: Optional[str] = None


class BulkEmailRequest(BaseModel):
    notifications: list[EmailRequest]


class ResetEmailRequest(BaseModel):
    email: str
    reset_token: str


class VehicleInfo(BaseModel):
    vin: Optional[str] = None
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None


class StatusEmailRequest(BaseModel):
    email: str
    status: str
    vehicle_info: Optional[VehicleInfo] = None


class SmsRequest(BaseModel):
    to: list[str] = Field(min_length=1)
    message: str = Field(min_length=1)
    priority: Optional[str] = None


class DispatchResultOut(BaseModel):
    success: bool
    message: str
    recipient: str
    message_id: Optional[str] = None

    class Config:
        from_attributes = True


class BulkResultOut(BaseModel):
    success: bool
    message: str
    total: int
    successful: int
    failed: int
    results: list[DispatchResultOut]


class SmsResultOut(BaseModel):
    success: bool
    recipients: int
    message_ids: list[Optional[str]]
    results: list[DispatchResultOut]


class DeliveryStatusUpdate(BaseModel):
    status: DeliveryStatus


class NotificationOut(BaseModel):
    id: int
    user_id: Optional[int]
    type: str
    channel: str
    recipient: Optional[str]
    subject: Optional[str]
    message: str
    status: str
    is_read: bool
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
