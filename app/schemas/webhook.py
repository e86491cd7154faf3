# app/schemas/webhook.py
from pydantic import BaseModel, Field
from typing import Optional


class ReconWebhookPayload(BaseModel):
    """Body pushed by the external recon system. It sends camelCase keys."""

    vin: Optional[str] = None
    status: Optional[str] = None
    current_location: Optional[str] = Field(default=None, alias="currentLocation")
    event_type: Optional[str] = Field(default=None, alias="eventType")
    description: Optional[str] = None
    assigned_to_email: Optional[str] = Field(default=None, alias="assignedToEmail")

    class Config:
        populate_by_name = True


class ReconWebhookOut(BaseModel):
    received: bool
    vin: str
    status: str
    events_created: int
    notification_errors: list[str] = []
