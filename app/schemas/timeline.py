# app/schemas/timeline.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class TimelineEventCreate(BaseModel):
    event_type: str = Field(min_length=1, max_length=50)
    description: Optional[str] = None
    department: Optional[str] = None


class TimelineEventOut(BaseModel):
    id: int
    vehicle_id: int
    event_type: str
    description: Optional[str]
    department: Optional[str]
    user_id: Optional[int]
    timestamp: datetime

    class Config:
        from_attributes = True


class TimelineFeedItemOut(TimelineEventOut):
    vin: Optional[str] = None


class TimelineFeedOut(BaseModel):
    data: list[TimelineFeedItemOut]
    total: int
    page: int
    limit: int
