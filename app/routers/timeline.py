# app/routers/timeline.py
"""Timeline: per-vehicle history, manual events and the global activity feed."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.deps import get_current_user, get_recorder
from app.models.user import User
from app.schemas.timeline import TimelineEventCreate, TimelineEventOut, TimelineFeedOut
from app.services import vehicle_service
from app.services.policy import Action, policy
from app.services.timeline_service import TimelineRecorder

router = APIRouter()


@router.get("/vehicles/{vin}/timeline", response_model=list[TimelineEventOut],
            summary="Timeline events for one vehicle")
def get_vehicle_timeline(
    vin: str,
    event_type: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    recorder: TimelineRecorder = Depends(get_recorder),
):
    policy.require(user, Action.TIMELINE_READ)
    vehicle = vehicle_service.get_vehicle_by_vin(db, vin)
    events, _ = recorder.list_events(vehicle_id=vehicle.id, event_type=event_type, page=page, limit=limit)
    return events


@router.post("/vehicles/{vin}/timeline", response_model=TimelineEventOut,
             status_code=status.HTTP_201_CREATED, summary="Append a manual timeline event")
def add_timeline_event(
    vin: str,
    body: TimelineEventCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    recorder: TimelineRecorder = Depends(get_recorder),
):
    policy.require(user, Action.TIMELINE_WRITE)
    vehicle = vehicle_service.get_vehicle_by_vin(db, vin)
    return recorder.record(
        vehicle.id,
        body.event_type,
        body.description,
        department=body.department or vehicle.current_location,
        user_id=user.id,
    )


@router.get("/timeline", response_model=TimelineFeedOut, summary="Activity feed across all vehicles")
def get_timeline_feed(
    vin: Optional[str] = None,
    event_type: Optional[str] = None,
    user_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    recorder: TimelineRecorder = Depends(get_recorder),
):
    policy.require(user, Action.TIMELINE_READ)
    vehicle_id = vehicle_service.get_vehicle_by_vin(db, vin).id if vin else None
    events, total = recorder.list_events(
        vehicle_id=vehicle_id, user_id=user_id, event_type=event_type, page=page, limit=limit,
    )
    return {"data": events, "total": total, "page": page, "limit": limit}
