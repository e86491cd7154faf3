# app/routers/vehicles.py
"""Vehicle board: list, intake, detail, edit, removal and status transitions."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.deps import get_coordinator, get_current_user
from app.models.user import User
from app.schemas.vehicle import (
    StatusTransitionRequest, TransitionResultOut, VehicleCreate, VehicleDetailOut,
    VehicleListOut, VehicleOut, VehicleUpdate,
)
from app.services import vehicle_service
from app.services.policy import Action, policy
from app.services.status_service import StatusTransitionCoordinator

router = APIRouter()


@router.get("/vehicles", response_model=VehicleListOut, summary="List vehicles: filterable, paginated")
def list_vehicles(
    status: Optional[str] = None,
    make: Optional[str] = None,
    search: Optional[str] = None,
    priority: Optional[str] = None,
    assigned_to_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    policy.require(user, Action.VEHICLE_READ)
    vehicles, total = vehicle_service.list_vehicles(
        db, status=status, make=make, search=search, priority=priority,
        assigned_to_id=assigned_to_id, page=page, limit=limit,
    )
    return {"data": vehicles, "total": total, "page": page, "limit": limit}


@router.post("/vehicles", response_model=VehicleOut, status_code=status.HTTP_201_CREATED,
             summary="Check in a new vehicle")
async def create_vehicle(
    body: VehicleCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    coordinator: StatusTransitionCoordinator = Depends(get_coordinator),
):
    policy.require(user, Action.VEHICLE_CREATE)
    return await vehicle_service.create_vehicle(db, body, user, coordinator.recorder, coordinator.dispatcher)


@router.get("/vehicles/{vin}", response_model=VehicleDetailOut, summary="Vehicle detail with timeline")
def get_vehicle(vin: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """VIN lookup is case-insensitive. Timeline events are newest first."""
    policy.require(user, Action.VEHICLE_READ)
    return vehicle_service.get_vehicle_by_vin(db, vin)


@router.put("/vehicles/{vin}", response_model=VehicleOut, summary="Partially update a vehicle")
async def update_vehicle(
    vin: str,
    body: VehicleUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    coordinator: StatusTransitionCoordinator = Depends(get_coordinator),
):
    policy.require(user, Action.VEHICLE_UPDATE)
    changes = body.model_dump(exclude_unset=True, mode="json")
    return await vehicle_service.update_vehicle(db, vin, changes, user, coordinator)


@router.delete("/vehicles/{vin}", summary="Remove a vehicle and its timeline")
def delete_vehicle(vin: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    policy.require(user, Action.VEHICLE_DELETE)
    deleted = vehicle_service.delete_vehicle(db, vin)
    return {"status": "deleted", "vin": deleted}


@router.post("/vehicles/{vin}/status", response_model=TransitionResultOut,
             summary="Move a vehicle to a new recon status")
async def transition_vehicle(
    vin: str,
    body: StatusTransitionRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    coordinator: StatusTransitionCoordinator = Depends(get_coordinator),
):
    """
    Writes the status, appends a STATUS_CHANGE event and notifies stakeholders.
    Notification failures come back in notification_errors with partial_success=true.
    """
    vehicle = vehicle_service.get_vehicle_by_vin(db, vin)
    policy.require(user, Action.VEHICLE_TRANSITION, vehicle)
    result = await coordinator.transition(
        vehicle.id, body.status.strip().upper(), user,
        {"description": body.description, "source": "api"},
    )
    return {
        "vehicle": result.vehicle,
        "event": result.event,
        "previous_status": result.previous_status,
        "status_changed": result.status_changed,
        "notifications_sent": result.notifications_sent,
        "notification_errors": result.notification_errors,
        "partial_success": result.partial_success,
    }
