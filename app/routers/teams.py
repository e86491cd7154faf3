# app/routers/teams.py
"""Teams, team membership and vehicle-to-team assignments."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.deps import get_coordinator, get_current_user
from app.models.user import User
from app.schemas.team import AssignmentCreate, AssignmentOut, TeamCreate, TeamOut, UserTeamUpdate
from app.schemas.user import UserOut
from app.services import team_service
from app.services.policy import Action, policy
from app.services.status_service import StatusTransitionCoordinator

router = APIRouter()


@router.get("/teams", response_model=list[TeamOut], summary="All teams with members")
def list_teams(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    policy.require(user, Action.TEAM_READ)
    return team_service.list_teams(db)


@router.post("/teams", response_model=TeamOut, status_code=status.HTTP_201_CREATED, summary="Create a team")
def create_team(body: TeamCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    policy.require(user, Action.TEAM_MANAGE)
    return team_service.create_team(db, body.name, body.description, body.department)


@router.get("/teams/{team_id}", response_model=TeamOut, summary="One team")
def get_team(team_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    policy.require(user, Action.TEAM_READ)
    return team_service.get_team(db, team_id)


@router.post("/teams/{team_id}/vehicles", response_model=AssignmentOut, status_code=status.HTTP_201_CREATED,
             summary="Assign a vehicle to a team")
async def assign_vehicle(
    team_id: int,
    body: AssignmentCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    coordinator: StatusTransitionCoordinator = Depends(get_coordinator),
):
    policy.require(user, Action.TEAM_MANAGE)
    return await team_service.assign_vehicle_to_team(
        db, body.vin, team_id, user, coordinator,
        user_id=body.user_id,
        priority=body.priority.value,
        due_date=body.due_date,
        notes=body.notes,
    )


@router.get("/assignments", response_model=list[AssignmentOut], summary="Vehicle assignments, newest first")
def list_assignments(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    policy.require(user, Action.TEAM_READ)
    return team_service.list_assignments(db)


@router.put("/users/{user_id}/team", response_model=UserOut, summary="Move a user to a team")
def update_user_team(
    user_id: int,
    body: UserTeamUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    policy.require(user, Action.TEAM_MANAGE)
    return team_service.update_user_team(db, user_id, body.team_id)
