"""User router."""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.services.user_service import UserService
from app.schemas.user import UserCreate, UserResponse
from app.models.user import UserRole
from app.api.dependencies import TeamAdmin, AnyUser

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    user_data: UserCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: TeamAdmin
):
    """
    Add a member to the caller's team (Team admin only).
    """
    return UserService(db).add_member(current_user.team_id, user_data)


@router.get("/me", response_model=UserResponse)
def get_current_user_profile(current_user: AnyUser):
    """
    Get current user profile.
    """
    return current_user


@router.get("", response_model=List[UserResponse])
def list_team_members(
    db: Annotated[Session, Depends(get_db)],
    current_user: AnyUser,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    role: Optional[UserRole] = None
):
    """
    List members of the caller's team.
    """
    return UserService(db).get_members(current_user.team_id, skip=skip, limit=limit, role=role)
