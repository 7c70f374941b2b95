"""User service."""
from typing import List, Optional
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.security import get_password_hash
from app.repositories.user_repository import UserRepository
from app.models.user import User, UserRole
from app.schemas.user import UserCreate


class UserService:
    """Team membership business logic."""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)

    def add_member(self, team_id: int, user_data: UserCreate) -> User:
        """
        Add a user to a team.

        Raises:
            HTTPException: If email already exists or the team is full
        """
        if self.user_repo.exists_by_email(user_data.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )

        team = self.user_repo.get_team(team_id)
        max_members = (team.settings or {}).get("max_members", 50)
        if self.user_repo.count_team_members(team_id) >= max_members:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Team already has the maximum of {max_members} members"
            )

        return self.user_repo.create(
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            full_name=user_data.full_name,
            team_id=team_id,
            role=user_data.role,
        )

    def get_members(self, team_id: int, skip: int = 0, limit: int = 100,
                    role: Optional[UserRole] = None) -> List[User]:
        """Get team members with optional role filter."""
        return self.user_repo.get_team_members(team_id, skip=skip, limit=limit, role=role)
