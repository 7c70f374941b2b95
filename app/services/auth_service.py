"""Authentication service."""
import logging
from typing import Optional
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.security import verify_password, get_password_hash, create_access_token
from app.repositories.user_repository import UserRepository
from app.models.user import User, UserRole
from app.schemas.user import LoginResponse, RegisterRequest, RegisterResponse, TeamResponse, UserResponse

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication business logic."""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)

    def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user by email and password.

        Returns:
            User if authentication successful, None otherwise
        """
        user = self.user_repo.get_by_email(email)

        if not user or not user.is_active:
            return None

        if not verify_password(password, user.hashed_password):
            return None

        return user

    def issue_token(self, user: User) -> str:
        return create_access_token(
            data={"sub": str(user.id), "team": user.team_id, "role": user.role.value}
        )

    def login(self, email: str, password: str) -> LoginResponse:
        """
        Login user and return JWT token.

        Raises:
            HTTPException: If authentication fails
        """
        user = self.authenticate_user(email, password)

        if not user:
            logger.info("Failed login attempt", extra={"email": email})
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )

        return LoginResponse(access_token=self.issue_token(user), user=UserResponse.model_validate(user))

    def register(self, data: RegisterRequest) -> RegisterResponse:
        """
        Create a team and its first admin, then log the admin in.

        Raises:
            HTTPException: If email already exists
        """
        if self.user_repo.exists_by_email(data.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )

        team = self.user_repo.create_team(name=data.team_name, description=data.team_description)
        user = self.user_repo.create(
            email=data.email,
            hashed_password=get_password_hash(data.password),
            full_name=data.full_name,
            team_id=team.id,
            role=UserRole.ADMIN,
        )
        team.created_by = user.id
        self.db.commit()
        self.db.refresh(team)
        logger.info("Registered team %s with admin %s", team.id, user.id)

        return RegisterResponse(
            access_token=self.issue_token(user),
            user=UserResponse.model_validate(user),
            team=TeamResponse.model_validate(team),
        )
