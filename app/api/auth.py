"""Authentication router."""
from typing import Annotated
from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.services.auth_service import AuthService
from app.schemas.user import LoginResponse, RegisterRequest, RegisterResponse, UserResponse
from app.api.dependencies import AnyUser

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(
    data: RegisterRequest,
    db: Annotated[Session, Depends(get_db)]
):
    """
    Register a new team together with its first admin user.

    Returns a JWT access token so the admin is logged in immediately.
    """
    return AuthService(db).register(data)


@router.post("/login", response_model=LoginResponse)
def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[Session, Depends(get_db)]
):
    """
    Login with email and password.

    Accepts FormData with:
    - username: user email
    - password: user password
    """
    # OAuth2PasswordRequestForm uses "username" field for email
    return AuthService(db).login(form_data.username, form_data.password)


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: AnyUser):
    """Get the authenticated user's information."""
    return current_user
