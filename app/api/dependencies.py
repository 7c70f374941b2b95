"""Shared router dependencies: database session and authenticated user."""
from typing import Annotated, Callable
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.security import decode_token
from app.models.user import User, UserRole
from app.repositories.user_repository import UserRepository

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """
    Resolve the bearer token to an active user.

    Raises:
        HTTPException: 401 if the token is invalid or the user is gone/inactive
    """
    payload = decode_token(token)
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    subject = payload.get("sub")
    if payload.get("type") != "access" or not subject or not str(subject).isdigit():
        raise unauthorized

    user = UserRepository(db).get_by_id(int(subject))
    if not user or not user.is_active:
        raise unauthorized
    return user


def require_roles(*roles: UserRole) -> Callable[[User], User]:
    """Dependency factory restricting an endpoint to the given roles."""

    def checker(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions"
            )
        return current_user

    return checker


def get_request_metadata(request: Request) -> dict:
    """Request facts stored alongside a submitted response."""
    return {
        "ip_address": request.client.host if request.client else None,
        "language": request.headers.get("accept-language"),
        "timezone": request.headers.get("timezone"),
    }


AnyUser = Annotated[User, Depends(get_current_user)]
TeamAdmin = Annotated[User, Depends(require_roles(UserRole.ADMIN))]
Collector = Annotated[User, Depends(require_roles(UserRole.ADMIN, UserRole.MEMBER))]
RequestMetadata = Annotated[dict, Depends(get_request_metadata)]
