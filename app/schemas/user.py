"""User, team and token schemas."""
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional
from datetime import datetime

from app.models.user import UserRole


class TeamResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserBase(BaseModel):
    email: EmailStr
    full_name: str = Field(..., min_length=2, max_length=100)


class UserCreate(UserBase):
    """Team admin adds a member to their own team."""
    password: str = Field(..., min_length=6)
    role: UserRole = UserRole.MEMBER


class RegisterRequest(UserBase):
    """Self registration: creates a new team and its first admin."""
    password: str = Field(..., min_length=6)
    team_name: str = Field(..., min_length=1, max_length=100)
    team_description: Optional[str] = Field(None, max_length=500)


class UserResponse(UserBase):
    id: int
    team_id: int
    role: UserRole
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginResponse(Token):
    user: UserResponse


class RegisterResponse(LoginResponse):
    team: TeamResponse
