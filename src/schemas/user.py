"""User and authentication schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """A user profile as seen by the API."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320, description="Login email")
    password: str = Field(min_length=6, description="Plain text password")
    full_name: Optional[str] = Field(default=None, max_length=200)
    avatar_url: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    user: User
    token: str


class CurrentUserResponse(BaseModel):
    user: User
