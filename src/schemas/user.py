"""
User and authentication schemas.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    """User registration request."""

    name: str = Field(..., min_length=3, max_length=15)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class UserLogin(BaseModel):
    """User login request."""

    name: str = Field(..., min_length=3, max_length=15)
    password: str


class UserResponse(BaseModel):
    """Public user profile. The password hash never leaves the service."""

    id: str
    name: str
    email: str
    projects: List[str] = []
    contacts: List[str] = []


class SignUpResponse(BaseModel):
    newUser: UserResponse


class TokenResponse(BaseModel):
    """Authentication token response."""

    token: str
    token_type: str = "bearer"
    expires_at: datetime


class UserDataResponse(BaseModel):
    user: UserResponse


class UserFriendsResponse(BaseModel):
    userFriends: List[UserResponse]


class UserListResponse(BaseModel):
    users: List[UserResponse]


class FriendAddedResponse(BaseModel):
    friendAdded: str
