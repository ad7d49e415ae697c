"""
User endpoints: registration, login, lookups and contacts.
"""

from typing import Optional

from fastapi import APIRouter, Query, status

from src.api.deps import Contacts, CurrentIdentity, Identities, Page
from src.schemas.user import (
    FriendAddedResponse,
    SignUpResponse,
    TokenResponse,
    UserCreate,
    UserDataResponse,
    UserFriendsResponse,
    UserListResponse,
    UserLogin,
    UserResponse,
)

router = APIRouter()


@router.post("/sign-up", response_model=SignUpResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(data: UserCreate, identities: Identities):
    """Register a new user account."""
    user = await identities.register_user(
        name=data.name,
        email=data.email,
        password=data.password,
    )
    return SignUpResponse(newUser=UserResponse.model_validate(user))


@router.post("/log-in", response_model=TokenResponse)
async def log_in(data: UserLogin, identities: Identities):
    """Authenticate by name and password and return a bearer token."""
    _, token, expires_at = await identities.authenticate(name=data.name, password=data.password)
    return TokenResponse(token=token, expires_at=expires_at)


@router.get("/all", response_model=UserListResponse)
async def get_all_users(
    identities: Identities,
    page: Page,
    username: Optional[str] = Query(None),
):
    """List users, optionally filtered by exact name."""
    users = await identities.list_users(username=username, pagination=page)
    return UserListResponse(users=[UserResponse.model_validate(u) for u in users])


@router.get("/{user_id}")
async def get_user_data(
    user_id: str,
    identities: Identities,
    contacts: Contacts,
    friends: Optional[str] = Query(None),
):
    """
    Get a user's profile.

    With ?friends=all, return the user's contacts instead.
    """
    if friends == "all":
        users = await contacts.list_friends(user_id)
        return UserFriendsResponse(userFriends=[UserResponse.model_validate(u) for u in users])

    user = await identities.get_user(user_id)
    return UserDataResponse(user=UserResponse.model_validate(user))


@router.patch("/{friend_id}", response_model=FriendAddedResponse)
async def add_friend(friend_id: str, identity: CurrentIdentity, contacts: Contacts):
    """Add a user to the caller's contacts. The friend's own list is not changed."""
    friend = await contacts.add_friend(identity.user_id, friend_id)
    return FriendAddedResponse(friendAdded=friend["name"])
