"""
Identity service for user account operations.
"""

import asyncio
from datetime import datetime
from typing import List, Optional

from src.kernel.errors import BadRequest, Conflict, InvalidInput, NotFound
from src.kernel.identity.jwt import JWTManager
from src.kernel.identity.password import hash_password, verify_password
from src.kernel.store import Document, DocumentStore, Pagination, StoreError, build_user_filter
from src.logging_config import get_logger

logger = get_logger(__name__)

SIGN_UP_FAILED = "User did not provide email, name or password"
INVALID_CREDENTIALS = "Invalid username or password"


class IdentityService:
    """
    Service for user identity operations.

    Handles registration, password login and user lookups.
    """

    def __init__(self, store: DocumentStore, jwt_manager: JWTManager):
        self.users = store.users
        self.jwt_manager = jwt_manager

    async def register_user(self, name: str, email: str, password: str) -> Document:
        """
        Register a new user.

        Args:
            name: Unique user name
            email: User's email address
            password: Plain text password

        Returns:
            The created user document

        Raises:
            InvalidInput: If the password is empty
            Conflict: If the name is already taken
            BadRequest: If the store rejects the write
        """
        password_hash = await asyncio.to_thread(hash_password, password)

        try:
            existing = await self.users.find(build_user_filter(username=name))
            if existing:
                raise Conflict("User already exists", f"Name '{name}' is already registered")

            user = await self.users.create({
                "name": name,
                "email": email,
                "password": password_hash,
                "projects": [],
                "contacts": [],
            })
        except StoreError as e:
            raise BadRequest(SIGN_UP_FAILED, str(e)) from e

        logger.info("User registered", extra={"user_id": user["id"]})
        return user

    async def authenticate(self, name: str, password: str) -> tuple[Document, str, datetime]:
        """
        Check a name/password pair and issue an access token.

        Returns:
            Tuple of (user document, token, expiration_datetime)

        Raises:
            NotFound: If no user has that name
            BadRequest: If the password does not match
        """
        try:
            matches = await self.users.find(build_user_filter(username=name))
        except StoreError as e:
            raise NotFound(INVALID_CREDENTIALS, f"User lookup failed: {e}") from e
        if not matches:
            raise NotFound(INVALID_CREDENTIALS, "User not found")

        user = matches[0]
        try:
            is_password_correct = await asyncio.to_thread(
                verify_password, password, user.get("password", "")
            )
        except InvalidInput as e:
            raise BadRequest(INVALID_CREDENTIALS, e.private_message) from e

        if not is_password_correct:
            raise BadRequest(INVALID_CREDENTIALS, "Invalid password")

        token, expires_at = self.jwt_manager.issue_token(user["id"], user["name"])
        logger.info("User logged in", extra={"user_id": user["id"]})
        return user, token, expires_at

    async def get_user(self, user_id: str) -> Document:
        try:
            user = await self.users.find_by_id(user_id)
        except StoreError as e:
            raise NotFound("Requested user does not exist", str(e)) from e
        if user is None:
            raise NotFound("Requested user does not exist", f"No user with id {user_id}")
        return user

    async def list_users(
        self,
        username: Optional[str] = None,
        pagination: Pagination = Pagination(),
    ) -> List[Document]:
        """List users, optionally by exact name. An empty result is NotFound."""
        try:
            users = await self.users.find(
                build_user_filter(username=username),
                offset=pagination.offset,
                limit=pagination.limit,
            )
        except StoreError as e:
            raise NotFound("No users found", f"Error while getting users: {e}") from e

        if not users:
            raise NotFound("No users found", "No users found")
        return users
