"""
Contact list management.

A friend link is one-directional: only the requester's contacts change.
The contacts list is a set; adding an existing contact is rejected.
"""

from typing import List

from src.kernel.errors import Conflict, NotFound
from src.kernel.store import Document, DocumentStore, StaleDocumentError, StoreError
from src.logging_config import get_logger

logger = get_logger(__name__)

ADD_FRIEND_FAILED = "Bad request"
ALREADY_A_CONTACT = "Requested friend is already a contact"


class ContactService:
    def __init__(self, store: DocumentStore):
        self.users = store.users

    async def add_friend(self, user_id: str, friend_id: str) -> Document:
        """
        Add friend_id to user_id's contacts.

        Returns:
            The friend's user document

        Raises:
            Conflict: If friend_id is already a contact, or the list changed concurrently
            NotFound: If either user is missing or the store fails
        """
        try:
            user = await self.users.find_by_id(user_id)
            friend = await self.users.find_by_id(friend_id)
        except StoreError as e:
            raise NotFound(ADD_FRIEND_FAILED, f"Error while adding friend: {e}") from e

        if user is None or friend is None:
            missing = user_id if user is None else friend_id
            raise NotFound(ADD_FRIEND_FAILED, f"Error while adding friend: user {missing} not found")

        contacts = user.get("contacts") or []
        if friend_id in contacts:
            raise Conflict(ALREADY_A_CONTACT, f"{friend_id} already in contacts of {user_id}")

        try:
            updated = await self.users.find_by_id_and_update(
                user_id,
                {"contacts": [*contacts, friend_id]},
                expected_version=user["version"],
            )
        except StaleDocumentError as e:
            raise Conflict(
                "Contact list changed, please retry",
                f"Error while adding friend: {e}",
            ) from e
        except StoreError as e:
            raise NotFound(ADD_FRIEND_FAILED, f"Error while adding friend: {e}") from e

        if updated is None:
            raise NotFound(ADD_FRIEND_FAILED, f"Error while adding friend: user {user_id} vanished")

        logger.info("Friend added", extra={"user_id": user_id, "friend_id": friend_id})
        return friend

    async def list_friends(self, user_id: str) -> List[Document]:
        """The user documents listed in user_id's contacts."""
        try:
            user = await self.users.find_by_id(user_id)
            if user is None:
                raise NotFound("Requested user does not exist", f"No user with id {user_id}")
            return await self.users.find({"id": {"$in": user.get("contacts") or []}})
        except StoreError as e:
            raise NotFound("Requested user does not exist", str(e)) from e
