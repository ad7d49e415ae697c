"""
Project service: keeps projects and their author's project list in step.

The store has no multi-document transactions, so create and delete are
written as short sagas. Each step runs only after the previous one
succeeded; when a later step fails, the one step before it is undone.

Create:
    1. insert project
    2. load author          -> on failure delete the project, NotFound
    3. append id to author  -> on failure delete the project, BadRequest
                               (Conflict when another write got there first)
    A failed compensation raises InconsistentState naming the orphan.

Delete:
    1. delete project
    2. (delete_from_author) drop every occurrence of the id from the author
    No compensation: a failed step 2 is reported, the project stays deleted.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.kernel.errors import BadRequest, Conflict, InconsistentState, NotFound
from src.kernel.store import (
    Document,
    DocumentStore,
    Pagination,
    StaleDocumentError,
    StoreError,
    build_project_filter,
)
from src.logging_config import get_logger

logger = get_logger(__name__)

CREATE_FAILED = "Unable to create the project"
AUTHOR_MISSING = "Couldn't assign an author to the project"
NO_PROJECTS = "No projects found"
AUTHOR_PROJECTS_FAILED = "Unable to get the requested projects"
UPDATE_FAILED = "Couldn't update any project"
DELETE_FAILED = "Couldn't delete any project"
AUTHOR_CHANGED = "Author changed, please retry"


@dataclass
class ProjectPage:
    offset: int
    limit: int
    items: List[Document] = field(default_factory=list)


@dataclass
class AuthorProjects:
    """
    Projects of one author.

    total is the length of the author's own project list, not a count of
    project documents, so it drifts if a link or unlink ever went missing.
    """

    author_id: str
    total: int
    items: List[Document] = field(default_factory=list)


class ProjectService:
    """Project operations that touch both the projects and users collections."""

    def __init__(self, store: DocumentStore):
        self.projects = store.projects
        self.users = store.users

    async def create_project(self, fields: Dict[str, Any]) -> Document:
        """
        Insert a project and link it to its author.

        Args:
            fields: Project fields, including author_id

        Returns:
            The created project document

        Raises:
            BadRequest: If the insert or the author link fails
            NotFound: If the author does not exist
            Conflict: If the author changed between lookup and link
            InconsistentState: If undoing the insert also fails
        """
        author_id = fields.get("author_id")

        try:
            project = await self.projects.create(fields)
        except StoreError as e:
            raise BadRequest(CREATE_FAILED, f"Unable to create the project: {e}") from e

        project_id = project["id"]

        try:
            author = await self.users.find_by_id(author_id) if author_id else None
        except StoreError as e:
            await self._discard_project(project_id, f"author lookup failed: {e}")
            raise NotFound(AUTHOR_MISSING, "The author doesn't exist") from e

        if author is None:
            await self._discard_project(project_id, f"author {author_id} not found")
            raise NotFound(AUTHOR_MISSING, "The author doesn't exist")

        try:
            linked = await self.users.find_by_id_and_update(
                author_id,
                {"projects": [*author.get("projects", []), project_id]},
                expected_version=author["version"],
            )
        except StaleDocumentError as e:
            await self._discard_project(project_id, f"author changed during link: {e}")
            raise Conflict(AUTHOR_CHANGED, f"Couldn't link the project to its author: {e}") from e
        except StoreError as e:
            await self._discard_project(project_id, f"author link failed: {e}")
            raise BadRequest(CREATE_FAILED, f"Couldn't link the project to its author: {e}") from e

        if linked is None:
            await self._discard_project(project_id, f"author {author_id} vanished before link")
            raise BadRequest(CREATE_FAILED, "Couldn't link the project to its author")

        logger.info("Project created", extra={"project_id": project_id, "author_id": author_id})
        return project

    async def _discard_project(self, project_id: str, reason: str) -> None:
        """Undo step 1 of create."""
        logger.warning(
            "Rolling back project creation",
            extra={"project_id": project_id, "reason": reason},
        )
        try:
            await self.projects.find_by_id_and_delete(project_id)
        except StoreError as e:
            logger.error(
                "Rollback failed, project left without author link",
                extra={"project_id": project_id, "reason": reason, "error": str(e)},
            )
            raise InconsistentState(
                private_message=f"Project {project_id} orphaned ({reason}); delete failed: {e}"
            ) from e

    async def get_project(self, project_id: str) -> Document:
        try:
            project = await self.projects.find_by_id(project_id)
        except StoreError as e:
            logger.error("Project lookup failed", extra={"project_id": project_id, "error": str(e)})
            raise NotFound(NO_PROJECTS, f"Error while finding the project requested: {e}") from e

        if project is None:
            logger.info("Project not found", extra={"project_id": project_id})
            raise NotFound(NO_PROJECTS, f"No project with id {project_id}")
        return project

    async def list_projects(
        self,
        technology: Optional[str] = None,
        pagination: Pagination = Pagination(),
    ) -> ProjectPage:
        """A page of projects; an empty page is a result, not an error."""
        try:
            items = await self.projects.find(
                build_project_filter(technology=technology),
                offset=pagination.offset,
                limit=pagination.limit,
            )
        except StoreError as e:
            raise NotFound(NO_PROJECTS, f"Error while getting projects: {e}") from e

        return ProjectPage(offset=pagination.offset, limit=pagination.limit, items=items)

    async def list_projects_by_author(
        self,
        author_id: str,
        technology: Optional[str] = None,
        pagination: Pagination = Pagination(),
    ) -> AuthorProjects:
        try:
            author = await self.users.find_by_id(author_id)
        except StoreError as e:
            raise NotFound(AUTHOR_PROJECTS_FAILED, f"Requesting user doesn't exist: {e}") from e
        if author is None:
            raise NotFound(AUTHOR_PROJECTS_FAILED, "Requesting user doesn't exist")

        total = len(author.get("projects") or [])
        if total == 0:
            return AuthorProjects(author_id=author_id, total=0)

        try:
            items = await self.projects.find(
                build_project_filter(technology=technology, author_id=author_id),
                offset=pagination.offset,
                limit=pagination.limit,
            )
        except StoreError as e:
            raise NotFound(AUTHOR_PROJECTS_FAILED, f"Couldn't get any project: {e}") from e

        return AuthorProjects(author_id=author_id, total=total, items=items)

    async def update_project(self, project_id: str, fields: Dict[str, Any]) -> Document:
        """
        Replace a project's document with the caller's fields.

        The author reference and display name are carried over from the
        stored document so an update can never move a project out of its
        author's list.
        """
        try:
            existing = await self.projects.find_by_id(project_id)
            if existing is None:
                raise BadRequest(UPDATE_FAILED, f"No project with id {project_id}")

            replacement = {
                **fields,
                "author": existing.get("author", ""),
                "author_id": existing.get("author_id"),
            }
            if not await self.projects.replace_one(project_id, replacement):
                raise BadRequest(UPDATE_FAILED, f"Project {project_id} was deleted during update")
        except StoreError as e:
            raise BadRequest(UPDATE_FAILED, f"Error while updating the project: {e}") from e

        logger.info("Project updated", extra={"project_id": project_id})
        return {**replacement, "id": project_id}

    async def delete_project(self, project_id: str, delete_from_author: bool = False) -> Document:
        """
        Delete a project, optionally unlinking it from its author.

        Returns:
            The deleted project document

        Raises:
            NotFound: If the project is missing or either step fails
        """
        try:
            project = await self.projects.find_by_id_and_delete(project_id)
        except StoreError as e:
            raise NotFound(DELETE_FAILED, f"Error while deleting the project: {e}") from e

        if project is None:
            raise NotFound(DELETE_FAILED, f"No project with id {project_id}")

        if delete_from_author:
            await self._unlink_from_author(project)

        logger.info(
            "Project deleted",
            extra={"project_id": project_id, "unlinked": delete_from_author},
        )
        return project

    async def _unlink_from_author(self, project: Document) -> None:
        project_id = project["id"]
        author_id = project.get("author_id")

        try:
            author = await self.users.find_by_id(author_id) if author_id else None
            if author is None:
                raise NotFound(
                    DELETE_FAILED,
                    f"Error while deleting the project: author {author_id} not found",
                )

            remaining = [pid for pid in author.get("projects", []) if pid != project_id]
            updated = await self.users.find_by_id_and_update(
                author_id,
                {"projects": remaining},
                expected_version=author["version"],
            )
        except StoreError as e:
            logger.warning(
                "Author still lists deleted project",
                extra={"project_id": project_id, "author_id": author_id, "error": str(e)},
            )
            raise NotFound(DELETE_FAILED, f"Error while deleting the project: {e}") from e

        if updated is None:
            raise NotFound(
                DELETE_FAILED,
                f"Error while deleting the project: author {author_id} vanished",
            )
