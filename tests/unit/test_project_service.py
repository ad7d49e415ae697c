"""Unit tests for the project/author sagas against a mocked store."""

import pytest

from src.kernel.errors import BadRequest, Conflict, InconsistentState, NotFound
from src.kernel.projects.project_service import (
    AUTHOR_CHANGED,
    AUTHOR_MISSING,
    CREATE_FAILED,
    DELETE_FAILED,
    NO_PROJECTS,
    UPDATE_FAILED,
    ProjectService,
)
from src.kernel.store import Pagination, StaleDocumentError, StoreError

AUTHOR = {"id": "u1", "version": 3, "name": "alice", "projects": ["p0"], "contacts": []}


@pytest.fixture
def fields(sample_project) -> dict:
    return {**sample_project, "author_id": "u1"}


@pytest.fixture
def service(mock_store, fields) -> ProjectService:
    mock_store.projects.create.return_value = {**fields, "id": "p1", "version": 1}
    mock_store.users.find_by_id.return_value = dict(AUTHOR)
    mock_store.users.find_by_id_and_update.return_value = {**AUTHOR, "projects": ["p0", "p1"]}
    return ProjectService(mock_store)


class TestCreateProject:

    @pytest.mark.asyncio
    async def test_links_project_to_author(self, service, mock_store, fields):
        project = await service.create_project(fields)

        assert project["id"] == "p1"
        mock_store.users.find_by_id_and_update.assert_awaited_once_with(
            "u1",
            {"projects": ["p0", "p1"]},
            expected_version=3,
        )
        mock_store.projects.find_by_id_and_delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_insert_failure_never_touches_author(self, service, mock_store, fields):
        mock_store.projects.create.side_effect = StoreError("disk full")

        with pytest.raises(BadRequest) as exc_info:
            await service.create_project(fields)

        assert exc_info.value.public_message == CREATE_FAILED
        assert "disk full" in exc_info.value.private_message
        mock_store.users.find_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_author_deletes_project(self, service, mock_store, fields):
        mock_store.users.find_by_id.return_value = None

        with pytest.raises(NotFound) as exc_info:
            await service.create_project(fields)

        assert exc_info.value == NotFound(AUTHOR_MISSING, "The author doesn't exist")
        mock_store.projects.find_by_id_and_delete.assert_awaited_once_with("p1")
        mock_store.users.find_by_id_and_update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_author_lookup_error_deletes_project(self, service, mock_store, fields):
        mock_store.users.find_by_id.side_effect = StoreError("connection reset")

        with pytest.raises(NotFound) as exc_info:
            await service.create_project(fields)

        assert exc_info.value == NotFound(AUTHOR_MISSING, "The author doesn't exist")
        mock_store.projects.find_by_id_and_delete.assert_awaited_once_with("p1")

    @pytest.mark.asyncio
    async def test_link_failure_deletes_project(self, service, mock_store, fields):
        mock_store.users.find_by_id_and_update.side_effect = StoreError("write failed")

        with pytest.raises(BadRequest) as exc_info:
            await service.create_project(fields)

        assert exc_info.value.public_message == CREATE_FAILED
        mock_store.projects.find_by_id_and_delete.assert_awaited_once_with("p1")

    @pytest.mark.asyncio
    async def test_concurrent_author_write_is_conflict(self, service, mock_store, fields):
        mock_store.users.find_by_id_and_update.side_effect = StaleDocumentError("raced")

        with pytest.raises(Conflict) as exc_info:
            await service.create_project(fields)

        assert exc_info.value.public_message == AUTHOR_CHANGED
        mock_store.projects.find_by_id_and_delete.assert_awaited_once_with("p1")

    @pytest.mark.asyncio
    async def test_author_vanishing_before_link_deletes_project(self, service, mock_store, fields):
        mock_store.users.find_by_id_and_update.return_value = None

        with pytest.raises(BadRequest):
            await service.create_project(fields)

        mock_store.projects.find_by_id_and_delete.assert_awaited_once_with("p1")

    @pytest.mark.asyncio
    async def test_failed_rollback_is_reported(self, service, mock_store, fields):
        mock_store.users.find_by_id.return_value = None
        mock_store.projects.find_by_id_and_delete.side_effect = StoreError("gone away")

        with pytest.raises(InconsistentState) as exc_info:
            await service.create_project(fields)

        assert "p1" in exc_info.value.private_message
        assert exc_info.value.public_message == "Internal server error"


class TestReadProjects:

    @pytest.mark.asyncio
    async def test_get_project(self, service, mock_store):
        mock_store.projects.find_by_id.return_value = {"id": "p1", "name": "Kanban board"}

        project = await service.get_project("p1")

        assert project["name"] == "Kanban board"

    @pytest.mark.asyncio
    async def test_get_missing_project(self, service, mock_store):
        mock_store.projects.find_by_id.return_value = None

        with pytest.raises(NotFound) as exc_info:
            await service.get_project("p404")

        assert exc_info.value.public_message == NO_PROJECTS

    @pytest.mark.asyncio
    async def test_get_project_store_failure(self, service, mock_store):
        mock_store.projects.find_by_id.side_effect = StoreError("timeout")

        with pytest.raises(NotFound) as exc_info:
            await service.get_project("p1")

        assert exc_info.value.public_message == NO_PROJECTS
        assert exc_info.value.private_message.startswith("Error while finding the project requested")

    @pytest.mark.asyncio
    async def test_technology_filter_reaches_store(self, service, mock_store):
        mock_store.projects.find.return_value = []

        await service.list_projects(technology="react")

        mock_store.projects.find.assert_awaited_once_with(
            {"technologies": "react"},
            offset=0,
            limit=10,
        )

    @pytest.mark.asyncio
    async def test_empty_listing_is_a_result(self, service, mock_store):
        mock_store.projects.find.return_value = []

        page = await service.list_projects(pagination=Pagination(offset=50, limit=10))

        assert page.items == []
        assert (page.offset, page.limit) == (50, 10)

    @pytest.mark.asyncio
    async def test_listing_store_failure(self, service, mock_store):
        mock_store.projects.find.side_effect = StoreError("timeout")

        with pytest.raises(NotFound) as exc_info:
            await service.list_projects()

        assert exc_info.value.private_message.startswith("Error while getting projects")

    @pytest.mark.asyncio
    async def test_by_author_total_comes_from_author_list(self, service, mock_store):
        mock_store.users.find_by_id.return_value = {**AUTHOR, "projects": ["p0", "p1", "p2"]}
        mock_store.projects.find.return_value = [{"id": "p0"}]

        result = await service.list_projects_by_author("u1")

        assert result.total == 3
        assert result.items == [{"id": "p0"}]
        mock_store.projects.find.assert_awaited_once_with({"author_id": "u1"}, offset=0, limit=10)

    @pytest.mark.asyncio
    async def test_by_author_without_projects_skips_query(self, service, mock_store):
        mock_store.users.find_by_id.return_value = {**AUTHOR, "projects": []}

        result = await service.list_projects_by_author("u1")

        assert result.total == 0
        mock_store.projects.find.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_by_missing_author(self, service, mock_store):
        mock_store.users.find_by_id.return_value = None

        with pytest.raises(NotFound) as exc_info:
            await service.list_projects_by_author("u404")

        assert exc_info.value.private_message == "Requesting user doesn't exist"


class TestUpdateProject:

    @pytest.mark.asyncio
    async def test_replaces_whole_document_keeping_author(self, service, mock_store, sample_project):
        mock_store.projects.find_by_id.return_value = {
            **sample_project,
            "id": "p1",
            "author": "alice",
            "author_id": "u1",
        }
        mock_store.projects.replace_one.return_value = True
        changes = {**sample_project, "name": "Updated name"}

        project = await service.update_project("p1", changes)

        mock_store.projects.replace_one.assert_awaited_once_with(
            "p1",
            {**changes, "author": "alice", "author_id": "u1"},
        )
        assert project["name"] == "Updated name"
        assert project["id"] == "p1"

    @pytest.mark.asyncio
    async def test_missing_project(self, service, mock_store, sample_project):
        mock_store.projects.find_by_id.return_value = None

        with pytest.raises(BadRequest) as exc_info:
            await service.update_project("p404", sample_project)

        assert exc_info.value.public_message == UPDATE_FAILED
        mock_store.projects.replace_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_failure(self, service, mock_store, sample_project):
        mock_store.projects.find_by_id.side_effect = StoreError("timeout")

        with pytest.raises(BadRequest) as exc_info:
            await service.update_project("p1", sample_project)

        assert exc_info.value.private_message.startswith("Error while updating the project")


class TestDeleteProject:

    @pytest.mark.asyncio
    async def test_unlinks_every_occurrence_from_author(self, service, mock_store):
        mock_store.projects.find_by_id_and_delete.return_value = {"id": "p1", "author_id": "u1"}
        mock_store.users.find_by_id.return_value = {**AUTHOR, "projects": ["p1", "p2", "p1"]}

        await service.delete_project("p1", delete_from_author=True)

        mock_store.users.find_by_id_and_update.assert_awaited_once_with(
            "u1",
            {"projects": ["p2"]},
            expected_version=3,
        )

    @pytest.mark.asyncio
    async def test_without_flag_leaves_author_alone(self, service, mock_store):
        mock_store.projects.find_by_id_and_delete.return_value = {"id": "p1", "author_id": "u1"}

        deleted = await service.delete_project("p1", delete_from_author=False)

        assert deleted["id"] == "p1"
        mock_store.users.find_by_id.assert_not_awaited()
        mock_store.users.find_by_id_and_update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_failure(self, service, mock_store):
        mock_store.projects.find_by_id_and_delete.side_effect = StoreError("boom")

        with pytest.raises(NotFound) as exc_info:
            await service.delete_project("p1", delete_from_author=True)

        assert exc_info.value == NotFound(DELETE_FAILED, "Error while deleting the project: boom")
        mock_store.users.find_by_id_and_update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_project(self, service, mock_store):
        mock_store.projects.find_by_id_and_delete.return_value = None

        with pytest.raises(NotFound):
            await service.delete_project("p404", delete_from_author=True)

    @pytest.mark.asyncio
    async def test_author_update_failure(self, service, mock_store):
        mock_store.projects.find_by_id_and_delete.return_value = {"id": "p1", "author_id": "u1"}
        mock_store.users.find_by_id_and_update.side_effect = StoreError("write failed")

        with pytest.raises(NotFound) as exc_info:
            await service.delete_project("p1", delete_from_author=True)

        assert exc_info.value.public_message == DELETE_FAILED
