"""
Project endpoints.
"""

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from src.api.deps import CurrentIdentity, Page, Projects
from src.kernel.projects.project_service import NO_PROJECTS
from src.schemas.project import (
    AuthorProjectsBody,
    AuthorProjectsResponse,
    DeletedProject,
    ProjectCreate,
    ProjectCreatedResponse,
    ProjectDeletedResponse,
    ProjectDetailResponse,
    ProjectListResponse,
    ProjectPageBody,
    ProjectResponse,
    ProjectUpdate,
    ProjectUpdatedResponse,
)

router = APIRouter()


@router.get("/all", response_model=ProjectListResponse)
async def get_all_projects(
    projects: Projects,
    page: Page,
    technology: str = Query("", description="Only projects using this technology"),
):
    """
    List projects, filtered then paginated.

    An empty page answers 404 with an explanatory body rather than an error.
    """
    result = await projects.list_projects(technology=technology or None, pagination=page)

    if not result.items:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"projects": NO_PROJECTS},
        )

    return ProjectListResponse(
        projects=ProjectPageBody(
            offset=result.offset,
            limit=result.limit,
            list=[ProjectResponse.model_validate(p) for p in result.items],
        )
    )


@router.get("/author/{user_id}", response_model=AuthorProjectsResponse)
async def get_projects_by_author(
    user_id: str,
    projects: Projects,
    page: Page,
    technology: str = Query(""),
):
    """List an author's projects; total comes from the author's own list."""
    result = await projects.list_projects_by_author(
        user_id,
        technology=technology or None,
        pagination=page,
    )

    if result.total == 0:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"projectsByAuthor": {"author": user_id, "total": "0 projects"}},
        )
    if not result.items:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "projectsByAuthor": {
                    "author": user_id,
                    "total": result.total,
                    "projects": NO_PROJECTS,
                }
            },
        )

    return AuthorProjectsResponse(
        projectsByAuthor=AuthorProjectsBody(
            author=user_id,
            total=result.total,
            projects=[ProjectResponse.model_validate(p) for p in result.items],
        )
    )


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(project_id: str, projects: Projects):
    project = await projects.get_project(project_id)
    return ProjectDetailResponse(project=ProjectResponse.model_validate(project))


@router.post("/new", response_model=ProjectCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_project(data: ProjectCreate, identity: CurrentIdentity, projects: Projects):
    """Create a project and add it to its author's project list."""
    project = await projects.create_project(data.model_dump())
    return ProjectCreatedResponse(projectCreated=ProjectResponse.model_validate(project))


@router.put("/update/{project_id}", response_model=ProjectUpdatedResponse)
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    identity: CurrentIdentity,
    projects: Projects,
):
    """Replace a project's fields. The author cannot be changed."""
    project = await projects.update_project(project_id, data.model_dump())
    return ProjectUpdatedResponse(updatedProject=ProjectResponse.model_validate(project))


@router.delete("/delete/{project_id}", response_model=ProjectDeletedResponse)
async def delete_project(
    project_id: str,
    identity: CurrentIdentity,
    projects: Projects,
    delete_from_author: bool = Query(False, description="Also remove the id from the author's projects"),
):
    await projects.delete_project(project_id, delete_from_author=delete_from_author)
    return ProjectDeletedResponse(projectDeleted=DeletedProject(id=project_id))
