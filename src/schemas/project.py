"""
Project schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ProjectUpdate(BaseModel):
    """Full project document sent on update (whole-document replace)."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=2000)
    repository: str = ""
    technologies: List[str] = []
    logo: str = ""
    logo_backup: Optional[str] = None


class ProjectCreate(ProjectUpdate):
    """Project creation request."""

    author: str = Field("", max_length=15)
    author_id: str = Field(..., min_length=1)


class ProjectResponse(BaseModel):
    """Project response."""

    id: str
    name: str
    description: str = ""
    repository: str = ""
    author: str = ""
    author_id: Optional[str] = None
    technologies: List[str] = []
    logo: str = ""
    logo_backup: Optional[str] = None


class ProjectCreatedResponse(BaseModel):
    projectCreated: ProjectResponse


class ProjectDetailResponse(BaseModel):
    project: ProjectResponse


class ProjectUpdatedResponse(BaseModel):
    updatedProject: ProjectResponse


class ProjectPageBody(BaseModel):
    offset: int
    limit: int
    list: List[ProjectResponse]


class ProjectListResponse(BaseModel):
    projects: ProjectPageBody


class AuthorProjectsBody(BaseModel):
    author: str
    total: int
    projects: List[ProjectResponse]


class AuthorProjectsResponse(BaseModel):
    projectsByAuthor: AuthorProjectsBody


class DeletedProject(BaseModel):
    id: str
    status: str = "Deleted"


class ProjectDeletedResponse(BaseModel):
    projectDeleted: DeletedProject
