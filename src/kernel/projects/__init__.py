"""
Project/author consistency.
"""

from src.kernel.projects.project_service import AuthorProjects, ProjectPage, ProjectService

__all__ = [
    "AuthorProjects",
    "ProjectPage",
    "ProjectService",
]
