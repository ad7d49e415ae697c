"""
Document tables.

Each collection is a table of schemaless JSON bodies keyed by id. The version
column is bumped by every write and backs compare-and-swap updates.
"""

from typing import Any, Dict

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.kernel.models.base import Base, TimestampMixin, generate_id


class DocumentMixin(TimestampMixin):
    """Columns shared by every document collection."""

    id: Mapped[str] = mapped_column(
        String(32),
        primary_key=True,
        default=generate_id,
    )
    body: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    def to_document(self) -> Dict[str, Any]:
        """Flatten the row into a plain document dict."""
        return {**self.body, "id": self.id, "version": self.version}


class UserDocument(Base, DocumentMixin):
    """User documents: name, email, password hash, projects, contacts."""

    __tablename__ = "users"

    def __repr__(self) -> str:
        return f"<UserDocument {self.id}>"


class ProjectDocument(Base, DocumentMixin):
    """Project documents: name, description, repository, author_id, technologies, logo."""

    __tablename__ = "projects"

    def __repr__(self) -> str:
        return f"<ProjectDocument {self.id}>"
