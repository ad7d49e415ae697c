"""
Kernel Data Models

SQLAlchemy tables backing the user and project document collections.
"""

from src.kernel.models.base import Base, TimestampMixin, generate_id
from src.kernel.models.document import DocumentMixin, UserDocument, ProjectDocument

__all__ = [
    "Base",
    "TimestampMixin",
    "generate_id",
    "DocumentMixin",
    "UserDocument",
    "ProjectDocument",
]
