"""
Query assembly for list endpoints.

Only recognized filters make it into a predicate; everything else the
client sends is ignored.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class Pagination:
    """Offset/limit window applied after filtering. A limit of 0 means no limit."""

    offset: int = DEFAULT_OFFSET
    limit: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        if self.offset < 0 or self.limit < 0:
            raise ValueError("offset and limit must be non-negative")


def build_project_filter(
    technology: Optional[str] = None,
    author_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Predicate for project queries: exact technology and/or author match."""
    predicate: Dict[str, Any] = {}
    if technology:
        predicate["technologies"] = technology
    if author_id:
        predicate["author_id"] = author_id
    return predicate


def build_user_filter(username: Optional[str] = None) -> Dict[str, Any]:
    """Predicate for user queries: exact name match."""
    predicate: Dict[str, Any] = {}
    if username:
        predicate["name"] = username
    return predicate
