"""
Document store: keyed JSON documents with find/create/update/delete primitives.
"""

from src.kernel.store.collection import (
    Document,
    DocumentCollection,
    StaleDocumentError,
    StoreError,
    compile_predicate,
)
from src.kernel.store.document_store import DocumentStore
from src.kernel.store.query import (
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    Pagination,
    build_project_filter,
    build_user_filter,
)

__all__ = [
    "Document",
    "DocumentCollection",
    "DocumentStore",
    "StaleDocumentError",
    "StoreError",
    "compile_predicate",
    "DEFAULT_LIMIT",
    "DEFAULT_OFFSET",
    "Pagination",
    "build_project_filter",
    "build_user_filter",
]
