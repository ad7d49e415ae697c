"""
Keyed document collection over a SQLAlchemy table.

Each primitive opens its own session and commits it, so every call is
atomic on its own and nothing spans two documents. Callers that need
multi-document consistency must compensate themselves.
"""

import copy
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Type

from sqlalchemy import ColumnElement, cast, false, func, or_, select, update
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.kernel.models.base import generate_id
from src.kernel.models.document import DocumentMixin
from src.logging_config import get_logger

logger = get_logger(__name__)

Document = Dict[str, Any]

# Keys owned by the store; never written into a document body
_MANAGED_KEYS = ("id", "version")


class StoreError(Exception):
    """A store primitive failed."""


class StaleDocumentError(StoreError):
    """A compare-and-swap write lost to a concurrent writer."""


def _field_matches(
    model: Type[DocumentMixin],
    key: str,
    candidates: List[Any],
    dialect: str,
) -> ColumnElement[bool]:
    """
    Body field equals one of the candidates, or is a list holding one.

    SQLite walks the field with json_each, which yields the value itself for
    scalars and each element for arrays. PostgreSQL uses jsonb containment,
    which treats a scalar inside an array the same way.
    """
    if not candidates:
        return false()

    if dialect == "postgresql":
        field = cast(model.body, JSONB)[key]
        return or_(*(field.contains(candidate) for candidate in candidates))

    elements = func.json_each(model.body, f"$.{key}").table_valued("value")
    return (
        select(elements.c.value)
        .where(elements.c.value.in_(candidates))
        .exists()
    )


def compile_predicate(
    model: Type[DocumentMixin],
    predicate: Dict[str, Any],
    dialect: str = "sqlite",
) -> List[ColumnElement[bool]]:
    """
    Translate a predicate into WHERE clauses, one per key.

    Plain values match by equality, or by membership when the stored field is
    a list; {"$in": [...]} matches any candidate. The key "id" targets the
    primary key column.
    """
    clauses = []
    for key, expected in predicate.items():
        if isinstance(expected, dict) and "$in" in expected:
            candidates = list(expected["$in"])
        else:
            candidates = [expected]

        if key == "id":
            clauses.append(model.id.in_(candidates))
        else:
            clauses.append(_field_matches(model, key, candidates, dialect))
    return clauses


def _body(fields: Document) -> Document:
    return {
        key: copy.deepcopy(value)
        for key, value in fields.items()
        if key not in _MANAGED_KEYS
    }


class DocumentCollection:
    """
    Find/create/update/delete primitives for one document table.

    Usage:
        projects = DocumentCollection("projects", ProjectDocument, session_maker)
        project = await projects.create({"name": "Kanban", "author_id": user_id})
        await projects.find({"technologies": "react"}, offset=0, limit=10)
    """

    def __init__(
        self,
        name: str,
        model: Type[DocumentMixin],
        session_maker: async_sessionmaker[AsyncSession],
        dialect: str = "sqlite",
    ):
        self.name = name
        self.model = model
        self.dialect = dialect
        self._session_maker = session_maker

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as e:
            logger.error(
                "Store operation failed",
                extra={"collection": self.name, "operation": operation, "error": str(e)},
            )
            raise StoreError(f"{operation} on {self.name} failed: {e}") from e

    async def find(
        self,
        predicate: Optional[Dict[str, Any]] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Document]:
        """
        Return documents matching the predicate, oldest first.

        Offset and limit are applied after filtering; a limit of 0 or None
        means no limit.
        """
        stmt = (
            select(self.model)
            .where(*compile_predicate(self.model, predicate or {}, self.dialect))
            .order_by(self.model.created_at, self.model.id)
        )
        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)

        async with self._transaction("find") as session:
            result = await session.execute(stmt)
            return [record.to_document() for record in result.scalars().all()]

    async def find_by_id(self, document_id: str) -> Optional[Document]:
        async with self._transaction("find_by_id") as session:
            record = await session.get(self.model, document_id)
            return record.to_document() if record else None

    async def create(self, fields: Document) -> Document:
        record = self.model(id=generate_id(), body=_body(fields), version=1)
        async with self._transaction("create") as session:
            session.add(record)
        return record.to_document()

    async def find_by_id_and_update(
        self,
        document_id: str,
        partial: Document,
        expected_version: Optional[int] = None,
    ) -> Optional[Document]:
        """
        Merge fields into a document and return the updated document.

        Returns None when the document does not exist. With expected_version,
        raises StaleDocumentError unless the stored version still matches.
        """
        async with self._transaction("find_by_id_and_update") as session:
            record = await session.get(self.model, document_id)
            if record is None:
                return None
            body = {**record.body, **_body(partial)}
            version = await self._swap(session, record, body, expected_version)

        return {**body, "id": document_id, "version": version}

    async def replace_one(
        self,
        document_id: str,
        document: Document,
        expected_version: Optional[int] = None,
    ) -> bool:
        """Replace a whole document body. Returns False when nothing matched."""
        async with self._transaction("replace_one") as session:
            record = await session.get(self.model, document_id)
            if record is None:
                return False
            await self._swap(session, record, _body(document), expected_version)
        return True

    async def find_by_id_and_delete(self, document_id: str) -> Optional[Document]:
        """Delete a document and return what was deleted, or None."""
        async with self._transaction("find_by_id_and_delete") as session:
            record = await session.get(self.model, document_id)
            if record is None:
                return None
            document = record.to_document()
            await session.delete(record)
        return document

    async def _swap(
        self,
        session: AsyncSession,
        record: DocumentMixin,
        body: Document,
        expected_version: Optional[int],
    ) -> int:
        current = record.version
        if expected_version is not None and current != expected_version:
            raise StaleDocumentError(
                f"{self.name}/{record.id} is at version {current}, expected {expected_version}"
            )

        result = await session.execute(
            update(self.model)
            .where(self.model.id == record.id, self.model.version == current)
            .values(body=body, version=current + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise StaleDocumentError(f"{self.name}/{record.id} changed during write")
        return current + 1
