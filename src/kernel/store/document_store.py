"""
Process-wide document store: the users and projects collections.
"""

from sqlalchemy.ext.asyncio import AsyncEngine

from src.database import build_session_maker, close_db, init_db
from src.kernel.models.document import ProjectDocument, UserDocument
from src.kernel.store.collection import DocumentCollection


class DocumentStore:
    """Owns the engine and hands out one collection per entity."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        session_maker = build_session_maker(engine)
        dialect = engine.dialect.name
        self.users = DocumentCollection("users", UserDocument, session_maker, dialect)
        self.projects = DocumentCollection("projects", ProjectDocument, session_maker, dialect)

    async def init(self) -> None:
        await init_db(self.engine)

    async def close(self) -> None:
        await close_db(self.engine)
