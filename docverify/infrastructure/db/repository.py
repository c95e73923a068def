"""
Document Repository: async SQLAlchemy implementation of IDocumentStore.

One repository instance = one unit of work: add/update stage changes
on a single session and save_changes commits them together. Use it as
an async context manager so the session is released on every path.
"""

import asyncio
import logging

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docverify.core.entities.document import Document
from docverify.core.interfaces.document_store import IDocumentStore
from docverify.infrastructure.db.database import get_session_factory
from docverify.infrastructure.db.models import DocumentRecord

logger = logging.getLogger(__name__)


class StaleDocumentError(Exception):
    """The row changed since the aggregate was loaded."""

    def __init__(self, document_id: str, expected: int, found: int):
        super().__init__(f"Document {document_id} is stale: expected v{expected}, found v{found}")
        self.document_id = document_id


class DocumentRepository(IDocumentStore):
    """Repository for Document aggregates."""

    def __init__(self, session_factory: async_sessionmaker | None = None):
        self._session_factory = session_factory or get_session_factory()
        self._session: AsyncSession | None = None
        self._pending: list[tuple[Document, DocumentRecord]] = []

    def _get_session(self) -> AsyncSession:
        if self._session is None:
            self._session = self._session_factory()
        return self._session

    async def get_by_id(self, document_id: str) -> Document | None:
        session = self._get_session()
        record = await session.get(DocumentRecord, document_id, populate_existing=True)
        return record.to_entity() if record else None

    async def get_by_owner(self, owner_id: str) -> list[Document]:
        session = self._get_session()
        rows = await session.execute(
            select(DocumentRecord)
            .filter_by(owner_id=owner_id)
            .order_by(desc(DocumentRecord.uploaded_at))
        )
        return [r.to_entity() for r in rows.scalars().all()]

    async def add(self, document: Document) -> None:
        session = self._get_session()
        record = DocumentRecord.from_entity(document)
        session.add(record)
        self._pending.append((document, record))

    async def update(self, document: Document) -> None:
        session = self._get_session()
        record = await session.get(DocumentRecord, document.id, populate_existing=True)
        if record is None:
            raise LookupError(f"Document {document.id} does not exist")
        if record.version != document.version:
            raise StaleDocumentError(document.id, document.version, record.version)
        record.apply(document)
        self._pending.append((document, record))

    async def exists(self, document_id: str) -> bool:
        session = self._get_session()
        count = await session.scalar(
            select(func.count()).select_from(DocumentRecord).filter_by(id=document_id)
        )
        return bool(count)

    async def save_changes(self) -> None:
        session = self._get_session()
        try:
            await session.commit()
        except (Exception, asyncio.CancelledError):
            await session.rollback()
            self._pending.clear()
            raise

        for document, record in self._pending:
            document.version = record.version
        if self._pending:
            logger.debug(f"Committed {len(self._pending)} document change(s)")
        self._pending.clear()

    async def close(self) -> None:
        """Release the session; uncommitted changes are discarded."""
        self._pending.clear()
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "DocumentRepository":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
