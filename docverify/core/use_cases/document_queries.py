"""
Use Case: Document Queries

Leituras usadas por outros módulos (ex: ativação de prestador):
status de um documento, documentos de um dono e agregados por status.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime

from docverify.core.entities.document import Document, DocumentStatus, DocumentType
from docverify.core.interfaces.document_store import IDocumentStore
from docverify.core.result import Result
from docverify.core.use_cases.boundary import use_case_boundary

REQUIRED_DOCUMENT_TYPES = frozenset({DocumentType.IDENTITY_DOCUMENT, DocumentType.PROOF_OF_RESIDENCE})


@dataclass(frozen=True)
class DocumentStatusView:
    document_id: str
    status: DocumentStatus
    updated_at: datetime          # verified_at se houver, senão uploaded_at


@dataclass(frozen=True)
class DocumentStatusCounts:
    total: int = 0
    uploaded: int = 0
    pending: int = 0
    verified: int = 0
    rejected: int = 0


class DocumentQueries:

    def __init__(self, store: IDocumentStore):
        self._store = store

    @use_case_boundary("get document")
    async def get_document(self, document_id: str) -> Result[Document]:
        document = await self._store.get_by_id(document_id)
        if document is None:
            return Result.not_found(f"Document with id {document_id} was not found")
        return Result.ok(document)

    @use_case_boundary("list owner documents")
    async def list_owner_documents(self, owner_id: str) -> Result[list[Document]]:
        return Result.ok(await self._store.get_by_owner(owner_id))

    @use_case_boundary("get document status")
    async def get_document_status(self, document_id: str) -> Result[DocumentStatusView]:
        document = await self._store.get_by_id(document_id)
        if document is None:
            return Result.not_found(f"Document with id {document_id} was not found")
        return Result.ok(DocumentStatusView(
            document_id=document.id,
            status=document.status,
            updated_at=document.verified_at or document.uploaded_at,
        ))

    @use_case_boundary("check verified documents")
    async def has_verified_documents(self, owner_id: str) -> Result[bool]:
        documents = await self._store.get_by_owner(owner_id)
        return Result.ok(any(d.status == DocumentStatus.VERIFIED for d in documents))

    @use_case_boundary("check pending documents")
    async def has_pending_documents(self, owner_id: str) -> Result[bool]:
        documents = await self._store.get_by_owner(owner_id)
        return Result.ok(any(d.status == DocumentStatus.PENDING_VERIFICATION for d in documents))

    @use_case_boundary("check required documents")
    async def has_required_documents(self, owner_id: str) -> Result[bool]:
        """True only when every required type has a Verified document."""
        documents = await self._store.get_by_owner(owner_id)
        verified_types = {d.document_type for d in documents if d.status == DocumentStatus.VERIFIED}
        return Result.ok(REQUIRED_DOCUMENT_TYPES <= verified_types)

    @use_case_boundary("count document statuses")
    async def get_status_counts(self, owner_id: str) -> Result[DocumentStatusCounts]:
        documents = await self._store.get_by_owner(owner_id)
        counts = Counter(d.status for d in documents)
        return Result.ok(DocumentStatusCounts(
            total=len(documents),
            uploaded=counts[DocumentStatus.UPLOADED],
            pending=counts[DocumentStatus.PENDING_VERIFICATION],
            verified=counts[DocumentStatus.VERIFIED],
            rejected=counts[DocumentStatus.REJECTED],
        ))
