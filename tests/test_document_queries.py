"""Tests for DocumentQueries."""

from datetime import datetime, timezone

import pytest

from docverify.core.entities.document import Document, DocumentStatus, DocumentType
from docverify.core.result import ErrorKind
from docverify.core.use_cases.document_queries import DocumentQueries, DocumentStatusCounts
from tests.fakes import InMemoryDocumentStore

UPLOADED_AT = datetime(2026, 1, 10, 9, 0, tzinfo=timezone.utc)
VERIFIED_AT = datetime(2026, 1, 11, 9, 0, tzinfo=timezone.utc)


def seed(store, owner_id, document_type, status) -> Document:
    document = Document.create(owner_id, document_type, "f.pdf", f"documents/{owner_id}/f.pdf")
    document.status = status
    document.uploaded_at = UPLOADED_AT
    if status == DocumentStatus.VERIFIED:
        document.verified_at = VERIFIED_AT
    if status == DocumentStatus.REJECTED:
        document.rejection_reason = "blurry"
    return store.seed(document)


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def queries(store):
    return DocumentQueries(store)


@pytest.mark.asyncio
async def test_get_document(queries, store):
    document = seed(store, "U1", DocumentType.OTHER, DocumentStatus.UPLOADED)

    found = await queries.get_document(document.id)
    missing = await queries.get_document("missing")

    assert found.value.id == document.id
    assert missing.error.kind == ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_status_view_uses_verified_at(queries, store):
    verified = seed(store, "U1", DocumentType.IDENTITY_DOCUMENT, DocumentStatus.VERIFIED)
    uploaded = seed(store, "U1", DocumentType.OTHER, DocumentStatus.UPLOADED)

    verified_view = (await queries.get_document_status(verified.id)).value
    uploaded_view = (await queries.get_document_status(uploaded.id)).value

    assert verified_view.status == DocumentStatus.VERIFIED
    assert verified_view.updated_at == VERIFIED_AT
    assert uploaded_view.updated_at == UPLOADED_AT


@pytest.mark.asyncio
async def test_required_documents_need_identity_and_residence(queries, store):
    seed(store, "U1", DocumentType.IDENTITY_DOCUMENT, DocumentStatus.VERIFIED)
    seed(store, "U1", DocumentType.PROOF_OF_RESIDENCE, DocumentStatus.PENDING_VERIFICATION)

    assert (await queries.has_required_documents("U1")).value is False

    seed(store, "U1", DocumentType.PROOF_OF_RESIDENCE, DocumentStatus.VERIFIED)
    assert (await queries.has_required_documents("U1")).value is True


@pytest.mark.asyncio
async def test_owner_flags(queries, store):
    seed(store, "U1", DocumentType.OTHER, DocumentStatus.PENDING_VERIFICATION)
    seed(store, "U2", DocumentType.OTHER, DocumentStatus.VERIFIED)

    assert (await queries.has_pending_documents("U1")).value is True
    assert (await queries.has_verified_documents("U1")).value is False
    assert (await queries.has_verified_documents("U2")).value is True
    assert (await queries.has_pending_documents("nobody")).value is False


@pytest.mark.asyncio
async def test_status_counts(queries, store):
    seed(store, "U1", DocumentType.OTHER, DocumentStatus.UPLOADED)
    seed(store, "U1", DocumentType.OTHER, DocumentStatus.PENDING_VERIFICATION)
    seed(store, "U1", DocumentType.IDENTITY_DOCUMENT, DocumentStatus.VERIFIED)
    seed(store, "U1", DocumentType.CRIMINAL_RECORD, DocumentStatus.REJECTED)
    seed(store, "U1", DocumentType.PROOF_OF_RESIDENCE, DocumentStatus.REJECTED)

    counts = (await queries.get_status_counts("U1")).value

    assert counts == DocumentStatusCounts(total=5, uploaded=1, pending=1, verified=1, rejected=2)
    assert (await queries.get_status_counts("nobody")).value == DocumentStatusCounts()


@pytest.mark.asyncio
async def test_list_owner_documents(queries, store):
    seed(store, "U1", DocumentType.OTHER, DocumentStatus.UPLOADED)
    seed(store, "U2", DocumentType.OTHER, DocumentStatus.UPLOADED)

    documents = (await queries.list_owner_documents("U1")).value

    assert [d.owner_id for d in documents] == ["U1"]
