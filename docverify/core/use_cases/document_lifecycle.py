"""
Use Case: Document Lifecycle

Dono da máquina de estados do Document. Orquestra storage (grants),
análise externa e notificações; aplica os guards de autorização e
de status nas transições de aprovação/recusa.

Guard chain for approve/reject, in order:
  1. document exists        -> NOT_FOUND
  2. actor authenticated    -> UNAUTHORIZED
  3. actor is admin         -> FORBIDDEN
  4. status is pending      -> BAD_REQUEST (names the current status)
  5. (reject) reason given  -> BAD_REQUEST
"""

import asyncio
import logging
import time
from typing import Iterable

from docverify.core.entities.actor import DEFAULT_ADMIN_ROLES, ActorClaims
from docverify.core.entities.analysis_result import AnalysisOutcome
from docverify.core.entities.document import Document, DocumentStatus, DocumentType, utcnow
from docverify.core.entities.events import DOCUMENT_APPROVED, DOCUMENT_REJECTED, DocumentEvent
from docverify.core.interfaces.access_token_issuer import IAccessTokenIssuer
from docverify.core.interfaces.document_analyzer import IDocumentAnalyzer
from docverify.core.interfaces.document_store import IDocumentStore
from docverify.core.interfaces.notification_sink import INotificationSink
from docverify.core.result import ErrorKind, Result
from docverify.core.use_cases.boundary import use_case_boundary

logger = logging.getLogger(__name__)

ANALYZABLE_STATUSES = (DocumentStatus.UPLOADED, DocumentStatus.PENDING_VERIFICATION)


class DocumentLifecycleUseCase:
    """
    Use Case: Create → MarkAsPendingVerification → RequestAnalysis → Approve | Reject.

    Dependency Injection: todas as dependências vêm pelo construtor.
    Nothing is persisted until the store's save_changes completes, so a
    cancelled call leaves the stored document as it was.
    """

    def __init__(
        self,
        store: IDocumentStore,
        token_issuer: IAccessTokenIssuer,
        analyzer: IDocumentAnalyzer,
        notifications: INotificationSink,
        admin_roles: Iterable[str] = DEFAULT_ADMIN_ROLES,
        min_confidence: float = 0.7,
        analysis_timeout_seconds: float | None = 60.0,
    ):
        self._store = store
        self._tokens = token_issuer
        self._analyzer = analyzer
        self._notifications = notifications
        self._admin_roles = tuple(admin_roles)
        self._min_confidence = min_confidence
        self._analysis_timeout = analysis_timeout_seconds

    # ── Create ─────────────────────────────────────────────

    @use_case_boundary("create document")
    async def create(
        self,
        owner_id: str,
        document_type: DocumentType,
        file_name: str,
        storage_path: str,
    ) -> Result[Document]:
        document = Document.create(owner_id, document_type, file_name, storage_path)
        await self._store.add(document)
        await self._store.save_changes()
        logger.info(f"Document {document.id} created for owner {owner_id} [{document_type.value}]")
        return Result.ok(document)

    # ── Transitions ────────────────────────────────────────

    @use_case_boundary("mark document as pending verification")
    async def mark_as_pending_verification(self, document_id: str) -> Result[Document]:
        document = await self._store.get_by_id(document_id)
        if document is None:
            return self._not_found(document_id)

        transition = document.mark_as_pending_verification()
        if transition.is_failure:
            return Result.from_error(transition.error)

        await self._persist(document)
        logger.info(f"Document {document_id} is pending verification")
        return Result.ok(document)

    @use_case_boundary("request document analysis")
    async def request_analysis(self, document_id: str) -> Result[Document]:
        """
        Run (or re-run) field extraction and merge the result.

        1. Documento precisa estar Uploaded ou PendingVerification
        2. Arquivo precisa existir no storage
        3. Download grant → analisador externo
        4. Uploaded passa a PendingVerification; extracted_data é sobrescrito
        """
        document = await self._store.get_by_id(document_id)
        if document is None:
            return self._not_found(document_id)

        if document.status not in ANALYZABLE_STATUSES:
            return Result.bad_request(
                f"Document cannot be analyzed while status is {document.status.value}"
            )

        exists = await self._tokens.exists(document.storage_path)
        if exists.is_failure:
            return Result.from_error(exists.error)
        if not exists.value:
            logger.warning(f"File not found in storage for document {document_id}: {document.storage_path}")
            return Result.bad_request("Document file has not been uploaded to storage yet")

        grant = await self._tokens.issue_download_grant(document.storage_path)
        if grant.is_failure:
            return Result.from_error(grant.error)

        t0 = time.perf_counter()
        try:
            analysis = await asyncio.wait_for(
                self._analyzer.analyze(grant.value.url, document.document_type),
                timeout=self._analysis_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Analysis timed out for document {document_id} after {self._analysis_timeout}s")
            return Result.internal(detail="analysis timed out")
        latency_ms = round((time.perf_counter() - t0) * 1000, 2)

        if analysis.is_failure:
            return Result.from_error(analysis.error)
        outcome = analysis.value
        if not outcome.success:
            logger.warning(f"Analysis failed for document {document_id}: {outcome.error_message}")
            return Result.internal(detail=outcome.error_message)

        if document.status == DocumentStatus.UPLOADED:
            document.mark_as_pending_verification()
        recorded = document.record_analysis(self._to_extracted_data(outcome, latency_ms))
        if recorded.is_failure:
            return Result.from_error(recorded.error)

        await self._persist(document)
        logger.info(
            f"Analysis merged into document {document_id} "
            f"(fields={len(outcome.extracted_fields)}, confidence={outcome.confidence:.0%})"
        )
        return Result.ok(document)

    @use_case_boundary("approve document")
    async def approve(self, document_id: str, actor: ActorClaims, notes: str | None = None) -> Result[Document]:
        document = await self._store.get_by_id(document_id)
        if document is None:
            return self._not_found(document_id)

        authorized = self._authorize_admin(actor, "approve")
        if authorized.is_failure:
            return Result.from_error(authorized.error)

        transition = document.approve(notes=notes)
        if transition.is_failure:
            return Result.from_error(transition.error)

        await self._persist(document)
        logger.info(f"Document {document_id} approved by {actor.user_id}")
        await self._notify(DocumentEvent(name=DOCUMENT_APPROVED, document_id=document.id, actor_id=actor.user_id))
        return Result.ok(document)

    @use_case_boundary("reject document")
    async def reject(self, document_id: str, actor: ActorClaims, reason: str) -> Result[Document]:
        document = await self._store.get_by_id(document_id)
        if document is None:
            return self._not_found(document_id)

        authorized = self._authorize_admin(actor, "reject")
        if authorized.is_failure:
            return Result.from_error(authorized.error)

        transition = document.reject(reason)
        if transition.is_failure:
            return Result.from_error(transition.error)

        await self._persist(document)
        logger.info(f"Document {document_id} rejected by {actor.user_id}: {document.rejection_reason}")
        await self._notify(DocumentEvent(
            name=DOCUMENT_REJECTED,
            document_id=document.id,
            actor_id=actor.user_id,
            reason=document.rejection_reason,
        ))
        return Result.ok(document)

    # ── Helpers ────────────────────────────────────────────

    def _authorize_admin(self, actor: ActorClaims | None, action: str) -> Result[None]:
        if actor is None or not actor.authenticated:
            return Result.fail(ErrorKind.UNAUTHORIZED, "Authentication is required")
        if not actor.has_any_role(self._admin_roles):
            logger.warning(f"User {actor.user_id} attempted to {action} a document without admin role")
            return Result.fail(ErrorKind.FORBIDDEN, f"Only administrators can {action} documents")
        return Result.ok()

    async def _persist(self, document: Document) -> None:
        await self._store.update(document)
        await self._store.save_changes()

    async def _notify(self, event: DocumentEvent) -> None:
        # Best-effort: the state change is already committed.
        try:
            await self._notifications.publish(event)
        except Exception as e:
            logger.error(f"Failed to publish {event.name} for document {event.document_id}: {e}")

    def _to_extracted_data(self, outcome: AnalysisOutcome, latency_ms: float) -> dict:
        return {
            "fields": dict(outcome.extracted_fields),
            "confidence": outcome.confidence,
            "summary": outcome.raw_summary,
            "model": outcome.model_id,
            "analyzed_at": utcnow().isoformat(),
            "analysis_ms": latency_ms,
            "low_confidence": outcome.confidence < self._min_confidence,
        }

    @staticmethod
    def _not_found(document_id: str) -> Result[Document]:
        return Result.not_found(f"Document with id {document_id} was not found")
