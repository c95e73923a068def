"""
Use Case: Request Upload

Valida o pedido de upload, gera a URL assinada de escrita e cria o
Document (status Uploaded). O cliente envia o arquivo direto ao storage.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePosixPath
from typing import Iterable

from docverify.core.entities.actor import DEFAULT_ADMIN_ROLES, ActorClaims
from docverify.core.entities.document import Document, DocumentType
from docverify.core.interfaces.access_token_issuer import IAccessTokenIssuer
from docverify.core.interfaces.document_store import IDocumentStore
from docverify.core.result import ErrorKind, Result
from docverify.core.use_cases.boundary import use_case_boundary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadRequest:
    """Input do pedido de upload."""
    owner_id: str
    document_type: str
    file_name: str
    content_type: str
    file_size_bytes: int


@dataclass(frozen=True)
class UploadSlot:
    document_id: str
    upload_url: str
    storage_path: str             # chave do objeto, sem credenciais
    expires_at: datetime


@dataclass(frozen=True)
class UploadPolicy:
    allowed_content_types: tuple[str, ...] = ("application/pdf", "image/jpeg", "image/png")
    max_file_size_bytes: int = 10 * 1024 * 1024
    max_file_size_by_type: tuple[tuple[str, int], ...] = ()

    def max_size_for(self, document_type: DocumentType) -> int:
        for name, limit in self.max_file_size_by_type:
            if DocumentType.parse(name) == document_type:
                return limit
        return self.max_file_size_bytes


def build_storage_key(owner_id: str, file_name: str) -> str:
    """documents/{owner_id}/{uuid}{ext}"""
    ext = PurePosixPath(file_name).suffix.lower()
    return f"documents/{owner_id}/{uuid.uuid4()}{ext}"


class RequestUploadUseCase:

    def __init__(
        self,
        store: IDocumentStore,
        token_issuer: IAccessTokenIssuer,
        policy: UploadPolicy | None = None,
        admin_roles: Iterable[str] = DEFAULT_ADMIN_ROLES,
    ):
        self._store = store
        self._tokens = token_issuer
        self._policy = policy or UploadPolicy()
        self._admin_roles = tuple(admin_roles)

    @use_case_boundary("request upload")
    async def execute(self, request: UploadRequest, actor: ActorClaims) -> Result[UploadSlot]:
        # 1. Autorização: dono do documento ou administrador
        if actor is None or not actor.authenticated:
            return Result.fail(ErrorKind.UNAUTHORIZED, "Authentication is required")
        if actor.user_id != request.owner_id and not actor.has_any_role(self._admin_roles):
            logger.warning(
                f"User {actor.user_id} attempted to upload a document for owner {request.owner_id} without authorization"
            )
            return Result.fail(ErrorKind.FORBIDDEN, "You are not authorized to upload documents for this owner")

        # 2. Validação do pedido
        invalid = self._validate(request)
        if invalid is not None:
            return invalid
        document_type = DocumentType.parse(request.document_type)

        # 3. Grant de escrita
        storage_key = build_storage_key(request.owner_id, request.file_name)
        grant = await self._tokens.issue_upload_grant(storage_key, request.content_type)
        if grant.is_failure:
            return Result.from_error(grant.error)

        # 4. Document com status Uploaded
        document = Document.create(request.owner_id, document_type, request.file_name, storage_key)
        await self._store.add(document)
        await self._store.save_changes()

        logger.info(f"Upload slot issued: document={document.id}, owner={request.owner_id}, key={storage_key}")
        return Result.ok(UploadSlot(
            document_id=document.id,
            upload_url=grant.value.url,
            storage_path=storage_key,
            expires_at=grant.value.expires_at,
        ))

    def _validate(self, request: UploadRequest) -> Result[UploadSlot] | None:
        document_type = DocumentType.parse(request.document_type)
        if document_type is None:
            return Result.bad_request(f"Invalid document type: {request.document_type}")

        if not request.file_name or not request.file_name.strip():
            return Result.bad_request("File name is required")

        if request.file_size_bytes <= 0:
            return Result.bad_request("File is empty")
        max_size = self._policy.max_size_for(document_type)
        if request.file_size_bytes > max_size:
            return Result.bad_request(
                f"File too large for {document_type.value}. Maximum: {max_size / (1024 * 1024):.1f}MB"
            )

        if not request.content_type or not request.content_type.strip():
            return Result.bad_request("Content-Type is required")
        media_type = request.content_type.split(";")[0].strip().lower()
        if media_type not in self._policy.allowed_content_types:
            allowed = ", ".join(self._policy.allowed_content_types)
            return Result.bad_request(f"File type not allowed: {media_type}. Allowed types: {allowed}")

        return None
