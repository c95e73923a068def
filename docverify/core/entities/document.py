"""
Entity: Document

Representa um documento enviado para verificação (aggregate root).
Modelo puro, sem dependência de framework ou banco. Toda mutação
de status passa por um método de transição que devolve Result.

    UPLOADED --mark_as_pending_verification--> PENDING_VERIFICATION
    PENDING_VERIFICATION --approve--> VERIFIED      (terminal)
    PENDING_VERIFICATION --reject--> REJECTED       (terminal)
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from docverify.core.result import Result


class DocumentType(str, Enum):
    IDENTITY_DOCUMENT = "IdentityDocument"
    PROOF_OF_RESIDENCE = "ProofOfResidence"
    CRIMINAL_RECORD = "CriminalRecord"
    OTHER = "Other"

    @classmethod
    def parse(cls, raw: str | None) -> "DocumentType | None":
        """Case-insensitive lookup by value or member name; None if unknown."""
        if not raw:
            return None
        key = raw.strip().lower()
        for member in cls:
            if key in (member.value.lower(), member.name.lower()):
                return member
        return None


class DocumentStatus(str, Enum):
    UPLOADED = "Uploaded"
    PENDING_VERIFICATION = "PendingVerification"
    VERIFIED = "Verified"
    REJECTED = "Rejected"


ALLOWED_TRANSITIONS: dict[DocumentStatus, list[DocumentStatus]] = {
    DocumentStatus.UPLOADED: [DocumentStatus.PENDING_VERIFICATION],
    DocumentStatus.PENDING_VERIFICATION: [DocumentStatus.VERIFIED, DocumentStatus.REJECTED],
    DocumentStatus.VERIFIED: [],
    DocumentStatus.REJECTED: [],
}

TERMINAL_STATUSES = frozenset(s for s, targets in ALLOWED_TRANSITIONS.items() if not targets)


def can_transition(from_status: DocumentStatus, to_status: DocumentStatus) -> bool:
    return to_status in ALLOWED_TRANSITIONS.get(from_status, [])


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Document:
    """Entidade de domínio: Documento enviado para verificação."""
    id: str
    owner_id: str
    document_type: DocumentType
    file_name: str
    storage_path: str                      # chave no storage, nunca a URL assinada
    status: DocumentStatus = DocumentStatus.UPLOADED
    uploaded_at: datetime = field(default_factory=utcnow)
    verified_at: datetime | None = None
    rejection_reason: str | None = None
    extracted_data: dict | None = None
    version: int = 0                       # optimistic concurrency token, owned by the store

    @classmethod
    def create(
        cls,
        owner_id: str,
        document_type: DocumentType,
        file_name: str,
        storage_path: str,
    ) -> "Document":
        return cls(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            document_type=document_type,
            file_name=file_name,
            storage_path=storage_path,
        )

    def _guard(self, target: DocumentStatus) -> Result[None]:
        if not can_transition(self.status, target):
            return Result.bad_request(
                f"Document cannot move to {target.value} from status {self.status.value}"
            )
        return Result.ok()

    def mark_as_pending_verification(self) -> Result[None]:
        guard = self._guard(DocumentStatus.PENDING_VERIFICATION)
        if guard.is_failure:
            return guard
        self.status = DocumentStatus.PENDING_VERIFICATION
        return Result.ok()

    def approve(self, notes: str | None = None, at: datetime | None = None) -> Result[None]:
        guard = self._guard(DocumentStatus.VERIFIED)
        if guard.is_failure:
            return guard
        if notes and notes.strip():
            merged = dict(self.extracted_data or {})
            merged["notes"] = notes.strip()
            self.extracted_data = merged
        self.status = DocumentStatus.VERIFIED
        self.verified_at = at or utcnow()
        return Result.ok()

    def reject(self, reason: str) -> Result[None]:
        guard = self._guard(DocumentStatus.REJECTED)
        if guard.is_failure:
            return guard
        if not reason or not reason.strip():
            return Result.bad_request("A rejection reason is required")
        self.status = DocumentStatus.REJECTED
        self.rejection_reason = reason.strip()
        return Result.ok()

    def record_analysis(self, data: dict) -> Result[None]:
        """Overwrite extracted_data; only legal while pending verification."""
        if self.status != DocumentStatus.PENDING_VERIFICATION:
            return Result.bad_request(
                f"Extracted data cannot change while document is {self.status.value}"
            )
        self.extracted_data = dict(data)
        return Result.ok()
