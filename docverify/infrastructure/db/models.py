"""
Database Models (SQLAlchemy).

Tables:
  - documents: Document aggregates (status, timestamps, extracted data)

The `version` column is the mapper's version_id_col: every UPDATE
checks and bumps it, so a concurrent writer fails instead of
silently overwriting.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, JSON, String, Text
from sqlalchemy.orm import DeclarativeBase

from docverify.core.entities.document import Document, DocumentStatus, DocumentType


class Base(DeclarativeBase):
    pass


def _aware(value: datetime | None) -> datetime | None:
    # SQLite devolve datetimes sem timezone
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DocumentRecord(Base):
    """Stores every uploaded document."""
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    document_type = Column(String(40), nullable=False)
    file_name = Column(String(255), nullable=False)
    storage_path = Column(String(512), nullable=False)

    status = Column(String(30), nullable=False, index=True)
    uploaded_at = Column(DateTime(timezone=True), nullable=False)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    extracted_data = Column(JSON, nullable=True)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (
        Index("ix_documents_owner_type", "owner_id", "document_type"),
    )

    def __repr__(self):
        return f"<Document {self.id} [{self.status}] v{self.version}>"

    @classmethod
    def from_entity(cls, document: Document) -> "DocumentRecord":
        record = cls(
            id=document.id,
            owner_id=document.owner_id,
            document_type=document.document_type.value,
            file_name=document.file_name,
            storage_path=document.storage_path,
            uploaded_at=document.uploaded_at,
        )
        record.apply(document)
        return record

    def apply(self, document: Document) -> None:
        """Copy the mutable part of the aggregate onto the row."""
        self.status = document.status.value
        self.verified_at = document.verified_at
        self.rejection_reason = document.rejection_reason
        self.extracted_data = dict(document.extracted_data) if document.extracted_data is not None else None

    def to_entity(self) -> Document:
        return Document(
            id=self.id,
            owner_id=self.owner_id,
            document_type=DocumentType(self.document_type),
            file_name=self.file_name,
            storage_path=self.storage_path,
            status=DocumentStatus(self.status),
            uploaded_at=_aware(self.uploaded_at),
            verified_at=_aware(self.verified_at),
            rejection_reason=self.rejection_reason,
            extracted_data=dict(self.extracted_data) if self.extracted_data is not None else None,
            version=self.version,
        )
