"""
Contract: Background Check

Verificação de antecedentes criminais feita por um provedor externo
assíncrono. Submit retorna imediatamente; o status é consultado depois.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum


class BackgroundCheckStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    NOT_AVAILABLE = "NotAvailable"


@dataclass(frozen=True)
class BackgroundCheckRecord:
    """Estado de uma solicitação, no formato do provedor externo."""
    request_id: str
    status: BackgroundCheckStatus
    subject_id: str | None = None
    has_record: bool | None = None        # só definido quando Completed
    details: str = ""
    completed_at: datetime | None = None
    error_message: str | None = None

    def completed(self, has_record: bool, details: str, at: datetime) -> "BackgroundCheckRecord":
        return replace(
            self,
            status=BackgroundCheckStatus.COMPLETED,
            has_record=has_record,
            details=details,
            completed_at=at,
        )

    @classmethod
    def not_available(cls, request_id: str, error_message: str) -> "BackgroundCheckRecord":
        return cls(
            request_id=request_id,
            status=BackgroundCheckStatus.NOT_AVAILABLE,
            error_message=error_message,
        )


class IBackgroundCheckStore(ABC):
    """
    Port: Background Check Store

    Registros indexados por request_id. Implementações compartilhadas
    entre tarefas devem ser seguras para acesso concorrente.
    """

    @abstractmethod
    async def get(self, request_id: str) -> BackgroundCheckRecord | None:
        ...

    @abstractmethod
    async def put(self, record: BackgroundCheckRecord) -> None:
        ...

    @abstractmethod
    async def complete_if_pending(
        self, request_id: str, has_record: bool, details: str, at: datetime
    ) -> BackgroundCheckRecord | None:
        """Atomically flip a Pending record to Completed; returns the stored record."""
        ...


class IBackgroundCheckProvider(ABC):
    """
    Port: Background Check Provider

    A production adapter polls a real external job; it must keep the
    same contract (submit never blocks, poll is idempotent once completed).
    """

    @abstractmethod
    async def submit(self, subject_id: str, full_name: str, birth_date: date) -> BackgroundCheckRecord:
        ...

    @abstractmethod
    async def poll_status(self, request_id: str) -> BackgroundCheckRecord:
        ...
