"""
Entity: Document Events

Notificações emitidas após uma decisão administrativa já persistida.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime

from docverify.core.entities.document import utcnow

DOCUMENT_APPROVED = "DocumentApproved"
DOCUMENT_REJECTED = "DocumentRejected"


@dataclass(frozen=True)
class DocumentEvent:
    name: str                     # DOCUMENT_APPROVED | DOCUMENT_REJECTED
    document_id: str
    actor_id: str
    timestamp: datetime = field(default_factory=utcnow)
    reason: str | None = None     # só em DocumentRejected

    def to_dict(self) -> dict:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data
