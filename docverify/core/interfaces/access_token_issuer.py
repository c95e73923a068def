"""
Contract: Access Token Issuer

Emite credenciais temporárias e restritas (URLs assinadas) para um
único container de object storage e garante que o container exista
antes do primeiro uso.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from docverify.core.result import Result

UPLOAD_GRANT_TTL = timedelta(hours=1)
DOWNLOAD_GRANT_TTL = timedelta(hours=24)


class GrantPermission(str, Enum):
    CREATE = "Create"
    WRITE = "Write"
    READ = "Read"


UPLOAD_PERMISSIONS = frozenset({GrantPermission.CREATE, GrantPermission.WRITE})
DOWNLOAD_PERMISSIONS = frozenset({GrantPermission.READ})


@dataclass(frozen=True)
class AccessGrant:
    """Credencial de acesso direto a um objeto. Nunca persistida."""
    url: str
    issued_at: datetime
    expires_at: datetime
    permissions: frozenset[GrantPermission]

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class IAccessTokenIssuer(ABC):
    """
    Port: Access Token Issuer

    Upload grants are short-lived and write-only, download grants
    long-lived and read-only. Every grant is generated fresh.
    """

    @abstractmethod
    async def ensure_container(self) -> Result[None]:
        """Create the container once; concurrent callers share one creation."""
        ...

    @abstractmethod
    async def issue_upload_grant(self, object_key: str, content_type: str) -> Result[AccessGrant]:
        """
        Gera URL assinada para upload direto.

        Args:
            object_key: Chave do objeto no container.
            content_type: MIME type que o cliente vai enviar.

        Returns:
            Result com AccessGrant {Create, Write} válido por 1 hora.
        """
        ...

    @abstractmethod
    async def issue_download_grant(self, object_key: str) -> Result[AccessGrant]:
        """Gera URL assinada de leitura, válida por 24 horas."""
        ...

    @abstractmethod
    async def exists(self, object_key: str) -> Result[bool]:
        """A missing object is ok(False); other backend failures are INTERNAL."""
        ...

    @abstractmethod
    async def delete(self, object_key: str) -> Result[None]:
        """Idempotent: deleting a missing object succeeds."""
        ...
