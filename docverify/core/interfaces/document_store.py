"""
Contract: Document Store

Persistência do agregado Document. A implementação é responsável
pelo controle de concorrência otimista (coluna de versão).
"""

from abc import ABC, abstractmethod

from docverify.core.entities.document import Document


class IDocumentStore(ABC):
    """
    Port: Document Store

    Falhas de I/O propagam como exceção; os casos de uso convertem
    em Result INTERNAL.
    """

    @abstractmethod
    async def get_by_id(self, document_id: str) -> Document | None:
        ...

    @abstractmethod
    async def get_by_owner(self, owner_id: str) -> list[Document]:
        ...

    @abstractmethod
    async def add(self, document: Document) -> None:
        ...

    @abstractmethod
    async def update(self, document: Document) -> None:
        ...

    @abstractmethod
    async def exists(self, document_id: str) -> bool:
        ...

    @abstractmethod
    async def save_changes(self) -> None:
        """Commit pending add/update calls as one unit."""
        ...
