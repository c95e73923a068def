"""
Contract: Notification Sink

Publica eventos de integração (fire-and-forget). Uma falha de
publicação nunca desfaz a mudança de estado já gravada.
"""

from abc import ABC, abstractmethod

from docverify.core.entities.events import DocumentEvent


class INotificationSink(ABC):

    @abstractmethod
    async def publish(self, event: DocumentEvent) -> None:
        ...
