"""
Adapter: Logging Notification Sink

Publishes document events as structured log lines. Stands in for the
message bus; swap for a broker-backed INotificationSink in production.
"""

import json
import logging

from docverify.core.entities.events import DocumentEvent
from docverify.core.interfaces.notification_sink import INotificationSink

logger = logging.getLogger(__name__)


class LoggingNotificationSink(INotificationSink):

    def __init__(self, channel: str = "documents"):
        self.channel = channel

    async def publish(self, event: DocumentEvent) -> None:
        logger.info(f"[{self.channel}] {event.name}: {json.dumps(event.to_dict())}")
