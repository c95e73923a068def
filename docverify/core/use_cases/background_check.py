"""
Use Case: Background Check Coordinator

Submete verificações de antecedentes e consulta o status.
Poll nunca lança exceção: falhas viram um registro NotAvailable.
"""

import logging
from datetime import date

from docverify.core.interfaces.background_check import BackgroundCheckRecord, IBackgroundCheckProvider

logger = logging.getLogger(__name__)


class BackgroundCheckCoordinator:

    def __init__(self, provider: IBackgroundCheckProvider):
        self._provider = provider

    async def submit(self, subject_id: str, full_name: str, birth_date: date) -> BackgroundCheckRecord:
        """Create a new Pending check; does not wait for completion."""
        record = await self._provider.submit(subject_id, full_name, birth_date)
        logger.info(f"Background check {record.request_id} pending for subject {subject_id}")
        return record

    async def poll_status(self, request_id: str) -> BackgroundCheckRecord:
        if not request_id:
            return BackgroundCheckRecord.not_available("", "Request id is required")
        try:
            return await self._provider.poll_status(request_id)
        except Exception as e:
            logger.error(f"Background check poll failed for {request_id}: {e}")
            return BackgroundCheckRecord.not_available(request_id, "Background check provider unavailable")
