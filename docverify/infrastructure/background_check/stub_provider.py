"""
Adapter: Stub Background Check Provider

Simulates an asynchronous criminal-record check. Submission creates
a Pending record; the first poll completes it ("no record found"),
later polls return that same completed record.
"""

import logging
import uuid
from datetime import date, datetime
from typing import Callable

from docverify.core.entities.document import utcnow
from docverify.core.interfaces.background_check import (
    BackgroundCheckRecord,
    BackgroundCheckStatus,
    IBackgroundCheckProvider,
    IBackgroundCheckStore,
)

logger = logging.getLogger(__name__)

STUB_DETAILS = "No criminal record found (simulated check)"


class StubBackgroundCheckProvider(IBackgroundCheckProvider):

    def __init__(self, store: IBackgroundCheckStore, clock: Callable[[], datetime] = utcnow):
        self._store = store
        self._clock = clock

    async def submit(self, subject_id: str, full_name: str, birth_date: date) -> BackgroundCheckRecord:
        record = BackgroundCheckRecord(
            request_id=str(uuid.uuid4()),
            status=BackgroundCheckStatus.PENDING,
            subject_id=subject_id,
        )
        await self._store.put(record)
        logger.info(f"Background check submitted: request_id={record.request_id}, subject={subject_id}")
        return record

    async def poll_status(self, request_id: str) -> BackgroundCheckRecord:
        record = await self._store.complete_if_pending(
            request_id, has_record=False, details=STUB_DETAILS, at=self._clock()
        )
        if record is None:
            return BackgroundCheckRecord.not_available(request_id, f"Unknown background check request: {request_id}")
        return record
